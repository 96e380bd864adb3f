"""Command-line interface adapters.

Provides CLI commands against a configured adapter instance:
- healthcheck: Report ONLINE/OFFLINE for the remote instance
- get: Retrieve change records in canonical shape
- post: Create a change record from the configured payload
"""
