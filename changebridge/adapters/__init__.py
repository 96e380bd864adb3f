"""Adapter implementations for the ServiceNow change request adapter.

Adapters connect the core to the outside world:
- transport: ServiceNow Table API over httpx
- scheduler: periodic health checks
- cli: human-initiated commands
"""
