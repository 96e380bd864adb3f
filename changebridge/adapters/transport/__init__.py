"""Transport adapters performing authenticated calls to the remote service."""
