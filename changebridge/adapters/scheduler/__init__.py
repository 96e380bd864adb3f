"""Scheduler adapters for driving periodic health checks."""
