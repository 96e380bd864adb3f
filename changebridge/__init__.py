"""ServiceNow change request adapter.

Reports connectivity health to the host platform through ONLINE/OFFLINE
events and reshapes remote change request records into a canonical shape.
"""

__version__ = "0.1.0"
