"""Fake implementations of core ports for testing.

These in-memory implementations allow core domain logic to be tested
without external dependencies:

- FakeTransportPort: Canned responses and errors for table calls
- EventRecorder: Captured status events for assertion
"""

from .events import EventRecorder
from .transport import FakeTransportPort

__all__ = [
    "EventRecorder",
    "FakeTransportPort",
]
