from __future__ import annotations

from enum import Enum

"""SubmitState enum for the import session's submit action.

The session tracks one outstanding submission at a time; a submit request
while SUBMITTING is refused instead of issuing a second remote call.
"""


class SubmitState(Enum):
    """Status enum for the submission lifecycle.

    State transitions: idle → submitting → (idle | error)

    - IDLE: Nothing outstanding; the last submission (if any) succeeded
    - SUBMITTING: A remote call is in flight
    - ERROR: The last submission failed; preview and payload are kept for retry
    """
    IDLE = "idle"
    SUBMITTING = "submitting"
    ERROR = "error"
