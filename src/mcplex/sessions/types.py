"""Data types for the session and dispatch layer."""

from dataclasses import dataclass
from typing import Any


@dataclass
class DispatchResult:
    """Outcome of dispatching one POSTed message or batch.

    Attributes:
        session_id: The session the message was bound to. None when a handshake
            failed and no session was kept.
        response: JSON-RPC response (a list for batches), or None when the
            message only carried notifications or client responses.
    """

    session_id: str | None
    response: dict[str, Any] | list[dict[str, Any]] | None = None

    @property
    def accepted_only(self) -> bool:
        """True when there is nothing to send back beyond an acknowledgement."""
        return self.response is None
