"""Errors surfaced to the HTTP layer.

Lookup failures are not exceptions: they come back as ``NotFound`` results
(see ``api.transfers.dto.results``) so every caller handles them explicitly.
"""


class HandoffError(Exception):
    pass


class RateLimited(HandoffError):
    """The client id is blocked after too many failed redemptions."""

    def __init__(self, remaining_seconds: int):
        super().__init__(f"Client blocked for {remaining_seconds}s")
        self.remaining_seconds = remaining_seconds


class StorageFault(HandoffError):
    """Persistence or byte-store failure. Reported as a generic error, never retried."""
