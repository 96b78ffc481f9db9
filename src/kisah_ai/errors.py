"""Exception hierarchy for the AI request pipeline.

Repositories raise these; the resolver decides whether a failure is
recovered locally (fallback) or surfaced to the HTTP boundary.
"""


class KisahAIError(Exception):
    """Base class for all pipeline errors."""


class RemoteCapabilityError(KisahAIError):
    """The hosted model could not produce a usable answer."""


class RemoteUnavailableError(RemoteCapabilityError):
    """Network failure or timeout while talking to the hosted model."""


class RemoteRejectedError(RemoteCapabilityError):
    """The hosted model answered with a non-success status."""

    def __init__(self, status_code: int, detail: str = "") -> None:
        super().__init__(f"Remote capability returned {status_code}: {detail[:200]}")
        self.status_code = status_code
        self.detail = detail


class RemoteMalformedError(RemoteCapabilityError):
    """The hosted model answered with a body that is not valid JSON."""
