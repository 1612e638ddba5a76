class CaptureError(Exception):
    """Raised when a page could not be captured; no Observation exists."""


class InvalidTargetError(CaptureError):
    """The target is not an http(s) URL."""


class CaptureClosedError(CaptureError):
    """Evidence was recorded on a session that has already been finalized."""
