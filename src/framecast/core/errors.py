"""Error taxonomy shared by every stage of a render job.

A job either succeeds completely or fails with exactly one of these.
Cleanup problems are never raised; they are logged where they happen.
"""

from __future__ import annotations


class FramecastError(RuntimeError):
    """Runtime error with a stable error code."""

    code = "framecast_error"

    def __init__(self, message: str, code: str | None = None) -> None:
        super().__init__(message)
        if code is not None:
            self.code = code


class RequestValidationError(FramecastError):
    """Malformed or out-of-bound input, rejected before any work starts."""

    code = "invalid_request"


class SurfaceError(FramecastError):
    """Content could not be loaded into, or driven on, the rendering surface."""

    code = "surface_failed"


class CaptureError(FramecastError):
    """A still image for a planned frame could not be written."""

    code = "capture_failed"


class EncodeError(FramecastError):
    """The external encoder failed, was missing, or timed out."""

    code = "encode_failed"
