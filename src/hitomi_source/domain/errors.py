"""Error taxonomy surfaced by the gallery source.

Callers see exactly one of these per failed operation; nothing here is
retried or partially recovered by the source itself.
"""

from __future__ import annotations


class HitomiSourceError(RuntimeError):
    """Base class for every failure raised by hitomi-source."""


class FormatError(HitomiSourceError, ValueError):
    """Remote payload does not match the expected binary or markup layout."""


class RangeHeaderError(FormatError):
    """Ranged response is missing or carries an unparseable Content-Range."""


class TransportError(HitomiSourceError):
    """HTTP request failed or returned a non-success status."""

    def __init__(self, message: str, *, url: str, status_code: int | None = None):
        super().__init__(message)
        self.url = url
        self.status_code = status_code


class ScriptEvaluationError(HitomiSourceError):
    """Descrambling script raised, timed out, or returned a non-string value."""


class UnsupportedOperationError(HitomiSourceError, NotImplementedError):
    """Legacy single-response entry point that this source does not implement."""
