"""Exception hierarchy for the spectral engine.

Every failure is a distinct, recoverable subclass of :class:`SpectrumError`.
Where a failure is naturally a bad value or a missing key the class also
derives from the matching builtin so generic ``except ValueError`` callers
keep working.
"""

from __future__ import annotations


class SpectrumError(Exception):
    pass


class InvalidConfigurationError(SpectrumError, ValueError):
    """Line count, window or frequency bounds are unusable."""


class InvalidInputError(SpectrumError, ValueError):
    """Waveform is too short, too long or has a bad sample rate."""


class OutOfRangeError(SpectrumError, ValueError):
    """Band bounds are reversed or fall outside the spectrum."""


class InvalidOperationError(SpectrumError):
    """Quantity transition past either end of the integration chain."""


class InsufficientDataError(SpectrumError):
    """No spectral line rises above the noise floor in the search band."""


class NotFoundError(SpectrumError, KeyError):
    """No stored spectrum exists for the requested timestamp."""

    def __str__(self) -> str:
        # KeyError quotes its argument; keep the plain message.
        return str(self.args[0]) if self.args else ""
