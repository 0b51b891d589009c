from dataclasses import dataclass
from enum import Enum

from . import DEFAULT_GAIN, GAIN_RANGE
from .position import Variant


class SizeMode(str, Enum):
    """User-facing watermark size choice."""

    AUTO = "auto"
    SMALL = "small"
    LARGE = "large"

    @property
    def forced_variant(self) -> Variant | None:
        if self is SizeMode.AUTO:
            return None
        return Variant(self.value)


@dataclass
class Parameters:
    """
    Adjustable removal settings, passed to ``process`` on every call.

    forced_variant: Watermark variant to use regardless of image size,
        or None to pick by image dimensions.
    gain: Multiplier on the mask opacity. Callers should keep it within
        the UI range via ``clamp_gain``; the kernel does not check it.
    """

    forced_variant: Variant | None = None
    gain: float = DEFAULT_GAIN


def clamp_gain(value: float) -> float:
    """Clamp a user-supplied gain into the supported range."""
    low, high = GAIN_RANGE
    return min(max(value, low), high)
