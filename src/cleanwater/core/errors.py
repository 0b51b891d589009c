from dataclasses import dataclass
from enum import Enum


class CleanwaterError(Exception):
    """Base class for errors raised by cleanwater."""


class AssetError(CleanwaterError):
    """A reference overlay could not be loaded or decoded.

    Fatal for the whole feature: no image may be processed until both
    mask variants load.
    """


class ImageLoadError(CleanwaterError):
    """An input image could not be opened or decoded."""


class ImageSaveError(CleanwaterError):
    """A result image could not be written."""


class SkipReason(Enum):
    """Why an image was left untouched. Not an error."""

    IMAGE_TOO_SMALL = "image_too_small"


@dataclass(frozen=True)
class Unchanged:
    """Returned by ``process`` in place of a buffer when nothing was done."""

    reason: SkipReason
