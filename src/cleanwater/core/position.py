from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING

from . import (
    LARGE_IMAGE_THRESHOLD,
    LARGE_MARGIN,
    LARGE_MASK_ASSET,
    LARGE_WATERMARK_SIZE,
    SMALL_MARGIN,
    SMALL_MASK_ASSET,
    SMALL_WATERMARK_SIZE,
)
from .errors import SkipReason

if TYPE_CHECKING:
    from .alpha_map import MaskSet, OpacityMask

logger = logging.getLogger(__name__)


class Variant(Enum):
    """Known watermark variants and their fixed geometry."""

    SMALL = "small"
    LARGE = "large"

    @property
    def size(self) -> int:
        return LARGE_WATERMARK_SIZE if self is Variant.LARGE else SMALL_WATERMARK_SIZE

    @property
    def margin(self) -> int:
        return LARGE_MARGIN if self is Variant.LARGE else SMALL_MARGIN

    @property
    def asset_name(self) -> str:
        return LARGE_MASK_ASSET if self is Variant.LARGE else SMALL_MASK_ASSET


@dataclass(frozen=True)
class Anchor:
    """Top-left pixel where the mask footprint starts inside the image."""

    x: int
    y: int


@dataclass(frozen=True)
class Placement:
    """A selected mask and where it lands in a given image."""

    variant: Variant
    mask: OpacityMask
    anchor: Anchor


def select_variant(
    image_width: int,
    image_height: int,
    forced: Variant | None = None,
) -> Variant:
    """
    Pick the watermark variant for an image.

    A forced variant always wins. Otherwise the large variant is used only
    when both dimensions exceed 1024px; a 1024x1024 image is small.
    """
    if forced is not None:
        return forced

    if image_width > LARGE_IMAGE_THRESHOLD and image_height > LARGE_IMAGE_THRESHOLD:
        return Variant.LARGE
    return Variant.SMALL


def calculate_anchor(
    image_width: int,
    image_height: int,
    variant: Variant,
    mask: OpacityMask,
) -> Anchor:
    """Anchor the mask in the bottom-right corner, inset by the variant margin."""
    x = image_width - variant.margin - mask.width
    y = image_height - variant.margin - mask.height
    return Anchor(x=x, y=y)


def select(
    image_width: int,
    image_height: int,
    masks: MaskSet,
    forced: Variant | None = None,
) -> Placement | SkipReason:
    """
    Select the mask and anchor for an image.

    Returns SkipReason.IMAGE_TOO_SMALL when the image cannot hold the mask
    plus its margin; the caller must then leave the image untouched.
    """
    variant = select_variant(image_width, image_height, forced)
    mask = masks.for_variant(variant)
    anchor = calculate_anchor(image_width, image_height, variant, mask)

    if anchor.x < 0 or anchor.y < 0:
        logger.debug(
            "Skipping %dx%d image: too small for %s watermark",
            image_width,
            image_height,
            variant.value,
        )
        return SkipReason.IMAGE_TOO_SMALL

    logger.debug(
        "Selected %s watermark at (%d, %d) for %dx%d image",
        variant.value,
        anchor.x,
        anchor.y,
        image_width,
        image_height,
    )
    return Placement(variant=variant, mask=mask, anchor=anchor)
