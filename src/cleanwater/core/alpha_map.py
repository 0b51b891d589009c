from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import BinaryIO

import numpy as np
from numpy.typing import NDArray
from PIL import Image, UnidentifiedImageError

from ..assets import get_asset_path
from .errors import AssetError
from .position import Variant

logger = logging.getLogger(__name__)

# Cache mask sets to avoid reloading, keyed by asset directory (None = bundled)
_mask_set_cache: dict[Path | None, MaskSet] = {}


@dataclass(frozen=True, eq=False)
class OpacityMask:
    """Per-pixel watermark opacity, a read-only (height, width) grid in [0, 1]."""

    values: NDArray[np.float32]

    def __post_init__(self) -> None:
        values = np.array(self.values, dtype=np.float32)

        if values.ndim != 2 or values.size == 0:
            raise ValueError(f"Opacity mask must be a non-empty 2-D grid, got shape {values.shape}")
        if not np.all((values >= 0.0) & (values <= 1.0)):
            raise ValueError("Opacity mask values must lie in [0, 1]")

        values.setflags(write=False)
        object.__setattr__(self, "values", values)

    @property
    def width(self) -> int:
        return self.values.shape[1]

    @property
    def height(self) -> int:
        return self.values.shape[0]


def build_mask(overlay: Image.Image | NDArray[np.uint8]) -> OpacityMask:
    """
    Calculate an opacity mask from a reference overlay image.

    The reference overlay is the white watermark rendered on black, so the
    brightest colour channel encodes opacity: alpha = max(R, G, B) / 255.
    The overlay's own alpha channel is ignored.

    Args:
        overlay: PIL image, or uint8 array shaped (H, W), (H, W, 3) or (H, W, 4)

    Returns:
        OpacityMask with the same dimensions as the overlay

    Raises:
        AssetError: If the overlay has zero area or an unusable shape
    """
    if isinstance(overlay, Image.Image) and overlay.mode not in ("RGB", "RGBA"):
        overlay = overlay.convert("RGB")

    img_array = np.asarray(overlay, dtype=np.float32)

    if img_array.ndim == 3 and img_array.shape[2] >= 3:
        alpha_map = np.max(img_array[:, :, :3], axis=2) / 255.0
    elif img_array.ndim == 2:
        alpha_map = img_array / 255.0
    else:
        raise AssetError(f"Unsupported overlay shape {img_array.shape}")

    if alpha_map.size == 0:
        raise AssetError("Overlay image has zero area")

    try:
        return OpacityMask(alpha_map.astype(np.float32))
    except ValueError as e:
        raise AssetError(f"Invalid overlay image: {e}") from e


def load_mask(source: str | Path | BinaryIO) -> OpacityMask:
    """
    Decode a reference overlay image and build its opacity mask.

    Raises:
        AssetError: If the file is missing, cannot be decoded or is empty
    """
    name = getattr(source, "name", source)

    try:
        with Image.open(source) as img:
            mask = build_mask(img.convert("RGB"))
    except FileNotFoundError as e:
        raise AssetError(f"Watermark asset not found: {name}") from e
    except (UnidentifiedImageError, OSError) as e:
        raise AssetError(f"Cannot decode watermark asset: {name}") from e

    logger.debug("Loaded %dx%d opacity mask from %s", mask.width, mask.height, name)
    return mask


@dataclass(frozen=True, eq=False)
class MaskSet:
    """
    Both opacity masks, loaded and validated.

    Holding a MaskSet means the feature is ready: there is no partially
    loaded state.
    """

    small: OpacityMask
    large: OpacityMask

    def __post_init__(self) -> None:
        for variant in Variant:
            mask = self.for_variant(variant)
            if (mask.width, mask.height) != (variant.size, variant.size):
                raise AssetError(
                    f"{variant.value} watermark mask must be {variant.size}x{variant.size}, "
                    f"got {mask.width}x{mask.height}"
                )

    def for_variant(self, variant: Variant) -> OpacityMask:
        if variant is Variant.LARGE:
            return self.large
        return self.small

    @classmethod
    def load(cls, directory: str | Path | None = None) -> MaskSet:
        """
        Load both variant masks from a directory, or from the bundled assets.

        Raises:
            AssetError: If either asset fails to load
        """

        def asset(variant: Variant) -> Path:
            if directory is None:
                return get_asset_path(variant.asset_name)
            return Path(directory) / variant.asset_name

        return cls(
            small=load_mask(asset(Variant.SMALL)),
            large=load_mask(asset(Variant.LARGE)),
        )


def get_mask_set(directory: str | Path | None = None) -> MaskSet:
    """Get cached mask set or load if not cached."""
    key = Path(directory).resolve() if directory is not None else None
    if key not in _mask_set_cache:
        _mask_set_cache[key] = MaskSet.load(key)
    return _mask_set_cache[key]
