"""Remove a known semi-transparent white watermark by reverse alpha blending."""

from .core.alpha_map import MaskSet, OpacityMask, build_mask, get_mask_set, load_mask
from .core.blend import apply, composite
from .core.errors import AssetError, CleanwaterError, ImageLoadError, SkipReason, Unchanged
from .core.params import Parameters, SizeMode, clamp_gain
from .core.position import Anchor, Placement, Variant, select, select_variant
from .core.remover import process

__version__ = "0.1.0"

__all__ = [
    "Anchor",
    "AssetError",
    "CleanwaterError",
    "ImageLoadError",
    "MaskSet",
    "OpacityMask",
    "Parameters",
    "Placement",
    "SizeMode",
    "SkipReason",
    "Unchanged",
    "Variant",
    "apply",
    "build_mask",
    "clamp_gain",
    "composite",
    "get_mask_set",
    "load_mask",
    "process",
    "select",
    "select_variant",
]
