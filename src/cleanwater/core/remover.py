import numpy as np
from numpy.typing import NDArray

from .alpha_map import MaskSet
from .blend import apply
from .errors import SkipReason, Unchanged
from .params import Parameters
from .position import select


def process(
    image: NDArray[np.uint8],
    masks: MaskSet,
    params: Parameters | None = None,
    workers: int = 1,
) -> NDArray[np.uint8] | Unchanged:
    """
    Remove the watermark from an image.

    Works on a copy; the caller's buffer is never modified.

    Args:
        image: uint8 array (H, W, 4) RGBA or (H, W, 3) RGB
        masks: Loaded mask set
        params: Variant override and gain (defaults: auto, gain 1.0)
        workers: Threads used by the compositor

    Returns:
        The corrected buffer, or Unchanged if the image is too small to
        carry the watermark
    """
    if params is None:
        params = Parameters()

    height, width = image.shape[:2]
    placement = select(width, height, masks, params.forced_variant)

    if isinstance(placement, SkipReason):
        return Unchanged(placement)

    result = image.copy()
    apply(result, placement.mask, placement.anchor, params.gain, workers=workers)
    return result
