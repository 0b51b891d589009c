from concurrent.futures import ThreadPoolExecutor

import numpy as np
from numpy.typing import NDArray

from . import ALPHA_THRESHOLD, LOGO_VALUE, MAX_ALPHA
from .alpha_map import OpacityMask
from .position import Anchor


def _check_buffer(buffer: NDArray[np.uint8]) -> None:
    if not isinstance(buffer, np.ndarray) or buffer.dtype != np.uint8:
        raise ValueError("Pixel buffer must be a uint8 numpy array")
    if buffer.ndim != 3 or buffer.shape[2] not in (3, 4):
        raise ValueError(f"Pixel buffer must be shaped (H, W, 3) or (H, W, 4), got {buffer.shape}")


def _clip_footprint(
    buffer: NDArray[np.uint8],
    mask: OpacityMask,
    anchor: Anchor,
) -> tuple[NDArray[np.uint8], NDArray[np.float32]] | None:
    """
    Intersect the mask footprint with the buffer.

    Returns a writable view of the covered image region and the matching
    slice of mask values, or None when they do not overlap.
    """
    img_h, img_w = buffer.shape[:2]

    x0 = max(anchor.x, 0)
    y0 = max(anchor.y, 0)
    x1 = min(anchor.x + mask.width, img_w)
    y1 = min(anchor.y + mask.height, img_h)

    if x0 >= x1 or y0 >= y1:
        return None

    region = buffer[y0:y1, x0:x1]
    alpha = mask.values[y0 - anchor.y : y1 - anchor.y, x0 - anchor.x : x1 - anchor.x]
    return region, alpha


def _unblend(region: NDArray[np.uint8], alpha: NDArray[np.float32], gain: float) -> None:
    """Reverse alpha blending over one region, writing the RGB channels in place."""
    alpha = alpha * np.float32(gain)

    # Only update pixels with significant alpha
    mask = alpha >= ALPHA_THRESHOLD
    if not mask.any():
        return

    # Clamp alpha to prevent division by near-zero
    alpha_expanded = np.minimum(alpha, MAX_ALPHA)[:, :, np.newaxis]

    rgb = region[:, :, :3]
    observed = rgb.astype(np.float32)

    # original = (watermarked - alpha * LOGO_VALUE) / (1 - alpha)
    restored = (observed - alpha_expanded * LOGO_VALUE) / (1.0 - alpha_expanded)
    restored = np.clip(np.rint(restored), 0, 255).astype(np.uint8)

    rgb[mask] = restored[mask]


def apply(
    buffer: NDArray[np.uint8],
    mask: OpacityMask,
    anchor: Anchor,
    gain: float,
    workers: int = 1,
) -> None:
    """
    Remove the watermark from a pixel buffer using reverse alpha blending.

    Formula: original = (watermarked - alpha * 255) / (1 - alpha)

    The buffer is modified in place. Mask cells that fall outside the buffer
    are skipped, as are cells whose alpha * gain is below the noise floor.
    The alpha channel of RGBA buffers is left untouched. Applying twice
    distorts the image; always start from the untouched original.

    Args:
        buffer: Image as uint8 numpy array (H, W, C) in RGB/RGBA format
        mask: Opacity mask for the selected watermark variant
        anchor: Top-left corner of the mask inside the buffer
        gain: Multiplier applied to every mask value
        workers: Number of threads; rows are split into disjoint bands
    """
    _check_buffer(buffer)

    clipped = _clip_footprint(buffer, mask, anchor)
    if clipped is None:
        return
    region, alpha = clipped

    rows = region.shape[0]
    bands = min(max(workers, 1), rows)
    if bands == 1:
        _unblend(region, alpha, gain)
        return

    bounds = np.linspace(0, rows, bands + 1, dtype=int)
    with ThreadPoolExecutor(max_workers=bands) as pool:
        futures = [
            pool.submit(_unblend, region[start:stop], alpha[start:stop], gain)
            for start, stop in zip(bounds[:-1], bounds[1:])
        ]
        for future in futures:
            future.result()


def composite(
    buffer: NDArray[np.uint8],
    mask: OpacityMask,
    anchor: Anchor,
    gain: float = 1.0,
) -> None:
    """
    Blend the white watermark onto a pixel buffer in place.

    Formula: watermarked = alpha * 255 + (1 - alpha) * original

    This is the forward operation that ``apply`` inverts; it uses the same
    footprint clipping and leaves the alpha channel untouched.
    """
    _check_buffer(buffer)

    clipped = _clip_footprint(buffer, mask, anchor)
    if clipped is None:
        return
    region, alpha = clipped

    alpha_expanded = np.clip(alpha * np.float32(gain), 0.0, 1.0)[:, :, np.newaxis]

    rgb = region[:, :, :3]
    blended = alpha_expanded * LOGO_VALUE + (1.0 - alpha_expanded) * rgb.astype(np.float32)
    rgb[...] = np.clip(np.rint(blended), 0, 255).astype(np.uint8)
