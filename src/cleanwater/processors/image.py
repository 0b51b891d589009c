import logging
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path

import numpy as np
from numpy.typing import NDArray
from PIL import Image, UnidentifiedImageError

from ..core.alpha_map import MaskSet, get_mask_set
from ..core.blend import composite
from ..core.errors import ImageLoadError, ImageSaveError, SkipReason, Unchanged
from ..core.params import Parameters
from ..core.position import select
from ..core.remover import process

SUPPORTED_IMAGE_FORMATS = {".png", ".jpg", ".jpeg", ".webp", ".bmp", ".tiff", ".gif"}

logger = logging.getLogger(__name__)

# Pillow modes holding 16-bit (or wider integer) single-channel samples
WIDE_GRAYSCALE_MODES = {"I", "I;16", "I;16L", "I;16B", "I;16N"}

# Asked before an existing output file is replaced; False keeps it
ConfirmOverwrite = Callable[[Path], bool]


@dataclass(frozen=True)
class ImageResult:
    """Outcome of processing one file."""

    input_path: Path
    output_path: Path | None
    skipped: SkipReason | None = None
    declined: bool = False


def is_supported_image(path: Path) -> bool:
    """Check if file is a supported image format."""
    return path.suffix.lower() in SUPPORTED_IMAGE_FORMATS


def _to_rgba(img: Image.Image) -> NDArray[np.uint8]:
    if img.mode in WIDE_GRAYSCALE_MODES:
        # Pillow clips these to 255 on convert(); keep the top 8 bits instead
        wide = np.clip(np.asarray(img, dtype=np.int64), 0, 65535)
        gray = (wide >> 8).astype(np.uint8)
        rgba = np.empty(gray.shape + (4,), dtype=np.uint8)
        rgba[:, :, :3] = gray[:, :, np.newaxis]
        rgba[:, :, 3] = 255
        return rgba

    # Convert to RGBA (handles RGB, palette, grayscale, etc.)
    if img.mode != "RGBA":
        img = img.convert("RGBA")
    return np.array(img, dtype=np.uint8)


def load_image(path: Path) -> NDArray[np.uint8]:
    """
    Load an image as an RGBA uint8 array.

    16-bit grayscale images are scaled down to 8 bits per channel.

    Raises:
        ImageLoadError: If the file is missing or cannot be decoded
    """
    try:
        with Image.open(path) as img:
            return _to_rgba(img)
    except (UnidentifiedImageError, OSError) as e:
        raise ImageLoadError(f"Cannot open image {path}: {e}") from e


def save_image(image_array: NDArray[np.uint8], output_path: Path) -> None:
    """
    Save a pixel buffer losslessly as PNG.

    Raises:
        ImageSaveError: If the file cannot be written
    """
    try:
        Image.fromarray(image_array).save(output_path, format="PNG")
    except OSError as e:
        raise ImageSaveError(f"Cannot write image {output_path}: {e}") from e


def default_output_path(input_path: Path, suffix: str) -> Path:
    return input_path.parent / f"{input_path.stem}{suffix}.png"


def png_output_path(output_path: Path) -> Path:
    """Force a .png extension, since results are always encoded as PNG."""
    if output_path.suffix.lower() == ".png":
        return output_path
    png_path = output_path.with_suffix(".png")
    logger.warning("Output is written as PNG: using %s instead of %s", png_path, output_path)
    return png_path


def _may_write(output_path: Path, confirm_overwrite: ConfirmOverwrite | None) -> bool:
    if confirm_overwrite is None or not output_path.exists():
        return True
    return confirm_overwrite(output_path)


def process_image(
    input_path: Path,
    output_path: Path | None = None,
    suffix: str = "_cleaned",
    params: Parameters | None = None,
    masks: MaskSet | None = None,
    workers: int = 1,
    confirm_overwrite: ConfirmOverwrite | None = None,
) -> ImageResult:
    """
    Process a single image to remove watermark.

    Args:
        input_path: Path to input image
        output_path: Optional explicit output path. If None, uses input name with suffix.
            A non-PNG extension is replaced with .png.
        suffix: Suffix to add to filename if output_path not specified
        params: Variant override and gain
        masks: Loaded mask set. If None, the bundled assets are used.
        workers: Threads used by the compositor
        confirm_overwrite: Asked only when a result is ready and the output
            already exists. If None, existing files are overwritten.

    Returns:
        ImageResult; output_path is None and nothing is written when the
        image was too small to carry the watermark

    Raises:
        AssetError: If the watermark masks cannot be loaded
        ImageLoadError: If the input image cannot be decoded
        ImageSaveError: If the result cannot be written
    """
    if masks is None:
        masks = get_mask_set()

    if output_path is None:
        output_path = default_output_path(input_path, suffix)
    output_path = png_output_path(output_path)

    image_array = load_image(input_path)
    result = process(image_array, masks, params, workers=workers)

    if isinstance(result, Unchanged):
        logger.info("Left %s unchanged (%s)", input_path, result.reason.value)
        return ImageResult(input_path=input_path, output_path=None, skipped=result.reason)

    if not _may_write(output_path, confirm_overwrite):
        return ImageResult(input_path=input_path, output_path=output_path, declined=True)

    save_image(result, output_path)
    logger.info("Saved %s", output_path)
    return ImageResult(input_path=input_path, output_path=output_path)


def simulate_watermark(
    input_path: Path,
    output_path: Path | None = None,
    suffix: str = "_watermarked",
    params: Parameters | None = None,
    masks: MaskSet | None = None,
    confirm_overwrite: ConfirmOverwrite | None = None,
) -> ImageResult:
    """
    Blend the white watermark onto an image at the position ``process_image`` expects.

    Useful for checking removal on images that never carried the watermark.
    """
    if masks is None:
        masks = get_mask_set()
    if params is None:
        params = Parameters()

    if output_path is None:
        output_path = default_output_path(input_path, suffix)
    output_path = png_output_path(output_path)

    image_array = load_image(input_path)
    height, width = image_array.shape[:2]
    placement = select(width, height, masks, params.forced_variant)

    if isinstance(placement, SkipReason):
        return ImageResult(input_path=input_path, output_path=None, skipped=placement)

    if not _may_write(output_path, confirm_overwrite):
        return ImageResult(input_path=input_path, output_path=output_path, declined=True)

    composite(image_array, placement.mask, placement.anchor, params.gain)
    save_image(image_array, output_path)
    return ImageResult(input_path=input_path, output_path=output_path)
