from .image import (
    SUPPORTED_IMAGE_FORMATS,
    ImageResult,
    is_supported_image,
    load_image,
    png_output_path,
    process_image,
    simulate_watermark,
)

__all__ = [
    "process_image",
    "simulate_watermark",
    "load_image",
    "is_supported_image",
    "ImageResult",
    "png_output_path",
    "SUPPORTED_IMAGE_FORMATS",
]
