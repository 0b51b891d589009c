# Reverse alpha blending constants
ALPHA_THRESHOLD: float = 0.002  # Skip if alpha below this
MAX_ALPHA: float = 0.99  # Clamp alpha to prevent division by near-zero
LOGO_VALUE: int = 255  # White watermark value

# Resolution threshold (both axes must exceed it for the large variant)
LARGE_IMAGE_THRESHOLD: int = 1024

# Watermark sizes and distance from the bottom-right corner
SMALL_WATERMARK_SIZE: int = 48
LARGE_WATERMARK_SIZE: int = 96
SMALL_MARGIN: int = 32
LARGE_MARGIN: int = 64

# Reference overlay assets, one per variant
SMALL_MASK_ASSET: str = "mask_48.png"
LARGE_MASK_ASSET: str = "mask_96.png"

# Strength control
DEFAULT_GAIN: float = 1.0
MIN_GAIN: float = 0.0
MAX_GAIN: float = 3.0
GAIN_RANGE: tuple[float, float] = (MIN_GAIN, MAX_GAIN)
