"""Bundled reference overlays: mask_48.png and mask_96.png, white logo on black."""

from importlib import resources
from pathlib import Path


def get_asset_path(filename: str) -> Path:
    """Filesystem path of a bundled overlay. The file is not required to exist."""
    return Path(str(resources.files(__name__).joinpath(filename)))
