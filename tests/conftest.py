"""Shared fixtures: synthetic reference overlays, no bundled assets needed."""

from pathlib import Path

import numpy as np
import pytest
from PIL import Image

from cleanwater.core.alpha_map import MaskSet, OpacityMask, build_mask
from cleanwater.core.position import Variant

# Peak opacity of the synthetic overlays
PEAK_OPACITY = 0.6


def make_overlay(size: int, peak: float = PEAK_OPACITY) -> np.ndarray:
    """White radial blob on black, RGBA, like a reference overlay render."""
    yy, xx = np.mgrid[0:size, 0:size]
    center = (size - 1) / 2
    dist = np.hypot(xx - center, yy - center) / (size / 2)
    gray = np.rint(np.clip(1.0 - dist, 0.0, 1.0) * peak * 255).astype(np.uint8)

    overlay = np.zeros((size, size, 4), dtype=np.uint8)
    overlay[:, :, :3] = gray[:, :, np.newaxis]
    overlay[:, :, 3] = 255
    return overlay


def single_cell_mask(size: int, value: float, cell: tuple[int, int] = (0, 0)) -> OpacityMask:
    values = np.zeros((size, size), dtype=np.float32)
    values[cell[1], cell[0]] = value
    return OpacityMask(values)


def write_mask_dir(directory: Path) -> Path:
    for variant in Variant:
        Image.fromarray(make_overlay(variant.size)).save(directory / variant.asset_name)
    return directory


@pytest.fixture
def mask_set() -> MaskSet:
    return MaskSet(
        small=build_mask(make_overlay(Variant.SMALL.size)),
        large=build_mask(make_overlay(Variant.LARGE.size)),
    )


@pytest.fixture
def mask_dir(tmp_path: Path) -> Path:
    directory = tmp_path / "masks"
    directory.mkdir()
    return write_mask_dir(directory)


@pytest.fixture
def rng() -> np.random.Generator:
    return np.random.default_rng(1234)
