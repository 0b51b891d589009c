import numpy as np
import pytest
from PIL import Image

from cleanwater.core.alpha_map import MaskSet, OpacityMask, build_mask, get_mask_set, load_mask
from cleanwater.core.errors import AssetError
from cleanwater.core.position import Variant

from conftest import make_overlay


def test_opacity_is_max_of_rgb_and_ignores_alpha():
    overlay = np.array(
        [[[10, 200, 30, 0], [255, 0, 0, 255]],
         [[0, 0, 0, 128], [51, 102, 51, 7]]],
        dtype=np.uint8,
    )

    mask = build_mask(overlay)

    expected = np.array([[200, 255], [0, 102]], dtype=np.float32) / 255.0
    np.testing.assert_allclose(mask.values, expected, rtol=1e-6)


def test_dimensions_match_overlay_exactly():
    overlay = np.zeros((7, 13, 3), dtype=np.uint8)

    mask = build_mask(overlay)

    assert (mask.width, mask.height) == (13, 7)


def test_source_is_not_mutated():
    overlay = make_overlay(48)
    before = overlay.copy()

    build_mask(overlay)

    np.testing.assert_array_equal(overlay, before)


def test_pil_image_and_array_give_same_mask():
    overlay = make_overlay(48)

    from_array = build_mask(overlay)
    from_image = build_mask(Image.fromarray(overlay))

    np.testing.assert_array_equal(from_array.values, from_image.values)


def test_grayscale_overlay_is_used_directly():
    overlay = np.array([[0, 255], [51, 102]], dtype=np.uint8)

    mask = build_mask(overlay)

    np.testing.assert_allclose(mask.values, overlay / 255.0, rtol=1e-6)


def test_mask_values_are_read_only():
    mask = build_mask(make_overlay(48))

    assert mask.values.dtype == np.float32
    with pytest.raises(ValueError):
        mask.values[0, 0] = 0.5


def test_zero_area_overlay_is_an_asset_error():
    with pytest.raises(AssetError):
        build_mask(np.zeros((0, 48, 3), dtype=np.uint8))


def test_opacity_mask_rejects_out_of_range_values():
    with pytest.raises(ValueError):
        OpacityMask(np.full((4, 4), 1.5, dtype=np.float32))


def test_load_mask_from_png(tmp_path):
    path = tmp_path / "overlay.png"
    overlay = make_overlay(48)
    Image.fromarray(overlay).save(path)

    mask = load_mask(path)

    np.testing.assert_array_equal(mask.values, build_mask(overlay).values)


def test_load_missing_mask_is_an_asset_error(tmp_path):
    with pytest.raises(AssetError, match="not found"):
        load_mask(tmp_path / "missing.png")


def test_load_corrupt_mask_is_an_asset_error(tmp_path):
    path = tmp_path / "mask_48.png"
    path.write_bytes(b"definitely not a png")

    with pytest.raises(AssetError, match="decode"):
        load_mask(path)


def test_mask_set_loads_both_variants(mask_dir):
    masks = MaskSet.load(mask_dir)

    assert (masks.small.width, masks.small.height) == (48, 48)
    assert (masks.large.width, masks.large.height) == (96, 96)
    assert masks.for_variant(Variant.SMALL) is masks.small
    assert masks.for_variant(Variant.LARGE) is masks.large


def test_mask_set_fails_when_either_asset_is_missing(mask_dir):
    (mask_dir / Variant.LARGE.asset_name).unlink()

    with pytest.raises(AssetError):
        MaskSet.load(mask_dir)


def test_mask_set_rejects_wrong_dimensions():
    with pytest.raises(AssetError, match="48x48"):
        MaskSet(small=build_mask(make_overlay(40)), large=build_mask(make_overlay(96)))


def test_get_mask_set_is_cached(mask_dir):
    first = get_mask_set(mask_dir)
    second = get_mask_set(str(mask_dir))

    assert first is second


def test_get_mask_set_does_not_cache_failures(tmp_path):
    with pytest.raises(AssetError):
        get_mask_set(tmp_path)

    for variant in Variant:
        Image.fromarray(make_overlay(variant.size)).save(tmp_path / variant.asset_name)

    assert get_mask_set(tmp_path).small.width == 48
