import pytest

from cleanwater.core import GAIN_RANGE, MAX_GAIN, MIN_GAIN
from cleanwater.core.params import Parameters, SizeMode, clamp_gain
from cleanwater.core.position import Variant


def test_defaults():
    params = Parameters()

    assert params.forced_variant is None
    assert params.gain == 1.0


def test_parameters_are_mutable():
    params = Parameters()
    params.gain = 2.0
    params.forced_variant = Variant.LARGE

    assert params == Parameters(forced_variant=Variant.LARGE, gain=2.0)


@pytest.mark.parametrize(
    ("mode", "expected"),
    [(SizeMode.AUTO, None), (SizeMode.SMALL, Variant.SMALL), (SizeMode.LARGE, Variant.LARGE)],
)
def test_size_mode_maps_to_forced_variant(mode, expected):
    assert mode.forced_variant is expected


@pytest.mark.parametrize(("value", "expected"), [(-1.0, 0.0), (0.0, 0.0), (1.25, 1.25), (3.0, 3.0), (7.5, 3.0)])
def test_clamp_gain(value, expected):
    assert clamp_gain(value) == expected


def test_gain_range_matches_bounds():
    assert GAIN_RANGE == (MIN_GAIN, MAX_GAIN) == (0.0, 3.0)
