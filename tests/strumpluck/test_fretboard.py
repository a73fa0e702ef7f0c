import math
from typing import Optional

import pytest
from hypothesis import given
from hypothesis import strategies as st

from strumpluck.fretboard import (
    StringPos,
    fret_from_relative_x,
    fret_relative_x,
    locate,
    string_index_from_y,
    string_y,
)
from tests.strumpluck.hypo import configure_hypo

configure_hypo()


@pytest.mark.parametrize(
    "y, index",
    [
        (40.0, 0),
        (59.0, 0),
        (60.0, 1),
        (240.0, 5),
        (-12.0, 0),
        (999.0, 5),
        (math.nan, 0),
    ],
)
def test_string_index_from_y(y: float, index: int) -> None:
    assert string_index_from_y(y) == index


@pytest.mark.parametrize(
    "relative_x, fret",
    [
        (0.1, 0),
        (0.5, 6),
        (0.92, 12),
        (0.0, 0),
        (1.0, 12),
        (None, 0),
        (math.nan, 0),
    ],
)
def test_fret_from_relative_x(relative_x: Optional[float], fret: int) -> None:
    assert fret_from_relative_x(relative_x) == fret


def test_locate() -> None:
    assert locate(120.0, 0.5) == StringPos(2, 6)
    assert locate(500.0, None) == StringPos(5, 0)


@given(st.floats(allow_nan=True, allow_infinity=True))
def test_string_index_is_total(y: float) -> None:
    assert 0 <= string_index_from_y(y) <= 5


@given(st.one_of(st.none(), st.floats(allow_nan=True, allow_infinity=True)))
def test_fret_is_total(relative_x: Optional[float]) -> None:
    assert 0 <= fret_from_relative_x(relative_x) <= 12


@pytest.mark.parametrize("index", range(6))
def test_string_y_maps_back(index: int) -> None:
    assert string_index_from_y(string_y(index)) == index


@pytest.mark.parametrize("fret", range(13))
def test_fret_relative_x_maps_back(fret: int) -> None:
    assert fret_from_relative_x(fret_relative_x(fret)) == fret


@given(
    st.floats(allow_nan=False, allow_infinity=False),
    st.floats(allow_nan=False, allow_infinity=False),
)
def test_string_index_never_decreases_down_the_surface(y1: float, y2: float) -> None:
    low, high = sorted((y1, y2))
    assert string_index_from_y(low) <= string_index_from_y(high)


@given(st.floats(min_value=0.1, max_value=0.9), st.floats(min_value=0.1, max_value=0.9))
def test_fret_never_decreases_along_the_neck(x1: float, x2: float) -> None:
    low, high = sorted((x1, x2))
    assert fret_from_relative_x(low) <= fret_from_relative_x(high)
