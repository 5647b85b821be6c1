import pytest

from skip_analyze.geometry import clamp, distance_px, percentile


def test_distance_px_is_euclidean():
    assert distance_px(0, 0, 3, 4) == pytest.approx(5.0)
    assert distance_px(10, 10, 10, 10) == 0.0


def test_percentile_empty_is_zero():
    assert percentile([], 95) == 0.0


def test_percentile_uses_floor_index_without_interpolation():
    values = [float(v) for v in range(1, 11)]  # 1..10
    # floor(0.95 * 9) = 8 -> 9.0
    assert percentile(values, 95) == 9.0
    assert percentile(reversed(values), 95) == 9.0
    assert percentile([7.0], 95) == 7.0
    assert percentile(values, 0) == 1.0
    assert percentile(values, 100) == 10.0


def test_clamp():
    assert clamp(-1, 0, 100) == 0
    assert clamp(150, 0, 100) == 100
    assert clamp(42.5, 0, 100) == 42.5
