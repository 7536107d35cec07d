"""Shared fixtures: a noise stereo pair with a known constant displacement."""

from __future__ import annotations

import pytest

from benchmarks.throughput import create_stereo_pair
from imageview.geometry import BBox


@pytest.fixture
def true_shift():
    return (3, -2)


@pytest.fixture
def shifted_pair(true_shift):
    """64x64 noise where right[y - 2, x + 3] == left[y, x]."""
    return create_stereo_pair(64, 64, true_shift, seed=7)


@pytest.fixture
def search_region():
    return BBox.from_corners(-10, -10, 10, 10)


@pytest.fixture
def kernel_size():
    return (7, 7)


@pytest.fixture
def interior():
    # Half kernel plus the shift magnitude, rounded up
    return BBox.from_corners(8, 8, 56, 56)
