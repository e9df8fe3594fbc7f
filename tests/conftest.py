"""Synthetic rasters shared by the tracing tests."""

import numpy as np
import pytest

from river_trace import ArraySampler


WATER = (60, 90, 160)
LAND = (30, 120, 40)
WHITE = (255, 255, 255)
BLACK = (0, 0, 0)


def solid(width, height, color):
    img = np.zeros((height, width, 3), dtype=np.uint8)
    img[:, :] = color
    return img


@pytest.fixture
def flat_sampler():
    """120 x 120 single-colour image."""
    return ArraySampler(solid(120, 120, WATER))


@pytest.fixture
def open_water_sampler():
    """300 x 300 single-colour image, wider than the centering probe."""
    return ArraySampler(solid(300, 300, WATER))


@pytest.fixture
def stripe_sampler():
    """200 x 100 land with a 20 px water stripe on rows 40..59."""
    img = solid(200, 100, LAND)
    img[40:60, :] = WATER
    return ArraySampler(img)


@pytest.fixture
def gap_stripe_sampler():
    """Same stripe, interrupted by land on columns 110..129."""
    img = solid(200, 100, LAND)
    img[40:60, :] = WATER
    img[40:60, 110:130] = LAND
    return ArraySampler(img)


@pytest.fixture
def bend_sampler():
    """200 x 200 black image with a white L: east along rows 90..109, then south on columns 90..109."""
    img = solid(200, 200, BLACK)
    img[90:110, 20:110] = WHITE
    img[90:190, 90:110] = WHITE
    return ArraySampler(img)


@pytest.fixture
def meander_sampler():
    """240 x 160 land with a sinusoidal 12 px river."""
    width, height = 240, 160
    img = solid(width, height, LAND)
    ys, xs = np.mgrid[0:height, 0:width]
    center = 80.0 + 25.0 * np.sin(xs / 30.0)
    img[np.abs(ys - center) < 6.0] = WATER
    return ArraySampler(img)


@pytest.fixture
def meander_seed():
    return (120, int(round(80.0 + 25.0 * np.sin(120 / 30.0))))
