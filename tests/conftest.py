"""Shared fixtures for the phototaxis tests."""

import numpy as np
import pytest

from env.light_env import LightEnv, Light, Rect


@pytest.fixture
def empty_env():
    """900 x 600 arena, no obstacles, light in the centre."""
    return LightEnv(width=900, height=600, obstacles=[], light=Light(450, 300, 110))


@pytest.fixture
def box_env():
    """Arena with one 50 x 100 box east of (100, 300)."""
    return LightEnv(
        width=900, height=600,
        obstacles=[Rect(200, 250, 50, 100)],
        light=Light(700, 300, 110)
    )


@pytest.fixture
def rng():
    return np.random.RandomState(1234)
