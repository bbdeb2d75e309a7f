"""Shared test fixtures."""

import random

import pytest
from PIL import Image

from assets import asset_from_image

# (width, height) pixel sizes for aspect ratios 1:1, 1.5:1, 0.8:1, 2:1, 1:1.3
SCENARIO_SIZES = [(300, 300), (450, 300), (240, 300), (600, 300), (300, 390)]


def make_asset(width, height, color=(200, 80, 40), name=""):
    return asset_from_image(Image.new("RGB", (width, height), color), name=name)


class FakeRecorder:
    """Capture sink that keeps frame sizes in memory."""

    def __init__(self, path, width, height):
        self.path = path
        self.size = (width, height)
        self.frames = []
        self.started = False
        self.stopped = False

    def start(self):
        self.started = True

    def capture(self, frame):
        self.frames.append(frame.size)

    def stop(self):
        self.stopped = True
        return self.path


class FakeClock:
    def __init__(self, now=0.0):
        self.now = now

    def __call__(self):
        return self.now


@pytest.fixture
def rng():
    return random.Random(1234)


@pytest.fixture
def scenario_assets():
    return [make_asset(w, h, name=f"img{i}.png") for i, (w, h) in enumerate(SCENARIO_SIZES)]


@pytest.fixture
def many_assets():
    sizes = [(300, 200), (200, 300), (400, 400), (500, 250), (240, 320), (320, 240)]
    return [make_asset(*sizes[i % len(sizes)], name=f"many{i}.png") for i in range(14)]
