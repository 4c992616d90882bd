"""
Synthetic scenes shared by the tests. Everything is drawn on the fly, so no
test assets are required.
"""
from __future__ import annotations
from typing import List, Optional

import cv2
import numpy as np
import pytest

FRAME_W, FRAME_H = 640, 480

# Slightly skewed A4-ish page, TL, TR, BR, BL
PAGE = np.array([[200, 60], [430, 80], [440, 420], [190, 400]], dtype=np.int32)


def draw_page(page: np.ndarray = PAGE, bg: int = 40, fg: int = 230) -> np.ndarray:
    frame = np.full((FRAME_H, FRAME_W, 3), bg, np.uint8)
    cv2.fillConvexPoly(frame, page.astype(np.int32), (fg, fg, fg))
    return frame


class FakeSource:
    """Frame source replaying a list of frames; the last one repeats."""

    def __init__(self, frames: List[Optional[np.ndarray]]):
        self.frames = list(frames)
        self.reads = 0
        self.closed = False

    @property
    def size(self):
        return FRAME_W, FRAME_H

    def read(self) -> Optional[np.ndarray]:
        self.reads += 1
        if len(self.frames) > 1:
            return self.frames.pop(0)
        return self.frames[0]

    def close(self) -> None:
        self.closed = True


@pytest.fixture
def page_frame() -> np.ndarray:
    return draw_page()


@pytest.fixture
def blank_frame() -> np.ndarray:
    return np.full((FRAME_H, FRAME_W, 3), 40, np.uint8)


@pytest.fixture
def page_corners() -> np.ndarray:
    return PAGE.astype(np.float32)


@pytest.fixture
def make_source():
    return FakeSource


@pytest.fixture
def make_page():
    return draw_page
