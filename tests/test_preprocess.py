from __future__ import annotations

import cv2
import numpy as np
import pytest

from docscan.geometry.contours import extract_polygons
from docscan.geometry.preprocess import Preprocessor, preprocess, to_grayscale


def test_mask_is_binary_and_frame_sized(page_frame):
    mask = preprocess(page_frame)
    assert mask.shape == page_frame.shape[:2]
    assert mask.dtype == np.uint8
    assert set(np.unique(mask)) <= {0, 255}
    assert mask.any()

def test_page_interior_is_background(page_frame):
    mask = preprocess(page_frame)
    # flat paper well inside the boundary has no edges
    assert mask[240, 315] == 0
    assert mask[200:280, 260:370].max() == 0

@pytest.mark.parametrize("value", [0, 255])
def test_flat_frames_give_no_contours(value):
    frame = np.full((480, 640, 3), value, np.uint8)
    mask = preprocess(frame)
    assert not mask.any()
    assert extract_polygons(mask) == []

def test_gray_and_bgra_inputs_match_bgr(page_frame):
    expected = preprocess(page_frame)
    gray = cv2.cvtColor(page_frame, cv2.COLOR_BGR2GRAY)
    bgra = cv2.cvtColor(page_frame, cv2.COLOR_BGR2BGRA)
    assert np.array_equal(preprocess(gray), expected)
    assert np.array_equal(preprocess(bgra), expected)

def test_to_grayscale_rejects_two_channel_frames():
    with pytest.raises(ValueError):
        to_grayscale(np.zeros((10, 10, 2), np.uint8))

def test_preprocessor_matches_pure_pipeline(page_frame):
    pre = Preprocessor()
    assert np.array_equal(pre(page_frame), preprocess(page_frame))

def test_preprocessor_reuses_scratch_buffers(page_frame, blank_frame):
    pre = Preprocessor()
    first = pre(page_frame)
    second = pre(blank_frame)
    assert np.shares_memory(first, second)
    assert not second.any()

    smaller = pre(np.full((240, 320, 3), 40, np.uint8))
    assert smaller.shape == (240, 320)
    assert not np.shares_memory(smaller, second)

def test_small_gap_in_boundary_is_bridged():
    # dark frame line with a 2 px break
    frame = np.full((200, 200), 230, np.uint8)
    cv2.rectangle(frame, (40, 40), (160, 160), 20, 3)
    frame[37:44, 98:100] = 230
    mask = preprocess(frame)
    polys = extract_polygons(mask)
    assert len(polys) == 1
    assert polys[0].n_vertices == 4

def test_rgba_frames_use_rgb_luminance_weights():
    # pure red: 0.299 * 255 as RGB, 0.114 * 255 if misread as BGR
    rgba = np.zeros((4, 4, 4), np.uint8)
    rgba[..., 0] = 255
    rgba[..., 3] = 255
    assert to_grayscale(rgba, order="rgb")[0, 0] == 76
    assert to_grayscale(rgba)[0, 0] == 29

def test_rgb_channel_order_detects_the_same_page(page_frame):
    rgba = cv2.cvtColor(page_frame, cv2.COLOR_BGR2RGBA)
    assert np.array_equal(preprocess(rgba, {"channel_order": "rgb"}), preprocess(page_frame))
    pre = Preprocessor({"channel_order": "rgb"})
    assert np.array_equal(pre(rgba), preprocess(page_frame))
