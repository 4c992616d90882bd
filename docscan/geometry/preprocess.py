# docscan/geometry/preprocess.py
from __future__ import annotations
from typing import Dict, Optional, Tuple
import cv2
import numpy as np
from docscan.core.config import merge_cfg

# ----------------------------------------------------------------------------- #
# Pure stages: frame -> gray -> blurred -> thresholded -> closed mask            #
# ----------------------------------------------------------------------------- #

_GRAY_CODES = {
    ("bgr", 3): cv2.COLOR_BGR2GRAY,
    ("bgr", 4): cv2.COLOR_BGRA2GRAY,
    ("rgb", 3): cv2.COLOR_RGB2GRAY,
    ("rgb", 4): cv2.COLOR_RGBA2GRAY,
}

def to_grayscale(frame: np.ndarray, dst: Optional[np.ndarray] = None, order: str = "bgr") -> np.ndarray:
    """
    Single-channel luminance of a uint8 frame. Colour frames are read in
    `order` ("bgr" for BGR/BGRA, "rgb" for RGB/RGBA); gray passes through.
    """
    if frame.ndim == 2:
        return frame
    channels = frame.shape[2]
    if channels == 1:
        return frame[:, :, 0]
    code = _GRAY_CODES.get((order, channels))
    if code is None:
        raise ValueError(f"Unsupported frame shape {frame.shape} for channel order {order!r}")
    return cv2.cvtColor(frame, code, dst=dst)

def blur(gray: np.ndarray, ksize: int = 5, dst: Optional[np.ndarray] = None) -> np.ndarray:
    return cv2.GaussianBlur(gray, (ksize, ksize), 0, dst=dst)

def binarize(blurred: np.ndarray, block_size: int = 11, c: float = 2,
             dst: Optional[np.ndarray] = None) -> np.ndarray:
    """Locally thresholded, inverted: pixels darker than their neighbourhood become 255."""
    return cv2.adaptiveThreshold(blurred, 255, cv2.ADAPTIVE_THRESH_GAUSSIAN_C,
                                 cv2.THRESH_BINARY_INV, block_size, c, dst=dst)

def close_gaps(mask: np.ndarray, kernel: np.ndarray, dst: Optional[np.ndarray] = None) -> np.ndarray:
    """Dilate then erode to bridge small breaks in the document boundary."""
    return cv2.morphologyEx(mask, cv2.MORPH_CLOSE, kernel, dst=dst)

def closing_kernel(ksize: int = 5) -> np.ndarray:
    return np.ones((ksize, ksize), np.uint8)

def preprocess(frame: np.ndarray, cfg: Optional[Dict] = None) -> np.ndarray:
    """Frame to binary mask (0/255, same height and width). Allocates fresh buffers."""
    cfg = merge_cfg(cfg)
    gray = to_grayscale(frame, order=cfg["channel_order"])
    blurred = blur(gray, int(cfg["blur"]["ksize"]))
    thresh = binarize(blurred, int(cfg["threshold"]["block_size"]), float(cfg["threshold"]["c"]))
    return close_gaps(thresh, closing_kernel(int(cfg["morph"]["ksize"])))


class Preprocessor:
    """
    Same stages as `preprocess`, writing into scratch buffers that live across
    ticks. Buffers are reallocated only when the frame size changes.

    The returned mask is one of those buffers: it stays valid until the next call.
    """

    def __init__(self, cfg: Optional[Dict] = None):
        self.cfg = merge_cfg(cfg)
        self._ksize = int(self.cfg["blur"]["ksize"])
        self._block = int(self.cfg["threshold"]["block_size"])
        self._c = float(self.cfg["threshold"]["c"])
        self._order = self.cfg["channel_order"]
        self._kernel = closing_kernel(int(self.cfg["morph"]["ksize"]))
        self._hw: Optional[Tuple[int, int]] = None

    def _ensure_buffers(self, hw: Tuple[int, int]) -> None:
        if self._hw == hw:
            return
        self._gray = np.empty(hw, np.uint8)
        self._blurred = np.empty(hw, np.uint8)
        self._thresh = np.empty(hw, np.uint8)
        self._mask = np.empty(hw, np.uint8)
        self._hw = hw

    def __call__(self, frame: np.ndarray) -> np.ndarray:
        self._ensure_buffers(tuple(frame.shape[:2]))
        gray = to_grayscale(frame, dst=self._gray, order=self._order)
        blurred = blur(gray, self._ksize, dst=self._blurred)
        thresh = binarize(blurred, self._block, self._c, dst=self._thresh)
        return close_gaps(thresh, self._kernel, dst=self._mask)
