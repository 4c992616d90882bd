# docscan/app/overlay.py
from __future__ import annotations
from typing import Dict, Optional, Tuple
import cv2
import numpy as np

from docscan.core.contracts import Detection


def draw_quad(img: np.ndarray, quad: np.ndarray, color: Tuple[int, int, int], thickness: int = 8) -> np.ndarray:
    q = np.round(np.asarray(quad, np.float32)).astype(np.int32).reshape(-1, 1, 2)
    cv2.polylines(img, [q], True, color, thickness, lineType=cv2.LINE_AA)
    return img

def render_frame(frame: np.ndarray, detection: Optional[Detection], cfg: Dict) -> np.ndarray:
    """Copy of `frame` with the accepted document outlined; BGR out regardless of input channels."""
    rgb = cfg.get("channel_order", "bgr") == "rgb"
    if frame.ndim == 2:
        canvas = cv2.cvtColor(frame, cv2.COLOR_GRAY2BGR)
    elif frame.shape[2] == 4:
        canvas = cv2.cvtColor(frame, cv2.COLOR_RGBA2BGR if rgb else cv2.COLOR_BGRA2BGR)
    elif rgb:
        canvas = cv2.cvtColor(frame, cv2.COLOR_RGB2BGR)
    else:
        canvas = frame.copy()
    if detection is not None and detection.found and detection.quad is not None:
        outline = cfg["outline"]
        draw_quad(canvas, detection.quad.pts, tuple(outline["color"]), int(outline["thickness"]))
    return canvas

def draw_status(img: np.ndarray, text: str, highlight: bool = False) -> np.ndarray:
    color = (166, 191, 0) if highlight else (200, 200, 200)
    (tw, th), base = cv2.getTextSize(text, cv2.FONT_HERSHEY_SIMPLEX, 0.8, 2)
    x = max(0, (img.shape[1] - tw) // 2)
    cv2.rectangle(img, (x - 10, 10), (x + tw + 10, 20 + th + base), (0, 0, 0), -1)
    cv2.putText(img, text, (x, 15 + th), cv2.FONT_HERSHEY_SIMPLEX, 0.8, color, 2, cv2.LINE_AA)
    return img
