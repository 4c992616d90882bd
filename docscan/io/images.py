"""
Image I/O helpers: reading stills (BGR, as OpenCV expects) and encoding /
saving rectified scans as JPEG.
"""

from __future__ import annotations
from datetime import datetime
from pathlib import Path
from typing import Optional
import cv2
import numpy as np


def load_image(path: str | Path) -> np.ndarray:
    """
    Load an image from disk (BGR).
    Raises FileNotFoundError if not found.
    """
    img = cv2.imread(str(path), cv2.IMREAD_COLOR)
    if img is None:
        raise FileNotFoundError(f"Could not read image at: {path}")
    return img


def encode_jpeg(image: np.ndarray, quality: int = 92) -> bytes:
    ok, buf = cv2.imencode(".jpg", image, [int(cv2.IMWRITE_JPEG_QUALITY), int(quality)])
    if not ok:
        raise ValueError(f"JPEG encoding failed for image of shape {image.shape}")
    return buf.tobytes()


def scan_filename(when: Optional[datetime] = None) -> str:
    when = when or datetime.now()
    return f"scan-{when.strftime('%Y-%m-%dT%H-%M-%S')}.jpg"


def save_scan(jpeg: bytes, out_dir: str | Path, when: Optional[datetime] = None) -> Path:
    """Write JPEG bytes as <out_dir>/scan-<timestamp>.jpg and return the path."""
    out = Path(out_dir)
    out.mkdir(parents=True, exist_ok=True)
    path = out / scan_filename(when)
    path.write_bytes(jpeg)
    return path
