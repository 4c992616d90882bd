# docscan/geometry/rectify.py
from __future__ import annotations
from typing import Sequence, Tuple
import cv2
import numpy as np
from docscan.core.contracts import Corners
from docscan.core.errors import DegenerateTransform
from docscan.geometry.detect import is_degenerate

# Letter-ish page at ~100 dpi; (width, height)
DEFAULT_OUTPUT_SIZE: Tuple[int, int] = (850, 1100)


def target_rect(width: int, height: int) -> np.ndarray:
    """Destination corners TL, TR, BR, BL for a `width` × `height` output."""
    return np.array([[0, 0],
                     [width, 0],
                     [width, height],
                     [0, height]], dtype=np.float32)

def perspective_matrix(corners: Corners, size: Tuple[int, int] = DEFAULT_OUTPUT_SIZE) -> np.ndarray:
    """
    3×3 homography mapping tl→(0,0), tr→(W,0), br→(W,H), bl→(0,H).
    Raises DegenerateTransform if the corners cannot span a plane.
    """
    src = np.asarray(corners.pts, np.float32).reshape(4, 2)
    if not np.isfinite(src).all() or is_degenerate(src):
        raise DegenerateTransform()
    w, h = size
    return cv2.getPerspectiveTransform(src, target_rect(int(w), int(h)))

def warp_document(
    frame: np.ndarray,
    corners: Corners,
    *,
    size: Tuple[int, int] = DEFAULT_OUTPUT_SIZE,
    border_value: Sequence[int] = (0, 0, 0),
) -> np.ndarray:
    """
    Perspective-warp the document bounded by `corners` into a flat page.

    Args:
        frame: raw BGR (or gray/BGRA) frame the corners were detected on.
        corners: TL, TR, BR, BL in frame pixels.
        size: (width, height) of the output.
        border_value: fill for pixels that map outside the frame.

    Returns:
        Rectified image of shape (height, width[, channels]).
    """
    M = perspective_matrix(corners, size)
    w, h = int(size[0]), int(size[1])
    return cv2.warpPerspective(frame, M, (w, h), flags=cv2.INTER_LINEAR,
                               borderMode=cv2.BORDER_CONSTANT,
                               borderValue=tuple(int(v) for v in border_value))
