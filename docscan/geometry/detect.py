# docscan/geometry/detect.py
from __future__ import annotations
from typing import Callable, Dict, Iterable, Optional, Tuple
import logging
import math
import cv2
import numpy as np
from docscan.core.config import merge_cfg
from docscan.core.contracts import Corners, Detection, Polygon, Quad
from docscan.core.errors import DegenerateTransform, NoDocumentFound, RejectedGeometry
from docscan.geometry.contours import extract_polygons
from docscan.geometry.preprocess import preprocess

log = logging.getLogger(__name__)

_DEGENERATE_EPS = 1e-3

# ----------------------------------------------------------------------------- #
# Candidate selection                                                            #
# ----------------------------------------------------------------------------- #

def _is_convex(pts: np.ndarray) -> bool:
    return bool(cv2.isContourConvex(np.asarray(pts).reshape(-1, 1, 2)))

def select_candidate(polygons: Iterable[Polygon], min_area: float = 10000.0) -> Optional[Quad]:
    """
    Largest convex 4-vertex polygon whose area exceeds `min_area`.

    Both the boundary area and the area of the simplified quad must clear the
    floor. First maximum wins on exact ties.
    """
    best: Optional[Quad] = None
    for poly in polygons:
        if poly.area <= min_area:
            continue
        if poly.n_vertices != 4 or not _is_convex(poly.pts):
            continue
        quad_area = abs(cv2.contourArea(poly.pts.reshape(-1, 1, 2)))
        if quad_area <= min_area:
            continue
        if best is None or poly.area > best.area:
            best = Quad(pts=poly.pts.copy(), area=poly.area)
    return best

# ----------------------------------------------------------------------------- #
# Plausibility                                                                   #
# ----------------------------------------------------------------------------- #

def _dist(a, b) -> float:
    return math.hypot(float(a[0] - b[0]), float(a[1] - b[1]))

def quad_dims(pts: np.ndarray) -> Tuple[float, float]:
    """Average (width, height) from opposite edges, points taken as a cycle in the given order."""
    p = np.asarray(pts, np.float64).reshape(4, 2)
    width = (_dist(p[0], p[1]) + _dist(p[2], p[3])) / 2.0
    height = (_dist(p[1], p[2]) + _dist(p[3], p[0])) / 2.0
    return width, height

def aspect_ratio(pts: np.ndarray) -> Optional[float]:
    """Long side over short side, or None for collapsed quads."""
    w, h = quad_dims(pts)
    short = min(w, h)
    if short <= _DEGENERATE_EPS:
        return None
    return max(w, h) / short

def is_plausible_quad(pts: np.ndarray, aspect_range: Tuple[float, float] = (1.2, 1.8)) -> bool:
    a = aspect_ratio(pts)
    if a is None:
        return False
    lo, hi = aspect_range
    return lo < a < hi

# ----------------------------------------------------------------------------- #
# Corner ordering                                                                #
# ----------------------------------------------------------------------------- #

def order_corners_clockwise(pts: np.ndarray) -> np.ndarray:
    """Return TL, TR, BR, BL given 4 unordered points."""
    pts = np.asarray(pts, np.float32).reshape(4, 2)
    # stable sorts so repeated coordinates keep a fixed assignment
    sorted_y = pts[np.argsort(pts[:, 1], kind="stable")]
    top2 = sorted_y[:2]
    bottom2 = sorted_y[2:]
    tl, tr = top2[np.argsort(top2[:, 0], kind="stable")]
    bl, br = bottom2[np.argsort(bottom2[:, 0], kind="stable")]
    return np.array([tl, tr, br, bl], dtype=np.float32)

def is_degenerate(ordered: np.ndarray) -> bool:
    """
    True when TL, TR, BR, BL cannot define a perspective transform: any three
    corners collinear, coincident points, or a self-intersecting cycle.
    """
    q = np.asarray(ordered, np.float64).reshape(4, 2)
    signs = []
    for i in range(4):
        a, b, c = q[i], q[(i + 1) % 4], q[(i + 2) % 4]
        cross = (b[0] - a[0]) * (c[1] - b[1]) - (b[1] - a[1]) * (c[0] - b[0])
        if abs(cross) <= _DEGENERATE_EPS:
            return True
        signs.append(cross > 0)
    return not (all(signs) or not any(signs))

# ----------------------------------------------------------------------------- #
# Per-frame entrypoint                                                           #
# ----------------------------------------------------------------------------- #

def detect_document(frame: np.ndarray, cfg: Optional[Dict] = None,
                    preprocessor: Optional[Callable[[np.ndarray], np.ndarray]] = None) -> Detection:
    """
    Run preprocess → contours → selection → validation → ordering on one frame.

    Rejections are returned in `Detection.error`; nothing is raised for a frame
    without a document.
    """
    cfg = merge_cfg(cfg)
    mask = preprocessor(frame) if preprocessor is not None else preprocess(frame, cfg)
    polys = extract_polygons(mask, float(cfg["approx_epsilon"]))
    quad = select_candidate(polys, float(cfg["min_area_px"]))
    if quad is None:
        log.debug("[detect] no candidate among %d polygons", len(polys))
        return Detection(error=NoDocumentFound())

    a = aspect_ratio(quad.pts)
    if not is_plausible_quad(quad.pts, cfg["aspect_range"]):
        log.debug("[detect] reject quad area=%.1f aspect=%s range=%s",
                  quad.area, "degenerate" if a is None else f"{a:.3f}", cfg["aspect_range"])
        return Detection(quad=quad, error=RejectedGeometry())

    ordered = order_corners_clockwise(quad.pts)
    if is_degenerate(ordered):
        log.debug("[detect] reject degenerate corners %s", ordered.tolist())
        return Detection(quad=quad, error=DegenerateTransform())

    log.debug("[detect] accept quad area=%.1f aspect=%.3f", quad.area, a)
    return Detection(quad=quad, corners=Corners(pts=ordered))
