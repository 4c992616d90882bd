# docscan/geometry/contours.py
from __future__ import annotations
from typing import List
import cv2
import numpy as np
from docscan.core.contracts import Polygon


def approximate(contour: np.ndarray, epsilon: float = 0.02) -> np.ndarray:
    """Simplify a closed curve with tolerance `epsilon` × perimeter; returns (N, 2) int32."""
    peri = cv2.arcLength(contour, True)
    approx = cv2.approxPolyDP(contour, epsilon * peri, True)
    return approx.reshape(-1, 2).astype(np.int32)


def extract_polygons(mask: np.ndarray, epsilon: float = 0.02) -> List[Polygon]:
    """
    Outer boundaries of the foreground in `mask`, each reduced to a polygon.

    Holes and nested boundaries are ignored. The order of the returned list
    carries no meaning.
    """
    cnts, _ = cv2.findContours(mask, cv2.RETR_EXTERNAL, cv2.CHAIN_APPROX_SIMPLE)
    polys: List[Polygon] = []
    for cnt in cnts:
        if len(cnt) < 3:
            continue
        polys.append(Polygon(pts=approximate(cnt, epsilon), area=float(cv2.contourArea(cnt))))
    return polys
