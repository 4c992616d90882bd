"""
Core contracts and simple data types shared across stages.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Optional, Tuple
import numpy as np

from docscan.core.errors import ScanError


@dataclass(frozen=True, eq=False)
class Polygon:
    """
    Approximation of one outer boundary found in a binary mask.

    pts:  np.ndarray with shape (N, 2), dtype int32
    area: area enclosed by the boundary the polygon was approximated from
    """
    pts: np.ndarray
    area: float

    @property
    def n_vertices(self) -> int:
        return int(self.pts.shape[0])


@dataclass(frozen=True, eq=False)
class Quad:
    """Four points in the order the contour extractor produced them."""
    pts: np.ndarray
    area: float


@dataclass(frozen=True, eq=False)
class Corners:
    """
    The four document corners in image coordinates (pixels), ordered clockwise:
    [top-left, top-right, bottom-right, bottom-left].

    pts: np.ndarray with shape (4, 2), dtype float32
    """
    pts: np.ndarray

    @property
    def tl(self) -> np.ndarray:
        return self.pts[0]

    @property
    def tr(self) -> np.ndarray:
        return self.pts[1]

    @property
    def br(self) -> np.ndarray:
        return self.pts[2]

    @property
    def bl(self) -> np.ndarray:
        return self.pts[3]

    def as_tuple(self) -> Tuple[Tuple[float, float], Tuple[float, float], Tuple[float, float], Tuple[float, float]]:
        return tuple(map(tuple, self.pts.astype(float)))  # type: ignore[return-value]


@dataclass(frozen=True, eq=False)
class Detection:
    """
    Outcome of one detection tick.

    Either both `quad` and `corners` are set (document accepted) or `error`
    says why nothing was published.
    """
    quad: Optional[Quad] = None
    corners: Optional[Corners] = None
    error: Optional[ScanError] = None

    @property
    def found(self) -> bool:
        return self.corners is not None
