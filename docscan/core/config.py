# docscan/core/config.py
from __future__ import annotations
from pathlib import Path
from typing import Dict, Optional
import yaml

# Defaults tuned for webcam frames (640x480 .. 1920x1080) and our synthetic tests
DEFAULT_CFG: Dict = {
    "blur": {"ksize": 5},
    # adaptive Gaussian threshold, inverted so edges become foreground
    "threshold": {"block_size": 11, "c": 2},
    "morph": {"ksize": 5},
    # noise floor on contour area, px²
    "min_area_px": 10000.0,
    # approxPolyDP tolerance as a fraction of the perimeter
    "approx_epsilon": 0.02,
    # long side / short side, exclusive bounds (A4 ≈ 1.414, Letter ≈ 1.29)
    "aspect_range": (1.2, 1.8),
    # (width, height) of the rectified page
    "output_size": (850, 1100),
    "border_value": (0, 0, 0),
    # channel order of 3/4-channel frames: "bgr" (OpenCV capture) or "rgb" (RGBA canvases)
    "channel_order": "bgr",
    "outline": {"thickness": 8, "color": (166, 191, 0)},  # #00bfa6 in BGR
    "jpeg_quality": 92,
    "debug": False,
}

_TUPLE_KEYS = ("aspect_range", "output_size", "border_value")
CHANNEL_ORDERS = ("bgr", "rgb")


def _validate(cfg: Dict) -> None:
    for name in ("blur", "morph"):
        k = int(cfg[name]["ksize"])
        if k < 1 or k % 2 == 0:
            raise ValueError(f"{name}.ksize must be a positive odd integer, got {k}")
    bs = int(cfg["threshold"]["block_size"])
    if bs < 3 or bs % 2 == 0:
        raise ValueError(f"threshold.block_size must be odd and >= 3, got {bs}")
    if cfg["channel_order"] not in CHANNEL_ORDERS:
        raise ValueError(f"channel_order must be one of {CHANNEL_ORDERS}, got {cfg['channel_order']!r}")
    lo, hi = cfg["aspect_range"]
    if not (0 < lo < hi):
        raise ValueError(f"aspect_range must satisfy 0 < lo < hi, got {(lo, hi)}")
    w, h = cfg["output_size"]
    if w <= 0 or h <= 0:
        raise ValueError(f"output_size must be positive, got {(w, h)}")
    if not (0.0 < float(cfg["approx_epsilon"]) < 1.0):
        raise ValueError(f"approx_epsilon must be in (0, 1), got {cfg['approx_epsilon']}")


def merge_cfg(cfg: Optional[Dict]) -> Dict:
    """Overlay `cfg` on the defaults; nested dicts are merged one level deep."""
    merged = {k: dict(v) if isinstance(v, dict) else v for k, v in DEFAULT_CFG.items()}
    for k, v in (cfg or {}).items():
        if isinstance(v, dict) and k in merged and isinstance(merged[k], dict):
            merged[k] = {**merged[k], **v}
        else:
            merged[k] = v
    for k in _TUPLE_KEYS:
        merged[k] = tuple(merged[k])
    merged["outline"] = {**merged["outline"], "color": tuple(merged["outline"]["color"])}
    _validate(merged)
    return merged


def load_cfg(path: str | Path) -> Dict:
    """
    Load a YAML config and merge it over the defaults.
    Raises FileNotFoundError if the file does not exist.
    """
    with open(path, "r") as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ValueError(f"Config root must be a mapping: {path}")
    return merge_cfg(data)
