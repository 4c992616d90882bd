#!/usr/bin/env python3
from __future__ import annotations
import argparse, logging, os
import cv2
import numpy as np

from docscan.app.overlay import draw_quad
from docscan.core.config import load_cfg, merge_cfg
from docscan.geometry.detect import aspect_ratio, detect_document
from docscan.geometry.rectify import warp_document
from docscan.io.images import encode_jpeg, load_image


def main():
    ap = argparse.ArgumentParser(description="Detect a document in a still image, visualize it, and flatten it.")
    ap.add_argument("image", help="Path to input image (BGR/RGB supported).")
    ap.add_argument("--config", default=None, help="YAML config (see config/scanner.yaml).")
    ap.add_argument("--out_dir", default="scans", help="Directory for outputs.")
    ap.add_argument("--out", default=None, help="Output viz PNG path. Default: <out_dir>/<image_basename>_viz.png")
    ap.add_argument("--rect", default=None, help="Rectified JPEG path. Default: <out_dir>/<image_basename>_rect.jpg")
    ap.add_argument("--rect_w", type=int, default=None, help="Rectified width (default from config).")
    ap.add_argument("--rect_h", type=int, default=None, help="Rectified height (default from config).")
    ap.add_argument("--min_area", type=float, default=None, help="Override min contour area in px².")
    ap.add_argument("--debug", action="store_true", help="Enable debug logging in the detector.")
    args = ap.parse_args()

    cfg = load_cfg(args.config) if args.config else merge_cfg(None)
    overrides = {}
    if args.min_area is not None:
        overrides["min_area_px"] = args.min_area
    if args.rect_w is not None or args.rect_h is not None:
        w, h = cfg["output_size"]
        overrides["output_size"] = (args.rect_w or w, args.rect_h or h)
    cfg = merge_cfg({**cfg, **overrides})

    logging.basicConfig(level=logging.DEBUG if (args.debug or cfg["debug"]) else logging.INFO,
                        format="%(levelname)s %(name)s: %(message)s")

    try:
        img = load_image(args.image)
    except FileNotFoundError as e:
        raise SystemExit(str(e))

    os.makedirs(args.out_dir, exist_ok=True)
    base = os.path.splitext(os.path.basename(args.image))[0]
    out_viz = args.out or os.path.join(args.out_dir, f"{base}_viz.png")
    out_rect = args.rect or os.path.join(args.out_dir, f"{base}_rect.jpg")

    det = detect_document(img, cfg)
    vis = img.copy()

    if det.quad is not None:
        area = cv2.contourArea(det.quad.pts.astype(np.float32))
        a = aspect_ratio(det.quad.pts)
        print(f"[dbg] area={area:.1f}, aspect={a if a is None else round(a, 3)}, accepted={det.found}")
        color = tuple(cfg["outline"]["color"]) if det.found else (0, 0, 255)
        draw_quad(vis, det.quad.pts, color, int(cfg["outline"]["thickness"]))

    if det.found:
        print(f"Detection: corners=\n{det.corners.pts}")
        rectified = warp_document(img, det.corners, size=cfg["output_size"], border_value=cfg["border_value"])
        with open(out_rect, "wb") as f:
            f.write(encode_jpeg(rectified, int(cfg["jpeg_quality"])))
        print(f"Saved rectified → {out_rect}")
    else:
        print(f"No document detected: {det.error.message}")
        cv2.putText(vis, "NO DETECTION", (20, 40),
                    cv2.FONT_HERSHEY_SIMPLEX, 1.0, (0, 0, 255), 2, cv2.LINE_AA)

    cv2.imwrite(out_viz, vis)
    print(f"Saved visualization → {out_viz}")

if __name__ == "__main__":
    main()
