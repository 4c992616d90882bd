#!/usr/bin/env python3
"""
Live document scanner window.

Keys: e = extract, d = download, r = scan another, q / Esc = quit.
"""
from __future__ import annotations
import argparse
import logging

import cv2

from docscan.app.overlay import draw_status
from docscan.app.session import AppState, ScanSession
from docscan.core.config import load_cfg, merge_cfg
from docscan.core.errors import ExtractionWithoutDetection, ScanError
from docscan.io.camera import VideoCaptureSource

WINDOW = "docscan"
PREVIEW_WINDOW = "docscan - scanned result"
REFRESH_MS = 16  # ~60 Hz; waitKey doubles as the per-frame callback pump


def main():
    ap = argparse.ArgumentParser(description="Detect a document in the camera feed and flatten it on demand.")
    ap.add_argument("--device", default="0", help="Camera index or video URL/path.")
    ap.add_argument("--config", default=None, help="YAML config (see config/scanner.yaml).")
    ap.add_argument("--out_dir", default="scans", help="Where downloaded scans are written.")
    ap.add_argument("--width", type=int, default=None, help="Requested capture width.")
    ap.add_argument("--height", type=int, default=None, help="Requested capture height.")
    ap.add_argument("--debug", action="store_true", help="Per-tick debug logging.")
    args = ap.parse_args()

    cfg = load_cfg(args.config) if args.config else merge_cfg(None)
    logging.basicConfig(
        level=logging.DEBUG if (args.debug or cfg["debug"]) else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    session = ScanSession(cfg=cfg)
    device = int(args.device) if args.device.isdigit() else args.device
    try:
        session.attach(VideoCaptureSource(device, width=args.width, height=args.height))
    except ScanError as e:
        session.fail(e.message)

    cv2.namedWindow(WINDOW, cv2.WINDOW_NORMAL)
    try:
        while True:
            session.scheduler.pump()

            if session.state is AppState.ERROR:
                print(f"[ERR] {session.error}")
                break
            if session.display is not None:
                view = session.display.copy()
                if session.state is AppState.READY:
                    draw_status(view, session.status_text, highlight=session.document_detected)
                cv2.imshow(WINDOW, view)

            key = cv2.waitKey(REFRESH_MS) & 0xFF
            if key in (ord("q"), 27):
                break
            if key == ord("e") and session.state is AppState.READY:
                try:
                    result = session.extract()
                    cv2.imshow(PREVIEW_WINDOW, result.image)
                except ExtractionWithoutDetection as e:
                    print(f"[INFO] {e.message}")
            elif key == ord("d") and session.state is AppState.PREVIEW:
                path = session.download(args.out_dir)
                print(f"[OK] saved {path}")
            elif key == ord("r") and session.state is AppState.PREVIEW:
                cv2.destroyWindow(PREVIEW_WINDOW)
                session.rescan()
    finally:
        session.close()
        cv2.destroyAllWindows()


if __name__ == "__main__":
    main()
