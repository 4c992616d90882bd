# docscan/app/session.py
from __future__ import annotations
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Dict, Optional
import logging
import numpy as np

from docscan.core.config import merge_cfg
from docscan.core.contracts import Detection
from docscan.core.errors import ExtractionWithoutDetection
from docscan.io.camera import FrameSource
from docscan.io.images import encode_jpeg, save_scan
from docscan.loop.detection import DetectionLoop
from docscan.loop.scheduler import FrameScheduler
from docscan.app.overlay import render_frame

log = logging.getLogger(__name__)

STATUS_FOUND = "Paper Detected"
STATUS_SEARCHING = "Searching for document..."


class AppState(Enum):
    LOADING = "LOADING"
    READY = "READY"
    SCANNING = "SCANNING"
    PREVIEW = "PREVIEW"
    ERROR = "ERROR"


@dataclass
class ScanResult:
    image: np.ndarray
    jpeg: bytes


class ScanSession:
    """
    User-facing scanner: wires a frame source into a DetectionLoop, keeps the
    display frame up to date and implements extract / rescan / download.
    """

    def __init__(self, scheduler: Optional[FrameScheduler] = None, cfg: Optional[Dict] = None):
        self.cfg = merge_cfg(cfg)
        self.scheduler = scheduler or FrameScheduler()
        self.state = AppState.LOADING
        self.error: Optional[str] = None
        self.loop: Optional[DetectionLoop] = None
        self.source: Optional[FrameSource] = None
        self.result: Optional[ScanResult] = None
        self.display: Optional[np.ndarray] = None

    def _set_state(self, state: AppState) -> None:
        if state is not self.state:
            log.info("[session] %s -> %s", self.state.value, state.value)
            self.state = state

    # --- rendering sink ---

    def _on_detection(self, frame: np.ndarray, detection: Detection) -> None:
        self.display = render_frame(frame, detection, self.cfg)

    @property
    def document_detected(self) -> bool:
        return self.loop is not None and self.loop.current is not None

    @property
    def status_text(self) -> str:
        return STATUS_FOUND if self.document_detected else STATUS_SEARCHING

    # --- lifecycle ---

    def attach(self, source: FrameSource) -> None:
        """Camera is ready: start scanning."""
        self.source = source
        self.loop = DetectionLoop(source, self.scheduler, self.cfg, sink=self._on_detection)
        self._set_state(AppState.READY)
        self.loop.start()

    def fail(self, message: str) -> None:
        log.error("[session] %s", message)
        self.error = message
        if self.loop is not None:
            self.loop.stop()
        self._set_state(AppState.ERROR)

    def close(self) -> None:
        if self.loop is not None:
            self.loop.stop()
        if self.source is not None:
            self.source.close()
            self.source = None

    # --- actions ---

    def extract(self) -> ScanResult:
        """
        Flatten the currently detected document.
        Raises ExtractionWithoutDetection (loop untouched) when nothing is detected.
        """
        if self.state is not AppState.READY or self.loop is None or self.loop.current is None:
            raise ExtractionWithoutDetection()
        self._set_state(AppState.SCANNING)
        try:
            image = self.loop.extract()
        except Exception:
            self._set_state(AppState.READY)
            self.loop.start()
            raise
        if image is None:
            # the loop lost its frame between the check and the warp
            self._set_state(AppState.READY)
            self.loop.start()
            raise ExtractionWithoutDetection()
        self.result = ScanResult(image=image, jpeg=encode_jpeg(image, int(self.cfg["jpeg_quality"])))
        self._set_state(AppState.PREVIEW)
        return self.result

    def rescan(self) -> None:
        if self.state is not AppState.PREVIEW or self.loop is None:
            return
        self.result = None
        self._set_state(AppState.READY)
        self.loop.start()

    def download(self, out_dir: str | Path) -> Optional[Path]:
        if self.result is None:
            return None
        path = save_scan(self.result.jpeg, out_dir)
        log.info("[session] saved %s", path)
        return path
