# docscan/loop/detection.py
from __future__ import annotations
from enum import Enum
from typing import Callable, Dict, Optional
import logging
import cv2
import numpy as np

from docscan.core.config import merge_cfg
from docscan.core.contracts import Corners, Detection
from docscan.core.errors import NoDocumentFound
from docscan.geometry.detect import detect_document
from docscan.geometry.preprocess import Preprocessor
from docscan.geometry.rectify import warp_document
from docscan.io.camera import FrameSource
from docscan.loop.scheduler import FrameScheduler

log = logging.getLogger(__name__)

Sink = Callable[[np.ndarray, Detection], None]


class LoopState(Enum):
    IDLE = "IDLE"
    RUNNING = "RUNNING"
    STOPPED = "STOPPED"


class DetectionLoop:
    """
    Per-frame document detection driven by a FrameScheduler.

    Each tick pulls one frame, runs the detection pipeline and publishes the
    ordered corners (or None) as the current document. Only the loop writes
    `current`; extraction reads it.
    """

    def __init__(self, source: FrameSource, scheduler: FrameScheduler,
                 cfg: Optional[Dict] = None, sink: Optional[Sink] = None):
        self.cfg = merge_cfg(cfg)
        self.source = source
        self.scheduler = scheduler
        self.sink = sink
        self._preprocess = Preprocessor(self.cfg)
        self._state = LoopState.IDLE
        self._handle: Optional[int] = None
        self._current: Optional[Corners] = None
        self._last_frame: Optional[np.ndarray] = None
        self._last_detection: Optional[Detection] = None
        self.ticks = 0

    @property
    def state(self) -> LoopState:
        return self._state

    @property
    def running(self) -> bool:
        return self._state is LoopState.RUNNING

    @property
    def current(self) -> Optional[Corners]:
        return self._current

    @property
    def last_frame(self) -> Optional[np.ndarray]:
        return self._last_frame

    @property
    def last_detection(self) -> Optional[Detection]:
        return self._last_detection

    # --- lifecycle ---

    def start(self) -> None:
        if self._state is LoopState.RUNNING:
            return
        log.info("[loop] %s -> RUNNING", self._state.value)
        self._state = LoopState.RUNNING
        self._schedule()

    def stop(self) -> None:
        """Cancel the pending tick. Calling it when not running does nothing."""
        if self._state is not LoopState.RUNNING:
            return
        if self._handle is not None:
            self.scheduler.cancel(self._handle)
            self._handle = None
        self._state = LoopState.STOPPED
        log.info("[loop] RUNNING -> STOPPED after %d ticks", self.ticks)

    def _schedule(self) -> None:
        self._handle = self.scheduler.request(self._on_frame)

    def _on_frame(self) -> None:
        self._handle = None
        if self._state is not LoopState.RUNNING:
            return
        try:
            self.tick()
        finally:
            # the sink may have stopped us; a raising tick must not end the loop
            if self._state is LoopState.RUNNING:
                self._schedule()

    # --- one detection cycle ---

    def tick(self) -> Optional[Detection]:
        """Run detection on the next frame and publish the result. None if no frame was available."""
        frame = self.source.read()
        if frame is None:
            return None
        self.ticks += 1
        try:
            det = detect_document(frame, self.cfg, preprocessor=self._preprocess)
        except cv2.error as e:
            log.warning("[loop] detection failed on tick %d: %s", self.ticks, e)
            det = Detection(error=NoDocumentFound(str(e)))

        if det.found != (self._current is not None):
            log.info("[loop] document %s", "found" if det.found else "lost")
        self._last_frame = frame
        self._last_detection = det
        self._current = det.corners
        if self.sink is not None:
            self.sink(frame, det)
        return det

    # --- extraction ---

    def extract(self, *, resume: bool = False) -> Optional[np.ndarray]:
        """
        Rectify the last captured frame through the current document.

        Returns None when no document is current; the loop is left alone in that
        case. Otherwise the loop is stopped first and, with `resume`, restarted
        afterwards if it had been running.
        """
        corners = self._current
        frame = self._last_frame
        if corners is None or frame is None:
            log.info("[loop] extract requested without a document")
            return None
        was_running = self.running
        self.stop()
        try:
            return warp_document(frame, corners, size=self.cfg["output_size"],
                                 border_value=self.cfg["border_value"])
        finally:
            if resume and was_running:
                self.start()
