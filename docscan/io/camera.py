# docscan/io/camera.py
from __future__ import annotations
from typing import Optional, Protocol, Tuple
import logging
import cv2
import numpy as np

from docscan.core.errors import CameraUnavailable

log = logging.getLogger(__name__)


class FrameSource(Protocol):
    """Anything the detection loop can pull frames from."""

    @property
    def size(self) -> Tuple[int, int]:
        """(width, height), fixed for the session."""
        ...

    def read(self) -> Optional[np.ndarray]:
        """Latest frame, or None if the device has nothing yet."""
        ...

    def close(self) -> None:
        ...


class VideoCaptureSource:
    """
    OpenCV camera wrapper. Resolution is negotiated once at open; frames are BGR.
    Raises CameraUnavailable if the device cannot be opened.
    """

    def __init__(self, device: int | str = 0, *, width: Optional[int] = None, height: Optional[int] = None):
        self._cap = cv2.VideoCapture(device)
        if not self._cap.isOpened():
            self._cap.release()
            raise CameraUnavailable()
        if width:
            self._cap.set(cv2.CAP_PROP_FRAME_WIDTH, int(width))
        if height:
            self._cap.set(cv2.CAP_PROP_FRAME_HEIGHT, int(height))
        self._size = (int(self._cap.get(cv2.CAP_PROP_FRAME_WIDTH)),
                      int(self._cap.get(cv2.CAP_PROP_FRAME_HEIGHT)))
        log.info("[camera] opened device=%s size=%dx%d", device, *self._size)

    @property
    def size(self) -> Tuple[int, int]:
        return self._size

    def read(self) -> Optional[np.ndarray]:
        if self._cap is None:
            return None
        ok, frame = self._cap.read()
        if not ok or frame is None:
            log.debug("[camera] no frame")
            return None
        return frame

    def close(self) -> None:
        """Release the device. Safe to call more than once."""
        if self._cap is not None:
            self._cap.release()
            self._cap = None
            log.info("[camera] released")
