from __future__ import annotations

import cv2
import numpy as np
import pytest

from docscan.core.errors import CameraUnavailable
from docscan.io.camera import VideoCaptureSource


@pytest.fixture
def clip(tmp_path):
    """Three-frame MJPG clip standing in for a camera."""
    path = tmp_path / "clip.avi"
    writer = cv2.VideoWriter(str(path), cv2.VideoWriter_fourcc(*"MJPG"), 10, (64, 48))
    for v in (40, 120, 200):
        writer.write(np.full((48, 64, 3), v, np.uint8))
    writer.release()
    return path


def test_unopenable_source_raises_camera_unavailable(tmp_path):
    with pytest.raises(CameraUnavailable) as exc:
        VideoCaptureSource(str(tmp_path / "nonexistent.mp4"))
    assert "Camera access denied" in exc.value.message

def test_reads_frames_until_exhausted(clip):
    src = VideoCaptureSource(str(clip))
    assert src.size == (64, 48)
    frames = [src.read() for _ in range(3)]
    assert all(f is not None and f.shape == (48, 64, 3) for f in frames)
    assert src.read() is None
    src.close()

def test_close_twice_is_safe_and_read_after_close_is_none(clip):
    src = VideoCaptureSource(str(clip))
    src.close()
    src.close()
    assert src.read() is None
