"""
Error taxonomy for the scanner.

Pipeline rejections (NoDocumentFound, RejectedGeometry) are returned inside a
Detection and never escape a tick. ExtractionWithoutDetection and
CameraUnavailable are surfaced to the user.
"""

from __future__ import annotations


class ScanError(Exception):
    """Base class; `message` is safe to show to a user."""

    default_message = "Document scan failed."

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class NoDocumentFound(ScanError):
    default_message = "No document found in frame."


class RejectedGeometry(ScanError):
    default_message = "Detected shape does not look like a document."


class DegenerateTransform(RejectedGeometry):
    default_message = "Document corners are collinear or coincident."


class ExtractionWithoutDetection(ScanError):
    default_message = "No document detected. Please try again."


class CameraUnavailable(ScanError):
    default_message = (
        "Camera access denied. Please allow camera permissions "
        "and restart the scanner."
    )
