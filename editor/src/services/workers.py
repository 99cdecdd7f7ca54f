"""
Background worker threads.

QThread-based workers that keep image decoding and the remote render off the
UI thread. Results come back through signals, which Qt delivers on the
thread that owns the receiver.
"""

import logging

from PyQt5.QtCore import QThread, pyqtSignal

from services.image_loader import load_image_file, DecodeError
from services.ai_service import generate_realistic_render, RemoteGenerationError

logger = logging.getLogger(__name__)


class DecodeWorker(QThread):
    """Decode one image file for a load ticket."""

    decoded = pyqtSignal(object, object)  # ticket, Surface
    failed = pyqtSignal(object, str)      # ticket, message

    def __init__(self, ticket, path, parent=None):
        super().__init__(parent)
        self.ticket = ticket
        self.path = path

    def run(self):
        try:
            surface = load_image_file(self.path)
        except DecodeError as e:
            self.failed.emit(self.ticket, str(e))
            return
        self.decoded.emit(self.ticket, surface)


class GenerationWorker(QThread):
    """Send a composite snapshot to the realistic render service."""

    generated = pyqtSignal(bytes)  # PNG bytes
    failed = pyqtSignal(str)       # message

    def __init__(self, snapshot, client=None, parent=None):
        super().__init__(parent)
        self.snapshot = snapshot
        self.client = client

    def run(self):
        try:
            png_bytes = self.snapshot.encode_png()
            result = generate_realistic_render(png_bytes, client=self.client)
        except RemoteGenerationError as e:
            self.failed.emit(str(e))
            return
        except Exception as e:
            logger.exception("Unexpected error during realistic render")
            self.failed.emit(f"Unexpected error: {e}")
            return
        self.generated.emit(result)
