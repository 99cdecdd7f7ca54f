"""Dialog presenting the realistic render returned by the AI service"""
import os
import logging

from PyQt5.QtWidgets import (
    QDialog, QVBoxLayout, QHBoxLayout, QLabel, QPushButton, QFileDialog, QMessageBox
)
from PyQt5.QtCore import Qt
from PyQt5.QtGui import QPixmap

from services.file_operations import save_generated_image, default_export_path
from services.image_loader import DecodeError
from constants import AI_EXPORT_FILENAME, PNG_FILE_FILTER

logger = logging.getLogger(__name__)

PREVIEW_MAX_SIZE = 900


class ResultDialog(QDialog):
	"""Shows the generated image with Close and Download buttons"""

	def __init__(self, png_bytes: bytes, parent=None):
		super().__init__(parent)
		self.png_bytes = png_bytes
		self.saved_path = None

		self.setWindowTitle("Realistic render")
		self.setModal(True)
		self._setup_ui()

	def _setup_ui(self):
		layout = QVBoxLayout(self)

		self.image_label = QLabel()
		self.image_label.setAlignment(Qt.AlignCenter)
		pixmap = QPixmap()
		pixmap.loadFromData(self.png_bytes, 'PNG')
		if pixmap.width() > PREVIEW_MAX_SIZE or pixmap.height() > PREVIEW_MAX_SIZE:
			pixmap = pixmap.scaled(PREVIEW_MAX_SIZE, PREVIEW_MAX_SIZE, Qt.KeepAspectRatio, Qt.SmoothTransformation)
		self.image_label.setPixmap(pixmap)
		layout.addWidget(self.image_label)

		button_row = QHBoxLayout()
		button_row.addStretch()
		self.close_button = QPushButton("Close")
		self.close_button.clicked.connect(self.reject)
		button_row.addWidget(self.close_button)

		self.download_button = QPushButton("Download")
		self.download_button.setDefault(True)
		self.download_button.clicked.connect(self.download)
		button_row.addWidget(self.download_button)
		layout.addLayout(button_row)

	def download(self):
		"""Ask for a destination and save the render as PNG"""
		filename, _ = QFileDialog.getSaveFileName(
			self,
			"Save realistic render",
			default_export_path(os.getcwd(), AI_EXPORT_FILENAME),
			PNG_FILE_FILTER
		)
		if not filename:
			return None
		return self.save_to(filename)

	def save_to(self, filename):
		"""Write the render to filename; errors are shown, not raised"""
		try:
			self.saved_path = save_generated_image(self.png_bytes, filename)
		except (OSError, DecodeError) as e:
			logger.error("Saving render to %s failed: %s", filename, e)
			QMessageBox.critical(self, "Save Failed", f"Could not save the render:\n{e}")
			return None
		return self.saved_path
