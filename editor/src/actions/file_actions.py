"""File operations for the main window - load images, export composite"""
import os
import logging

from PyQt5.QtWidgets import QFileDialog, QMessageBox

from models.composition import SLOT_BACKGROUND, SLOT_FOREGROUND
from services.workers import DecodeWorker
from services.file_operations import export_composite_png, default_export_path
from utils.logger import loggerRaise
from constants import IMAGE_FILE_FILTER, PNG_FILE_FILTER, MANUAL_EXPORT_FILENAME

logger = logging.getLogger(__name__)

SLOT_TITLES = {
	SLOT_BACKGROUND: "Open Background Image",
	SLOT_FOREGROUND: "Open Object Image",
}


class FileActions:
	"""Handles all file menu operations"""

	def __init__(self, main_window):
		"""Initialize with reference to main window

		Args:
			main_window: The LayerMasterWindow instance
		"""
		self.main_window = main_window
		# Running decode threads, kept alive until they finish
		self._workers = []

	@property
	def composition(self):
		return self.main_window.composition

	# ========================================
	# Loading
	# ========================================

	def open_background(self):
		"""Pick and load the background ("place") image"""
		self._open_image(SLOT_BACKGROUND)

	def open_foreground(self):
		"""Pick and load the foreground ("object") image"""
		self._open_image(SLOT_FOREGROUND)

	def _open_image(self, slot):
		filename, _ = QFileDialog.getOpenFileName(
			self.main_window,
			SLOT_TITLES[slot],
			"",
			IMAGE_FILE_FILTER
		)
		if filename:
			self.load_image(slot, filename)

	def load_image(self, slot, filename):
		"""Decode filename off the UI thread and apply it to slot

		A newer load for the same slot supersedes this one; whichever
		finishes last, only the newest is applied.

		Returns:
			The DecodeWorker handling the request
		"""
		ticket = self.composition.begin_load(slot)
		logger.info("Loading %s from %s (#%d)", slot, filename, ticket.sequence)

		worker = DecodeWorker(ticket, filename)
		worker.decoded.connect(self._on_decoded)
		worker.failed.connect(self._on_decode_failed)
		worker.finished.connect(lambda: self._release_worker(worker))
		self._workers.append(worker)
		worker.start()

		self.main_window.set_status(f"Loading {os.path.basename(filename)}...")
		return worker

	def _on_decoded(self, ticket, surface):
		try:
			applied = self.composition.complete_load(ticket, surface)
		except ValueError as e:
			self._on_decode_failed(ticket, str(e))
			return
		if applied:
			self.main_window.set_status(f"{ticket.slot.capitalize()} loaded")

	def _on_decode_failed(self, ticket, message):
		if not self.composition.fail_load(ticket, message):
			return
		self.main_window.set_status("Loading failed")
		QMessageBox.warning(
			self.main_window,
			"Could Not Load Image",
			f"The selected file could not be read as an image.\n\n{message}"
		)

	def _release_worker(self, worker):
		if worker in self._workers:
			self._workers.remove(worker)
		worker.deleteLater()

	def wait_for_loads(self):
		"""Block until every pending decode thread has finished"""
		for worker in list(self._workers):
			worker.wait()

	# ========================================
	# Export
	# ========================================

	def export_png(self):
		"""Export the current composite, defaulting to composicion-manual.png"""
		filename, _ = QFileDialog.getSaveFileName(
			self.main_window,
			"Export Composition",
			default_export_path(os.getcwd(), MANUAL_EXPORT_FILENAME),
			PNG_FILE_FILTER
		)
		if not filename:
			return None
		return self.export_to(filename)

	def export_to(self, filename):
		"""Write the current composite to filename

		Returns:
			The path written, or None if writing failed
		"""
		try:
			path = export_composite_png(self.composition.snapshot(), filename)
		except OSError as e:
			logger.error("Export to %s failed: %s", filename, e)
			QMessageBox.critical(
				self.main_window,
				"Export Failed",
				f"Could not write the composition:\n{e}"
			)
			return None
		except Exception as e:
			loggerRaise(e, "Unexpected error while exporting the composition")
		self.main_window.set_status(f"Exported to {os.path.basename(path)}")
		return path
