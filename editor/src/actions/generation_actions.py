"""Realistic render action - composite snapshot to AI service to result dialog"""
import logging

from PyQt5.QtWidgets import QMessageBox

from models.composition import GenerationInProgressError, MissingLayersError
from services.workers import GenerationWorker
from components.result_dialog import ResultDialog

logger = logging.getLogger(__name__)


class GenerationActions:
	"""Runs one realistic render at a time for the main window"""

	def __init__(self, main_window, client=None):
		"""Initialize with reference to main window

		Args:
			main_window: The LayerMasterWindow instance
			client: Optional google-genai client; built from the environment when None
		"""
		self.main_window = main_window
		self.client = client
		self.worker = None
		self.result_dialog = None

	@property
	def composition(self):
		return self.main_window.composition

	def generate(self):
		"""Snapshot the composite and send it to the render service

		Returns:
			The GenerationWorker, or None if the request was rejected
		"""
		try:
			snapshot = self.composition.begin_generation()
		except GenerationInProgressError:
			logger.info("Realistic render already in progress, request ignored")
			return None
		except MissingLayersError as e:
			QMessageBox.information(self.main_window, "Missing Images", str(e))
			return None

		logger.info("Requesting realistic render for %dx%d composite", snapshot.width, snapshot.height)
		self.main_window.set_status("Generating realistic render...")

		self.worker = GenerationWorker(snapshot, client=self.client)
		self.worker.generated.connect(self._on_generated)
		self.worker.failed.connect(self._on_failed)
		self.worker.start()
		return self.worker

	def _on_generated(self, png_bytes):
		if self.worker is None:
			return
		self.composition.end_generation()
		self._finish_worker()
		self.main_window.set_status("Realistic render ready")
		self.show_result(png_bytes)

	def _on_failed(self, message):
		if self.worker is None:
			return
		self.composition.end_generation()
		self._finish_worker()
		logger.error("Realistic render failed: %s", message)
		self.main_window.set_status("Realistic render failed")
		QMessageBox.critical(
			self.main_window,
			"Generation Failed",
			f"The realistic render could not be generated.\n\n{message}"
		)

	def _finish_worker(self):
		if self.worker is not None:
			self.worker.wait()
			self.worker.deleteLater()
			self.worker = None

	def shutdown(self):
		"""Detach from a pending render and block until its thread has finished

		No result dialog or error popup is shown for a render cut off this way.
		"""
		worker = self.worker
		if worker is None:
			return
		logger.info("Waiting for pending realistic render before closing")
		self.worker = None
		worker.generated.disconnect(self._on_generated)
		worker.failed.disconnect(self._on_failed)
		worker.wait()
		worker.deleteLater()
		self.composition.end_generation()

	def show_result(self, png_bytes):
		"""Open the result dialog for a finished render"""
		self.result_dialog = ResultDialog(png_bytes, self.main_window)
		self.result_dialog.open()
		return self.result_dialog
