"""Global logging and error handling utilities"""
import sys
import logging
import traceback
from PyQt5.QtWidgets import QMessageBox

# Detect debug mode - True if running from source, False if packaged
DEBUG_MODE = not getattr(sys, 'frozen', False)

_main_window = None
_logger = logging.getLogger('LayerMaster')


def set_main_window(window):
	"""Set the main window reference for showing popups"""
	global _main_window
	_main_window = window


def show_error(user_message: str, title: str = "Error"):
	"""Show a critical popup over the main window, or log it without one"""
	if _main_window is not None:
		QMessageBox.critical(_main_window, title, user_message)
	else:
		_logger.error("%s - %s", title, user_message)


def loggerRaise(e: Exception, user_message: str = None, title: str = "Error"):
	"""Handle exceptions with optional popup in release mode

	Args:
		e: The exception to handle
		user_message: User-friendly message to show in popup (optional)
		title: Title for the popup dialog

	In DEBUG_MODE the exception is re-raised straight away. In release
	builds the traceback is logged and a popup is shown first.
	"""
	if DEBUG_MODE:
		raise e

	_logger.error("Unhandled error:\n%s", traceback.format_exc())
	show_error(user_message if user_message else str(e), title)
	raise e
