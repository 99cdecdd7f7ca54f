# PyQt5 imports
from PyQt5.QtWidgets import (
    QFrame, QVBoxLayout, QLabel, QPushButton, QCheckBox, QWidget
)
from PyQt5.QtCore import pyqtSignal

# Component imports
from .property_slider import PropertySlider

from constants import (
    SLIDER_SCALE_MIN, SLIDER_SCALE_MAX, SLIDER_SCALE_STEP,
    SLIDER_ROTATION_MIN, SLIDER_ROTATION_MAX,
    SLIDER_OPACITY_MIN, SLIDER_OPACITY_MAX,
    CONTROL_PANEL_WIDTH
)

GENERATE_LABEL = "Generate realistic render"
GENERATE_BUSY_LABEL = "Generating realistic render..."


class ControlPanel(QFrame):
	"""Sidebar with load buttons, transform controls and output actions

	The panel only emits signals; FileActions and GenerationActions do the
	work. Control values and enabled states follow the Composition through
	its listener.
	"""

	background_requested = pyqtSignal()
	foreground_requested = pyqtSignal()
	export_requested = pyqtSignal()
	generate_requested = pyqtSignal()

	def __init__(self, composition, parent=None):
		super().__init__(parent)
		self.composition = composition
		self._last_foreground = None

		self.setFixedWidth(CONTROL_PANEL_WIDTH)
		self._setup_ui()

		self.composition.add_listener(self._on_composition_changed)
		self.sync_from_model()

	def _setup_ui(self):
		layout = QVBoxLayout(self)
		layout.setContentsMargins(12, 12, 12, 12)
		layout.setSpacing(8)

		# Image slots
		layout.addWidget(self._section_label("Images"))
		self.background_button = QPushButton("1. Background")
		self.background_button.clicked.connect(self.background_requested.emit)
		layout.addWidget(self.background_button)

		self.foreground_button = QPushButton("2. Object")
		self.foreground_button.clicked.connect(self.foreground_requested.emit)
		layout.addWidget(self.foreground_button)

		# Transform controls
		layout.addWidget(self._section_label("Transform"))
		self.transform_group = QWidget()
		transform_layout = QVBoxLayout(self.transform_group)
		transform_layout.setContentsMargins(0, 0, 0, 0)

		self.scale_slider = PropertySlider(
			"Scale", SLIDER_SCALE_MIN, SLIDER_SCALE_MIN, SLIDER_SCALE_MAX,
			step=SLIDER_SCALE_STEP, display=lambda v: f"{v:.2f}x"
		)
		self.scale_slider.valueChanged.connect(lambda v: self._set_field('scale', v))
		transform_layout.addWidget(self.scale_slider)

		self.rotation_slider = PropertySlider(
			"Rotation", SLIDER_ROTATION_MIN, SLIDER_ROTATION_MIN, SLIDER_ROTATION_MAX,
			is_int=True, display=lambda v: f"{int(v)}°"
		)
		self.rotation_slider.valueChanged.connect(lambda v: self._set_field('rotation', v))
		transform_layout.addWidget(self.rotation_slider)

		self.opacity_slider = PropertySlider(
			"Opacity", SLIDER_OPACITY_MAX, SLIDER_OPACITY_MIN, SLIDER_OPACITY_MAX,
			step=0.01, display=lambda v: f"{round(v * 100)}%"
		)
		self.opacity_slider.valueChanged.connect(lambda v: self._set_field('opacity', v))
		transform_layout.addWidget(self.opacity_slider)

		self.remove_white_checkbox = QCheckBox("Remove white background")
		self.remove_white_checkbox.toggled.connect(self.composition.set_remove_white)
		transform_layout.addWidget(self.remove_white_checkbox)

		self.drag_hint = QLabel("Drag the object on the canvas to move it.")
		self.drag_hint.setWordWrap(True)
		self.drag_hint.setStyleSheet("color: #94a3b8; font-size: 10px;")
		transform_layout.addWidget(self.drag_hint)

		layout.addWidget(self.transform_group)

		# Output
		layout.addWidget(self._section_label("Output"))
		self.export_button = QPushButton("Export composition (PNG)")
		self.export_button.clicked.connect(self.export_requested.emit)
		layout.addWidget(self.export_button)

		self.generate_button = QPushButton(GENERATE_LABEL)
		self.generate_button.setStyleSheet("""
			QPushButton {
				padding: 8px;
				border-radius: 4px;
				background-color: #4f46e5;
				color: white;
				font-weight: bold;
			}
			QPushButton:disabled {
				background-color: rgba(255, 255, 255, 20);
				color: #64748b;
			}
		""")
		self.generate_button.clicked.connect(self.generate_requested.emit)
		layout.addWidget(self.generate_button)

		layout.addStretch()

	def _section_label(self, text):
		label = QLabel(text.upper())
		label.setStyleSheet("font-size: 11px; font-weight: bold; color: #94a3b8; padding-top: 6px;")
		return label

	def _set_field(self, field, value):
		self.composition.set_transform_field(field, value)

	# ========================================
	# Model Sync
	# ========================================

	def _on_composition_changed(self, composition):
		# A new foreground resets placement, so slider positions are stale
		if composition.foreground is not self._last_foreground:
			self.sync_from_model()
		else:
			self._update_enabled_states()

	def sync_from_model(self):
		"""Pull slider and checkbox values from the current transform"""
		transform = self.composition.transform
		self._last_foreground = self.composition.foreground

		self.scale_slider.setValue(transform.scale)
		self.rotation_slider.setValue(transform.rotation)
		self.opacity_slider.setValue(transform.opacity)

		self.remove_white_checkbox.blockSignals(True)
		self.remove_white_checkbox.setChecked(transform.remove_white)
		self.remove_white_checkbox.blockSignals(False)

		self._update_enabled_states()

	def _update_enabled_states(self):
		composition = self.composition
		self.transform_group.setEnabled(composition.has_foreground)
		self.generate_button.setEnabled(composition.has_images and not composition.is_generating)
		self.generate_button.setText(GENERATE_BUSY_LABEL if composition.is_generating else GENERATE_LABEL)
