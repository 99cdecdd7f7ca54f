"""
LayerMaster - Property Slider

Slider with synchronized input box for transform property editing.
"""

from PyQt5.QtWidgets import QWidget, QVBoxLayout, QHBoxLayout, QLabel, QSlider, QLineEdit
from PyQt5.QtCore import Qt, pyqtSignal


class PropertySlider(QWidget):
	"""Slider with synchronized input box for property editing

	Float values ride on an integer QSlider scaled by 1/step. The input box
	shows the value; the optional suffix label shows a formatted readout
	(e.g. "0.50x", "90°", "100%").
	"""

	valueChanged = pyqtSignal(float)

	def __init__(self, label, value=0.5, min_val=0.0, max_val=1.0, step=0.01,
	             is_int=False, display=None, parent=None):
		super().__init__(parent)
		self.is_int = is_int
		self.min_val = min_val
		self.max_val = max_val
		self.step = 1 if is_int else step
		self.display = display
		self._setup_ui(label, value)

	def _setup_ui(self, label, value):
		"""Setup the slider UI"""
		layout = QVBoxLayout(self)
		layout.setContentsMargins(0, 0, 0, 0)
		layout.setSpacing(2)

		# Label row: name on the left, formatted readout on the right
		header = QHBoxLayout()
		self.label = QLabel(f"{label}:")
		self.label.setStyleSheet("padding: 2px 5px; font-size: 11px;")
		self.readout = QLabel("")
		self.readout.setStyleSheet("padding: 2px 5px; font-size: 11px; color: #94a3b8;")
		header.addWidget(self.label)
		header.addStretch()
		header.addWidget(self.readout)
		layout.addLayout(header)

		# Horizontal layout for input and slider
		slider_layout = QHBoxLayout()
		slider_layout.setSpacing(5)

		# Small input box
		self.value_input = QLineEdit()
		self.value_input.setFixedWidth(50)
		self.value_input.setStyleSheet("""
			QLineEdit {
				padding: 4px;
				border-radius: 3px;
				font-size: 10px;
			}
		""")
		slider_layout.addWidget(self.value_input)

		# Slider
		self.slider = QSlider(Qt.Horizontal)
		self.slider.setMinimum(self._to_slider(self.min_val))
		self.slider.setMaximum(self._to_slider(self.max_val))
		self.slider.setStyleSheet("""
			QSlider::groove:horizontal {
				height: 6px;
				border-radius: 3px;
				background-color: rgba(255, 255, 255, 20);
			}
			QSlider::handle:horizontal {
				width: 12px;
				margin: -4px 0;
				border-radius: 6px;
				background-color: #6366f1;
			}
			QSlider::handle:horizontal:hover {
				background-color: #818cf8;
			}
		""")
		slider_layout.addWidget(self.slider)
		layout.addLayout(slider_layout)

		self.setValue(value)

		# Connect signals
		self.slider.valueChanged.connect(self._on_slider_changed)
		self.value_input.editingFinished.connect(self._on_input_finished)

	def _to_slider(self, value):
		return int(round(value / self.step))

	def _from_slider(self, position):
		if self.is_int:
			return float(position)
		return round(position * self.step, 6)

	def _format(self, value):
		return str(int(value)) if self.is_int else f"{value:.2f}"

	def _update_texts(self, value):
		self.value_input.setText(self._format(value))
		self.readout.setText(self.display(value) if self.display else "")

	def _on_slider_changed(self, position):
		"""Handle slider change"""
		value = self._from_slider(position)
		self._update_texts(value)
		self.valueChanged.emit(value)

	def _on_input_finished(self):
		"""Commit a typed value, clamped to the slider range"""
		try:
			value = float(self.value_input.text())
		except ValueError:
			self._update_texts(self.value())
			return
		value = min(max(value, self.min_val), self.max_val)
		if self._to_slider(value) == self.slider.value():
			self._update_texts(self.value())
			return
		# Slider emits valueChanged through _on_slider_changed
		self.slider.setValue(self._to_slider(value))

	def setValue(self, value):
		"""Set the slider value without emitting valueChanged"""
		self.slider.blockSignals(True)
		self.value_input.blockSignals(True)
		self.slider.setValue(self._to_slider(value))
		self._update_texts(self._from_slider(self.slider.value()))
		self.slider.blockSignals(False)
		self.value_input.blockSignals(False)

	def value(self):
		"""Get the current value"""
		return self._from_slider(self.slider.value())
