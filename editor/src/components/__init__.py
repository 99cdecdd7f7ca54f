"""UI components for LayerMaster

Direct imports for convenience:
"""

from .canvas_widget import CompositeCanvas
from .control_panel import ControlPanel
from .property_slider import PropertySlider
from .result_dialog import ResultDialog

__all__ = [
    'CompositeCanvas',
    'ControlPanel',
    'PropertySlider',
    'ResultDialog',
]
