import sys
import os
import logging

# Configure logging
logging.basicConfig(
    level=logging.WARNING,  # Only show warnings and errors
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    handlers=[
        logging.StreamHandler(sys.stdout)  # Output to console
    ]
)

# Add editor/src to path so imports work when running directly
if __name__ == "__main__":
    current_dir = os.path.dirname(os.path.abspath(__file__))
    if current_dir not in sys.path:
        sys.path.insert(0, current_dir)

# PyQt5 import/s
from PyQt5 import QtWidgets
from PyQt5.QtWidgets import QMainWindow, QWidget, QHBoxLayout, QLabel, QAction
from PyQt5.QtCore import Qt
from PyQt5.QtGui import QPalette, QColor, QKeySequence

# Component imports
from components.canvas_widget import CompositeCanvas
from components.control_panel import ControlPanel

from models.composition import Composition

# Utility imports
from utils.logger import set_main_window

# Action imports
from actions.file_actions import FileActions
from actions.generation_actions import GenerationActions


class LayerMasterWindow(QMainWindow):
    def __init__(self, composition=None, client=None):
        super().__init__()
        self.setWindowTitle("LayerMaster")
        self.resize(1280, 820)
        self.setMinimumSize(960, 600)

        # Single source of truth for images, transform and the rendered composite
        self.composition = composition or Composition()

        # Initialize global logger with main window reference
        set_main_window(self)

        # Initialize action handlers (composition pattern)
        self.file_actions = FileActions(self)
        self.generation_actions = GenerationActions(self, client=client)

        self._setup_ui()
        self._create_menu_bar()

    def _setup_ui(self):
        central = QWidget()
        self.setCentralWidget(central)
        main_layout = QHBoxLayout(central)
        main_layout.setContentsMargins(0, 0, 0, 0)
        main_layout.setSpacing(0)

        self.control_panel = ControlPanel(self.composition, self)
        self.control_panel.background_requested.connect(self.file_actions.open_background)
        self.control_panel.foreground_requested.connect(self.file_actions.open_foreground)
        self.control_panel.export_requested.connect(self.file_actions.export_png)
        self.control_panel.generate_requested.connect(self.generation_actions.generate)
        main_layout.addWidget(self.control_panel)

        self.canvas = CompositeCanvas(self.composition, self)
        main_layout.addWidget(self.canvas, 1)

        # Status bar
        self.status_left = QLabel("Ready")
        self.status_right = QLabel("")
        self.statusBar().addWidget(self.status_left, 1)
        self.statusBar().addPermanentWidget(self.status_right)
        self.composition.add_listener(self._update_canvas_status)
        self._update_canvas_status(self.composition)

    def _create_menu_bar(self):
        menubar = self.menuBar()

        file_menu = menubar.addMenu("&File")
        self._add_action(file_menu, "Open &Background...", self.file_actions.open_background, "Ctrl+B")
        self._add_action(file_menu, "Open &Object...", self.file_actions.open_foreground, "Ctrl+O")
        file_menu.addSeparator()
        self._add_action(file_menu, "&Export PNG...", self.file_actions.export_png, "Ctrl+E")
        file_menu.addSeparator()
        self._add_action(file_menu, "E&xit", self.close, QKeySequence.Quit)

        render_menu = menubar.addMenu("&Render")
        self._add_action(render_menu, "&Generate Realistic Render", self.generation_actions.generate, "Ctrl+G")

    def _add_action(self, menu, text, slot, shortcut=None):
        action = QAction(text, self)
        if shortcut:
            action.setShortcut(QKeySequence(shortcut))
        action.triggered.connect(lambda checked=False: slot())
        menu.addAction(action)
        return action

    def set_status(self, message):
        self.status_left.setText(message)

    def _update_canvas_status(self, composition):
        width, height = composition.canvas_size
        self.status_right.setText(f"{width} x {height}")

    def closeEvent(self, event):
        # Worker threads must not outlive the window that owns them
        self.generation_actions.shutdown()
        self.file_actions.wait_for_loads()
        super().closeEvent(event)


def main():
    """Main entry point for the LayerMaster application"""
    app = QtWidgets.QApplication([])

    # Use Fusion style with dark palette
    app.setStyle("Fusion")

    dark_palette = QPalette()
    dark_palette.setColor(QPalette.Window, QColor(30, 41, 59))
    dark_palette.setColor(QPalette.WindowText, Qt.white)
    dark_palette.setColor(QPalette.Base, QColor(15, 23, 42))
    dark_palette.setColor(QPalette.AlternateBase, QColor(30, 41, 59))
    dark_palette.setColor(QPalette.ToolTipBase, Qt.white)
    dark_palette.setColor(QPalette.ToolTipText, Qt.white)
    dark_palette.setColor(QPalette.Text, Qt.white)
    dark_palette.setColor(QPalette.Button, QColor(51, 65, 85))
    dark_palette.setColor(QPalette.ButtonText, Qt.white)
    dark_palette.setColor(QPalette.BrightText, Qt.red)
    dark_palette.setColor(QPalette.Link, QColor(129, 140, 248))
    dark_palette.setColor(QPalette.Highlight, QColor(99, 102, 241))
    dark_palette.setColor(QPalette.HighlightedText, Qt.white)

    app.setPalette(dark_palette)

    window = LayerMasterWindow()
    window.show()
    app.exec_()


if __name__ == "__main__":
    main()
