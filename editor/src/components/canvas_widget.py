"""Composite canvas widget.

Displays the Composition's rendered surface scaled to fit the widget and turns
mouse drags into foreground moves. The dashed selection box and corner handles
are an editor overlay painted on top; they never reach the composite pixels.
"""

from PyQt5.QtWidgets import QWidget, QSizePolicy
from PyQt5.QtCore import Qt, QPointF, QRectF
from PyQt5.QtGui import QPainter, QImage, QPen, QColor, QBrush, QPolygonF

from utils.transform_math import fit_rect, widget_to_canvas
from constants import (
    SELECTION_COLOR, SELECTION_LINE_WIDTH, SELECTION_HANDLE_SIZE, SELECTION_DASH_PATTERN
)


def surface_pixels_to_qimage(pixels):
    """Convert an HxWx4 RGBA uint8 array into a QImage that owns its data"""
    height, width = pixels.shape[:2]
    image = QImage(pixels.tobytes(), width, height, width * 4, QImage.Format_RGBA8888)
    return image.copy()


class CompositeCanvas(QWidget):
    """Drawable view of a Composition with drag-to-move."""

    def __init__(self, composition, parent=None):
        super().__init__(parent)
        self.composition = composition
        self._frame = None

        self.setMinimumSize(400, 300)
        self.setSizePolicy(QSizePolicy.Expanding, QSizePolicy.Expanding)
        self.setMouseTracking(False)
        self.setCursor(Qt.OpenHandCursor)

        self.composition.add_listener(self._on_composition_changed)
        self._refresh_frame()

    # ========================================
    # Model Sync
    # ========================================

    def _on_composition_changed(self, composition):
        self._refresh_frame()
        self.update()

    def _refresh_frame(self):
        self._frame = surface_pixels_to_qimage(self.composition.render_target.read_pixels())

    def current_image(self) -> QImage:
        """The last rendered composite as a QImage (overlay excluded)"""
        return self._frame

    def display_rect(self):
        """Placement of the canvas inside the widget

        Returns:
            Tuple of (offset_x, offset_y, scale)
        """
        width, height = self.composition.canvas_size
        return fit_rect(width, height, self.width(), self.height())

    def map_to_canvas(self, pos):
        """Widget point -> canvas pixel coordinates"""
        offset_x, offset_y, scale = self.display_rect()
        return widget_to_canvas(pos.x(), pos.y(), offset_x, offset_y, scale)

    # ========================================
    # Painting
    # ========================================

    def paintEvent(self, event):
        painter = QPainter(self)
        painter.fillRect(self.rect(), QColor('#0f172a'))

        if self._frame is None:
            painter.end()
            return

        offset_x, offset_y, scale = self.display_rect()
        target = QRectF(offset_x, offset_y, self._frame.width() * scale, self._frame.height() * scale)
        painter.setRenderHint(QPainter.SmoothPixmapTransform, True)
        painter.drawImage(target, self._frame)

        if not self.composition.is_generating:
            self._paint_selection(painter, offset_x, offset_y, scale)

        painter.end()

    def _paint_selection(self, painter, offset_x, offset_y, scale):
        """Dashed box with corner handles around the transformed foreground"""
        corners = self.composition.foreground_corners()
        if not corners:
            return

        points = [QPointF(offset_x + x * scale, offset_y + y * scale) for x, y in corners]
        color = QColor(SELECTION_COLOR)

        painter.setRenderHint(QPainter.Antialiasing, True)
        pen = QPen(color, SELECTION_LINE_WIDTH)
        pen.setDashPattern(SELECTION_DASH_PATTERN)
        painter.setPen(pen)
        painter.setBrush(Qt.NoBrush)
        painter.drawPolygon(QPolygonF(points))

        painter.setPen(Qt.NoPen)
        painter.setBrush(QBrush(color))
        half = SELECTION_HANDLE_SIZE / 2
        for point in points:
            painter.drawRect(QRectF(point.x() - half, point.y() - half, SELECTION_HANDLE_SIZE, SELECTION_HANDLE_SIZE))

    # ========================================
    # Mouse
    # ========================================

    def mousePressEvent(self, event):
        if event.button() != Qt.LeftButton or not self.composition.has_foreground:
            super().mousePressEvent(event)
            return
        x, y = self.map_to_canvas(event.pos())
        self.composition.begin_drag(x, y)
        self.setCursor(Qt.ClosedHandCursor)

    def mouseMoveEvent(self, event):
        if not self.composition.is_dragging:
            super().mouseMoveEvent(event)
            return
        x, y = self.map_to_canvas(event.pos())
        self.composition.drag_to(x, y)

    def mouseReleaseEvent(self, event):
        if event.button() == Qt.LeftButton:
            self._end_drag()
        super().mouseReleaseEvent(event)

    def leaveEvent(self, event):
        self._end_drag()
        super().leaveEvent(event)

    def _end_drag(self):
        self.composition.end_drag()
        self.setCursor(Qt.OpenHandCursor)
