"""Qt widgets for the develop view: the pan/zoom viewport and the histogram panel.

Both widgets do their pixel work on a ``QThreadPool`` and only paint results
whose generation is still current.
"""

from __future__ import annotations

import traceback

import numpy as np
from loguru import logger
from PySide6 import QtCore, QtGui, QtWidgets

from .histogram import HistogramEngine
from .models import PhotoEntity
from .renderer import BACKGROUND, RenderGeneration, ViewportRenderer
from .viewport import ViewState


def rgb8_to_qimage(rgb8: np.ndarray) -> QtGui.QImage:
    if rgb8.ndim != 3 or rgb8.shape[2] != 3 or rgb8.dtype != np.uint8:
        raise ValueError("Expected HxWx3 uint8 RGB array")
    h, w, _ = rgb8.shape
    bytes_per_line = 3 * w
    # Detach from Python/NumPy buffer lifecycle (QImage may otherwise reference freed memory).
    qimg = QtGui.QImage(rgb8.tobytes(), w, h, bytes_per_line, QtGui.QImage.Format.Format_RGB888)
    return qimg.copy()


class _RenderSignals(QtCore.QObject):
    finished = QtCore.Signal(int, object)  # generation, rgb8 ndarray or None
    failed = QtCore.Signal(int, str)  # generation, error text


class _RenderTask(QtCore.QRunnable):
    def __init__(
        self,
        generation: int,
        renderer: ViewportRenderer,
        photo: PhotoEntity,
        viewport_size: tuple[int, int],
        view: ViewState,
    ) -> None:
        super().__init__()
        self.generation = generation
        self.renderer = renderer
        self.photo = photo
        self.viewport_size = viewport_size
        self.view = view
        self.signals = _RenderSignals()

    def run(self) -> None:
        try:
            rgb8 = self.renderer.render_photo(self.photo, self.viewport_size, self.view)
            self.signals.finished.emit(self.generation, rgb8)
        except Exception:
            self.signals.failed.emit(self.generation, traceback.format_exc())


class _HistogramTask(QtCore.QRunnable):
    def __init__(
        self,
        generation: int,
        engine: HistogramEngine,
        photo: PhotoEntity | None,
        size: tuple[int, int],
    ) -> None:
        super().__init__()
        self.generation = generation
        self.engine = engine
        self.photo = photo
        self.size = size
        self.signals = _RenderSignals()

    def run(self) -> None:
        try:
            w, h = self.size
            self.signals.finished.emit(self.generation, self.engine.render(self.photo, w, h))
        except Exception:
            self.signals.failed.emit(self.generation, traceback.format_exc())


def _render_pool() -> QtCore.QThreadPool:
    pool = QtCore.QThreadPool.globalInstance()
    # Single worker keeps UI consistent (latest result wins anyway).
    pool.setMaxThreadCount(1)
    return pool


class ViewportWidget(QtWidgets.QWidget):
    """Displays the current photo with pan, zoom and the before/after split."""

    viewChanged = QtCore.Signal(object)  # ViewState

    def __init__(self, renderer: ViewportRenderer | None = None, parent: QtWidgets.QWidget | None = None) -> None:
        super().__init__(parent)
        self.setMinimumSize(320, 240)
        self.setMouseTracking(True)
        self.setFocusPolicy(QtCore.Qt.FocusPolicy.StrongFocus)

        self._renderer = renderer or ViewportRenderer()
        self._photo: PhotoEntity | None = None
        self._view = ViewState()
        self._frame: QtGui.QImage | None = None
        self._generation = RenderGeneration()
        self._thread_pool = _render_pool()

        self._render_timer = QtCore.QTimer(self)
        self._render_timer.setSingleShot(True)
        self._render_timer.timeout.connect(self._start_render)

    @property
    def view(self) -> ViewState:
        return self._view

    @property
    def photo(self) -> PhotoEntity | None:
        return self._photo

    def set_photo(self, photo: PhotoEntity | None) -> None:
        if photo is self._photo:
            return
        if photo is None or self._photo is None or photo.id != self._photo.id:
            self._frame = None
        self._photo = photo
        self._schedule_render()

    def set_view(self, view: ViewState) -> None:
        if view == self._view:
            return
        self._view = view
        self.viewChanged.emit(view)
        self._schedule_render()

    def set_before_after(self, enabled: bool) -> None:
        self.set_view(self._view.with_before_after(enabled))

    def zoom_in(self) -> None:
        self.set_view(self._view.zoom_in())

    def zoom_out(self) -> None:
        self.set_view(self._view.zoom_out())

    def fit(self) -> None:
        self.set_view(self._view.fit())

    def _schedule_render(self) -> None:
        # Debounce bursts of slider/drag events into one render.
        self._render_timer.start(25)

    def _start_render(self) -> None:
        if self._photo is None:
            self._generation.next()
            self._frame = None
            self.update()
            return

        size = (self.width(), self.height())
        if size[0] <= 0 or size[1] <= 0:
            return

        generation = self._generation.next()
        task = _RenderTask(generation, self._renderer, self._photo, size, self._view)
        task.signals.finished.connect(self._on_render_finished)
        task.signals.failed.connect(self._on_render_failed)
        self._thread_pool.start(task)

    @QtCore.Slot(int, object)
    def _on_render_finished(self, generation: int, rgb8: object) -> None:
        if not self._generation.accepts(generation, rgb8):
            return
        self._frame = rgb8_to_qimage(rgb8)
        self.update()

    @QtCore.Slot(int, str)
    def _on_render_failed(self, generation: int, err: str) -> None:
        if not self._generation.is_current(generation):
            return
        logger.error("Viewport render failed:\n{}", err)

    def paintEvent(self, event: QtGui.QPaintEvent) -> None:
        painter = QtGui.QPainter(self)
        painter.fillRect(self.rect(), QtGui.QColor(*BACKGROUND))
        if self._frame is not None:
            painter.drawImage(0, 0, self._frame)
        elif self._photo is None:
            painter.setPen(QtGui.QColor(119, 119, 119))
            painter.drawText(
                self.rect(),
                QtCore.Qt.AlignmentFlag.AlignCenter,
                "No photo selected\nSelect a photo from the library to begin editing",
            )
        painter.end()

    def resizeEvent(self, event: QtGui.QResizeEvent) -> None:
        super().resizeEvent(event)
        self._schedule_render()

    def mousePressEvent(self, event: QtGui.QMouseEvent) -> None:
        if event.button() == QtCore.Qt.MouseButton.LeftButton:
            pos = event.position()
            self._view = self._view.pointer_down(pos.x(), pos.y())
            self.setCursor(QtCore.Qt.CursorShape.ClosedHandCursor)
        super().mousePressEvent(event)

    def mouseMoveEvent(self, event: QtGui.QMouseEvent) -> None:
        if self._view.is_dragging:
            pos = event.position()
            self.set_view(self._view.pointer_move(pos.x(), pos.y()))
        super().mouseMoveEvent(event)

    def mouseReleaseEvent(self, event: QtGui.QMouseEvent) -> None:
        if event.button() == QtCore.Qt.MouseButton.LeftButton:
            self._view = self._view.pointer_up()
            self.unsetCursor()
        super().mouseReleaseEvent(event)

    def leaveEvent(self, event: QtCore.QEvent) -> None:
        if self._view.is_dragging:
            self._view = self._view.pointer_leave()
            self.unsetCursor()
        super().leaveEvent(event)

    def wheelEvent(self, event: QtGui.QWheelEvent) -> None:
        dy = event.angleDelta().y()
        if dy == 0:
            return
        # Qt reports scrolling down as a negative angle.
        self.set_view(self._view.wheel(-dy))
        event.accept()


class ValueField(QtWidgets.QLineEdit):
    """Read-only slider value that turns editable on double-click.

    Enter or focus loss emits :attr:`valueEntered` with the typed text;
    Escape restores the displayed value.
    """

    valueEntered = QtCore.Signal(str)

    def __init__(self, parent: QtWidgets.QWidget | None = None) -> None:
        super().__init__("0", parent)
        self._shown = "0"
        self.setReadOnly(True)
        self.setFrame(False)
        self.setFixedWidth(52)
        self.setAlignment(QtCore.Qt.AlignmentFlag.AlignRight | QtCore.Qt.AlignmentFlag.AlignVCenter)
        self.setToolTip("Double-click to edit")
        self.editingFinished.connect(self._commit)

    def set_display(self, text: str) -> None:
        self._shown = text
        if self.isReadOnly():
            self.setText(text)

    def mouseDoubleClickEvent(self, event: QtGui.QMouseEvent) -> None:
        self.setReadOnly(False)
        self.setFrame(True)
        self.selectAll()
        self.setFocus()

    def keyPressEvent(self, event: QtGui.QKeyEvent) -> None:
        if event.key() == QtCore.Qt.Key.Key_Escape and not self.isReadOnly():
            self._finish()
            return
        super().keyPressEvent(event)

    def _commit(self) -> None:
        if self.isReadOnly():
            return
        text = self.text()
        self._finish()
        self.valueEntered.emit(text)

    def _finish(self) -> None:
        self.setReadOnly(True)
        self.setFrame(False)
        self.setText(self._shown)
        self.clearFocus()


class ZoomControls(QtWidgets.QWidget):
    """``-  NN%  +  Fit`` row bound to a :class:`ViewportWidget`."""

    def __init__(self, viewport: ViewportWidget, parent: QtWidgets.QWidget | None = None) -> None:
        super().__init__(parent)
        self._viewport = viewport

        layout = QtWidgets.QHBoxLayout(self)
        layout.setContentsMargins(0, 0, 0, 0)

        self.zoom_out_btn = QtWidgets.QToolButton()
        self.zoom_out_btn.setText("−")
        self.zoom_label = QtWidgets.QLabel()
        self.zoom_label.setMinimumWidth(48)
        self.zoom_label.setAlignment(QtCore.Qt.AlignmentFlag.AlignCenter)
        self.zoom_in_btn = QtWidgets.QToolButton()
        self.zoom_in_btn.setText("+")
        self.fit_btn = QtWidgets.QToolButton()
        self.fit_btn.setText("Fit")

        layout.addWidget(self.zoom_out_btn)
        layout.addWidget(self.zoom_label)
        layout.addWidget(self.zoom_in_btn)
        layout.addWidget(self.fit_btn)

        self.zoom_out_btn.clicked.connect(viewport.zoom_out)
        self.zoom_in_btn.clicked.connect(viewport.zoom_in)
        self.fit_btn.clicked.connect(viewport.fit)
        viewport.viewChanged.connect(self._on_view_changed)
        self._on_view_changed(viewport.view)

    def _on_view_changed(self, view: ViewState) -> None:
        self.zoom_label.setText(f"{round(view.zoom * 100)}%")


class HistogramWidget(QtWidgets.QLabel):
    def __init__(
        self,
        engine: HistogramEngine | None = None,
        parent: QtWidgets.QWidget | None = None,
        width: int = 240,
        height: int = 96,
    ) -> None:
        super().__init__(parent)
        self.setFixedSize(width, height)
        self._engine = engine or HistogramEngine()
        self._generation = RenderGeneration()
        self._thread_pool = _render_pool()
        self._photo_key: tuple[str, int] | None = None
        self.set_photo(None)

    def set_photo(self, photo: PhotoEntity | None) -> None:
        # The histogram reads the unedited source, so adjustments alone don't change it.
        key = None if photo is None else (photo.id, id(photo.source))
        if key == self._photo_key and self.pixmap() is not None and not self.pixmap().isNull():
            return
        self._photo_key = key

        generation = self._generation.next()
        task = _HistogramTask(generation, self._engine, photo, (self.width(), self.height()))
        task.signals.finished.connect(self._on_finished)
        task.signals.failed.connect(self._on_failed)
        self._thread_pool.start(task)

    @QtCore.Slot(int, object)
    def _on_finished(self, generation: int, rgb8: object) -> None:
        if not self._generation.accepts(generation, rgb8):
            return
        self.setPixmap(QtGui.QPixmap.fromImage(rgb8_to_qimage(rgb8)))

    @QtCore.Slot(int, str)
    def _on_failed(self, generation: int, err: str) -> None:
        if not self._generation.is_current(generation):
            return
        logger.error("Histogram render failed:\n{}", err)
