import os

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

import pytest  # noqa: E402
from PySide6 import QtWidgets  # noqa: E402

from conftest import solid_rgb8  # noqa: E402
from photo_develop.widgets import ValueField, ViewportWidget  # noqa: E402


@pytest.fixture(scope="module")
def qapp():
    return QtWidgets.QApplication.instance() or QtWidgets.QApplication([])


def test_viewport_ignores_stale_and_undecodable_results(qapp):
    widget = ViewportWidget()
    old = widget._generation.next()
    current = widget._generation.next()

    widget._on_render_finished(current, solid_rgb8(4, 3, (10, 20, 30)))
    assert widget._frame is not None
    assert (widget._frame.width(), widget._frame.height()) == (4, 3)

    # A render that finishes late for an older generation is dropped.
    widget._on_render_finished(old, solid_rgb8(6, 5, (200, 0, 0)))
    assert widget._frame.width() == 4

    # A failed decode keeps the last frame on screen.
    widget._on_render_finished(current, None)
    assert widget._frame.width() == 4
    assert widget._frame.pixelColor(0, 0).red() == 10


def test_value_field_emits_typed_text_and_restores_display(qapp):
    field = ValueField()
    field.set_display("+12")
    entered = []
    field.valueEntered.connect(entered.append)

    field.mouseDoubleClickEvent(None)
    assert not field.isReadOnly()
    field.setText("40")
    field.editingFinished.emit()

    assert entered == ["40"]
    assert field.isReadOnly()
    assert field.text() == "+12"
