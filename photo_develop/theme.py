from __future__ import annotations

from PySide6 import QtGui, QtWidgets

DARKEST = "#0f0f0f"
DARKER = "#181818"
DARK = "#202020"
GRAY = "#777777"
ACCENT = "#0088ff"
ORANGE = "#ff8800"


def apply_develop_theme(app: QtWidgets.QApplication) -> None:
    """Dark darkroom-style theme: near-black panels, blue accent, orange hover.

    Fusion style plus palette plus QSS, standard widgets only.
    """

    app.setStyle("Fusion")

    pal = QtGui.QPalette()

    pal.setColor(QtGui.QPalette.ColorRole.Window, QtGui.QColor(DARKER))
    pal.setColor(QtGui.QPalette.ColorRole.Base, QtGui.QColor(DARKEST))
    pal.setColor(QtGui.QPalette.ColorRole.AlternateBase, QtGui.QColor(DARK))

    pal.setColor(QtGui.QPalette.ColorRole.WindowText, QtGui.QColor(220, 220, 220))
    pal.setColor(QtGui.QPalette.ColorRole.Text, QtGui.QColor(220, 220, 220))
    pal.setColor(QtGui.QPalette.ColorRole.ButtonText, QtGui.QColor(220, 220, 220))
    pal.setColor(QtGui.QPalette.ColorRole.PlaceholderText, QtGui.QColor(GRAY))

    pal.setColor(QtGui.QPalette.ColorRole.Button, QtGui.QColor(DARK))

    pal.setColor(QtGui.QPalette.ColorRole.Highlight, QtGui.QColor(ACCENT))
    pal.setColor(QtGui.QPalette.ColorRole.HighlightedText, QtGui.QColor(255, 255, 255))

    pal.setColor(QtGui.QPalette.ColorRole.ToolTipBase, QtGui.QColor(DARK))
    pal.setColor(QtGui.QPalette.ColorRole.ToolTipText, QtGui.QColor(220, 220, 220))

    app.setPalette(pal)

    app.setStyleSheet(
        f"""
        QWidget {{ background: {DARKER}; color: #dcdcdc; }}
        QMainWindow {{ background: {DARKEST}; }}
        QLabel {{ background: transparent; }}
        QLabel[role="section"] {{
            color: {GRAY};
            font-weight: 600;
        }}

        QPushButton, QToolButton {{
            background: {DARK};
            border: 1px solid #2c2c2c;
            border-radius: 3px;
            padding: 4px 8px;
        }}
        QPushButton:hover, QToolButton:hover {{ border-color: {ORANGE}; }}
        QPushButton:pressed, QToolButton:pressed {{ background: #1a1a1a; }}
        QPushButton:checked, QToolButton:checked {{ background: {ACCENT}; color: white; border-color: {ACCENT}; }}
        QPushButton:disabled, QToolButton:disabled {{ color: #555555; background: #1a1a1a; border-color: #242424; }}

        QComboBox {{
            background: {DARK};
            border: 1px solid #2c2c2c;
            border-radius: 3px;
            padding: 2px 8px;
            min-height: 22px;
        }}
        QComboBox:hover {{ border-color: {ORANGE}; }}
        QComboBox::drop-down {{ border: 0px; width: 18px; }}

        QLineEdit {{
            background: {DARKEST};
            border: 1px solid #2c2c2c;
            border-radius: 3px;
            padding: 3px 8px;
            min-height: 22px;
        }}
        QLineEdit:focus {{ border-color: {ACCENT}; }}

        QListWidget, QTreeWidget {{
            background: {DARKEST};
            border: 1px solid {DARK};
            outline: none;
        }}
        QListWidget::item, QTreeWidget::item {{ padding: 3px 6px; }}
        QListWidget::item:selected, QTreeWidget::item:selected {{ background: #123a5c; color: white; }}
        QListWidget::item:hover, QTreeWidget::item:hover {{ background: {DARK}; }}

        QGroupBox {{
            background: {DARKER};
            border: 1px solid {DARK};
            border-radius: 3px;
            margin-top: 10px;
        }}
        QGroupBox::title {{
            subcontrol-origin: margin;
            left: 8px;
            padding: 0 4px;
            color: {GRAY};
        }}

        QSlider::groove:horizontal {{ height: 3px; background: #333333; border-radius: 1px; }}
        QSlider::sub-page:horizontal {{ background: {ACCENT}; border-radius: 1px; }}
        QSlider::add-page:horizontal {{ background: #2a2a2a; border-radius: 1px; }}
        QSlider::handle:horizontal {{ width: 10px; margin: -5px 0; border-radius: 5px; background: #cccccc; }}
        QSlider::handle:horizontal:hover {{ background: {ORANGE}; }}

        QScrollBar:vertical {{ background: {DARKEST}; width: 10px; margin: 0px; border: none; }}
        QScrollBar::handle:vertical {{ background: #2c2c2c; min-height: 24px; border-radius: 5px; }}
        QScrollBar::handle:vertical:hover {{ background: #3a3a3a; }}
        QScrollBar::add-line:vertical, QScrollBar::sub-line:vertical {{ height: 0px; }}
        QScrollBar::add-page:vertical, QScrollBar::sub-page:vertical {{ background: none; }}

        QScrollBar:horizontal {{ background: {DARKEST}; height: 10px; margin: 0px; border: none; }}
        QScrollBar::handle:horizontal {{ background: #2c2c2c; min-width: 24px; border-radius: 5px; }}
        QScrollBar::handle:horizontal:hover {{ background: #3a3a3a; }}
        QScrollBar::add-line:horizontal, QScrollBar::sub-line:horizontal {{ width: 0px; }}
        QScrollBar::add-page:horizontal, QScrollBar::sub-page:horizontal {{ background: none; }}

        QMenuBar {{ background: {DARKEST}; }}
        QMenuBar::item:selected {{ background: {DARK}; }}
        QMenu {{ background: {DARK}; border: 1px solid #2c2c2c; }}
        QMenu::item:selected {{ background: {ACCENT}; }}

        QStatusBar {{ background: {DARKEST}; color: {GRAY}; }}
        QMessageBox {{ background: {DARKER}; }}
        """
    )
