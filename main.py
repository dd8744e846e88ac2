from __future__ import annotations

import sys
import traceback
import uuid
from dataclasses import replace
from pathlib import Path

from loguru import logger
from PySide6 import QtCore, QtGui, QtWidgets

from photo_develop.adjustments import (
    ADJUSTMENT_RANGES,
    AdjustmentSet,
    clamp_adjustments,
    parse_adjustment_input,
)
from photo_develop.export import BatchExportResult, export_photos
from photo_develop.histogram import HistogramEngine
from photo_develop.importer import import_sources, source_from_path
from photo_develop.library import VIEW_ALL, VIEW_FAVORITES, VIEW_QUICK, VIEW_RECENT, filter_photos
from photo_develop.log import find_latest_log_file, init_logging
from photo_develop.models import Collection, PhotoEntity, Preset, StoreState
from photo_develop.presets import (
    PresetFormatError,
    builtin_presets,
    group_by_category,
    load_preset_file,
    load_presets_from_folder,
    save_preset_file,
    slugify,
)
from photo_develop.renderer import ViewportRenderer
from photo_develop.settings import AppSettings, load_settings, open_settings, save_settings
from photo_develop.store import (
    AddPhotos,
    AddPreset,
    AddToCollection,
    ApplyPreset,
    CreateCollection,
    DeleteSelectedPhotos,
    DeselectAllPhotos,
    SelectAllPhotos,
    SelectPhoto,
    Store,
    UpdateAdjustments,
    auto_adjust_action,
    paste_adjustments_action,
    reset_adjustments_action,
)
from photo_develop.theme import apply_develop_theme
from photo_develop.widgets import HistogramWidget, ValueField, ViewportWidget, ZoomControls

IMAGE_FILTER = "Images (*.png *.jpg *.jpeg *.tif *.tiff *.bmp *.webp *.gif);;All Files (*)"

# (panel title, ((field, label), ...)), in sidebar order.
SLIDER_PANELS = (
    (
        "Basic",
        (
            ("exposure", "Exposure"),
            ("contrast", "Contrast"),
            ("highlights", "Highlights"),
            ("shadows", "Shadows"),
            ("whites", "Whites"),
            ("blacks", "Blacks"),
        ),
    ),
    ("Presence", (("clarity", "Clarity"), ("vibrance", "Vibrance"), ("saturation", "Saturation"))),
    ("White Balance", (("temperature", "Temperature"), ("tint", "Tint"))),
    ("HSL", (("hue", "Hue"), ("luminance", "Luminance"))),
)

# Exposure moves in 0.01 stops; the rest are whole numbers.
SLIDER_SCALE = {"exposure": 100}

CATEGORY_ORDER = ["General", "Color", "Film", "Black & White", "User"]


class _ExportSignals(QtCore.QObject):
    finished = QtCore.Signal(object)  # BatchExportResult
    failed = QtCore.Signal(str)


class _ExportTask(QtCore.QRunnable):
    def __init__(self, photos: list[PhotoEntity], out_dir: str, settings: AppSettings) -> None:
        super().__init__()
        self.photos = photos
        self.out_dir = out_dir
        self.settings = settings
        self.signals = _ExportSignals()

    def run(self) -> None:
        try:
            result = export_photos(
                self.photos,
                self.out_dir,
                fmt=self.settings.export_format,
                quality=self.settings.export_quality,
                delay=self.settings.batch_delay,
            )
            self.signals.finished.emit(result)
        except Exception:
            self.signals.failed.emit(traceback.format_exc())


class MainWindow(QtWidgets.QMainWindow):
    def __init__(self) -> None:
        super().__init__()
        self.setWindowTitle("Photo Develop")

        self._qsettings = open_settings()
        self._settings = load_settings(self._qsettings)

        self._store = Store()
        self._copied: AdjustmentSet | None = None
        self._photo_list_key: tuple | None = None
        self._preset_ids: tuple[str, ...] | None = None
        self._syncing = False

        self._export_pool = QtCore.QThreadPool(self)
        self._export_pool.setMaxThreadCount(1)

        self._sliders: dict[str, tuple[QtWidgets.QSlider, ValueField, QtWidgets.QToolButton]] = {}

        root = QtWidgets.QWidget()
        self.setCentralWidget(root)
        layout = QtWidgets.QHBoxLayout(root)

        layout.addWidget(self._build_left_panel())
        layout.addWidget(self._build_center(), 1)
        layout.addWidget(self._build_right_panel())

        self._build_menus()
        self.statusBar()

        self._unsubscribe = self._store.subscribe(self._on_state_changed)

        for preset in builtin_presets():
            self._store.dispatch(AddPreset(preset))
        self._reload_user_presets_from_folder()
        self._on_state_changed(self._store.state)

    # UI construction

    def _section_label(self, text: str) -> QtWidgets.QLabel:
        lab = QtWidgets.QLabel(text.upper())
        lab.setProperty("role", "section")
        return lab

    def _build_left_panel(self) -> QtWidgets.QWidget:
        left = QtWidgets.QWidget()
        left.setFixedWidth(260)
        left_layout = QtWidgets.QVBoxLayout(left)
        left_layout.setContentsMargins(0, 0, 0, 0)

        self.import_btn = QtWidgets.QPushButton("Import…")
        self.export_btn = QtWidgets.QPushButton("Export…")
        left_layout.addWidget(self.import_btn)
        left_layout.addWidget(self.export_btn)

        left_layout.addWidget(self._section_label("Library"))
        self.search_edit = QtWidgets.QLineEdit()
        self.search_edit.setPlaceholderText("Search photos")
        self.view_combo = QtWidgets.QComboBox()
        left_layout.addWidget(self.search_edit)
        left_layout.addWidget(self.view_combo)

        self.photo_list = QtWidgets.QListWidget()
        self.photo_list.setSelectionMode(QtWidgets.QAbstractItemView.SelectionMode.SingleSelection)
        left_layout.addWidget(self.photo_list, 2)

        left_layout.addWidget(self._section_label("Presets"))
        presets_dir_row = QtWidgets.QWidget()
        presets_dir_layout = QtWidgets.QHBoxLayout(presets_dir_row)
        presets_dir_layout.setContentsMargins(0, 0, 0, 0)
        presets_dir_layout.setSpacing(6)
        self.user_presets_edit = QtWidgets.QLineEdit()
        self.user_presets_edit.setPlaceholderText("User presets folder (optional)")
        self.user_presets_edit.setText(self._settings.user_presets_dir)
        self.user_presets_browse_btn = QtWidgets.QToolButton()
        self.user_presets_browse_btn.setText("Browse")
        presets_dir_layout.addWidget(self.user_presets_edit, 1)
        presets_dir_layout.addWidget(self.user_presets_browse_btn)
        left_layout.addWidget(presets_dir_row)

        self.preset_tree = QtWidgets.QTreeWidget()
        self.preset_tree.setHeaderHidden(True)
        self.preset_tree.setRootIsDecorated(True)
        self.preset_tree.setUniformRowHeights(True)
        self.preset_tree.setTextElideMode(QtCore.Qt.TextElideMode.ElideRight)
        left_layout.addWidget(self.preset_tree, 1)

        self.import_btn.clicked.connect(self._on_import)
        self.export_btn.clicked.connect(self._on_export_selected)
        self.search_edit.textChanged.connect(lambda _text: self._refresh_photo_list(force=True))
        self.view_combo.currentIndexChanged.connect(lambda _i: self._refresh_photo_list(force=True))
        self.photo_list.currentItemChanged.connect(self._on_photo_item_changed)
        self.preset_tree.itemActivated.connect(self._on_preset_activated)
        self.user_presets_browse_btn.clicked.connect(self._on_browse_user_presets_dir)
        self.user_presets_edit.editingFinished.connect(self._on_user_presets_dir_edited)
        return left

    def _build_center(self) -> QtWidgets.QWidget:
        center = QtWidgets.QWidget()
        center_layout = QtWidgets.QVBoxLayout(center)
        center_layout.setContentsMargins(0, 0, 0, 0)

        self.viewport = ViewportWidget(ViewportRenderer())

        toolbar = QtWidgets.QWidget()
        toolbar_layout = QtWidgets.QHBoxLayout(toolbar)
        toolbar_layout.setContentsMargins(0, 0, 0, 0)
        self.before_after_btn = QtWidgets.QPushButton("Before / After")
        self.before_after_btn.setCheckable(True)
        self.reset_btn = QtWidgets.QPushButton("Reset")
        self.auto_btn = QtWidgets.QPushButton("Auto")
        self.zoom_controls = ZoomControls(self.viewport)
        toolbar_layout.addWidget(self.before_after_btn)
        toolbar_layout.addWidget(self.reset_btn)
        toolbar_layout.addWidget(self.auto_btn)
        toolbar_layout.addStretch(1)
        toolbar_layout.addWidget(self.zoom_controls)

        center_layout.addWidget(toolbar)
        center_layout.addWidget(self.viewport, 1)

        self.before_after_btn.toggled.connect(self.viewport.set_before_after)
        self.reset_btn.clicked.connect(self._on_reset_adjustments)
        self.auto_btn.clicked.connect(self._on_auto_adjust)
        return center

    def _build_right_panel(self) -> QtWidgets.QWidget:
        self.sidebar = QtWidgets.QScrollArea()
        self.sidebar.setWidgetResizable(True)
        self.sidebar.setFrameShape(QtWidgets.QFrame.Shape.NoFrame)
        self.sidebar.setMinimumWidth(320)

        body = QtWidgets.QWidget()
        self.sidebar.setWidget(body)
        body_layout = QtWidgets.QVBoxLayout(body)
        body_layout.setContentsMargins(0, 0, 8, 0)
        body_layout.setSpacing(8)

        body_layout.addWidget(self._section_label("Histogram"))
        self.histogram = HistogramWidget(HistogramEngine(self._settings.histogram_sample_size))
        body_layout.addWidget(self.histogram)

        actions_row = QtWidgets.QWidget()
        actions_layout = QtWidgets.QHBoxLayout(actions_row)
        actions_layout.setContentsMargins(0, 0, 0, 0)
        self.reset_all_btn = QtWidgets.QToolButton()
        self.reset_all_btn.setText("Reset All")
        self.copy_btn = QtWidgets.QToolButton()
        self.copy_btn.setText("Copy Settings")
        self.paste_btn = QtWidgets.QToolButton()
        self.paste_btn.setText("Paste Settings")
        self.paste_btn.setEnabled(False)
        actions_layout.addWidget(self.reset_all_btn)
        actions_layout.addWidget(self.copy_btn)
        actions_layout.addWidget(self.paste_btn)
        actions_layout.addStretch(1)
        body_layout.addWidget(self._section_label("Quick Actions"))
        body_layout.addWidget(actions_row)

        for title, rows in SLIDER_PANELS:
            group = QtWidgets.QGroupBox(title)
            form = QtWidgets.QFormLayout(group)
            for name, label in rows:
                lo, hi = ADJUSTMENT_RANGES[name]
                scale = SLIDER_SCALE.get(name, 1)
                slider, value_field, reset = self._make_slider(int(lo * scale), int(hi * scale), 0)
                slider.valueChanged.connect(lambda v, n=name: self._on_slider_changed(n, v))
                value_field.valueEntered.connect(lambda text, n=name: self._on_value_entered(n, text))
                reset.clicked.connect(lambda _checked=False, n=name: self._set_adjustment(n, 0.0))
                self._sliders[name] = (slider, value_field, reset)
                form.addRow(label, self._hbox(slider, value_field, reset))
            body_layout.addWidget(group)

        body_layout.addStretch(1)

        self.reset_all_btn.clicked.connect(self._on_reset_adjustments)
        self.copy_btn.clicked.connect(self._on_copy_settings)
        self.paste_btn.clicked.connect(self._on_paste_settings)
        return self.sidebar

    def _add_action(
        self,
        menu: QtWidgets.QMenu,
        text: str,
        slot,
        shortcut: QtGui.QKeySequence | QtGui.QKeySequence.StandardKey | str | None = None,
    ) -> QtGui.QAction:
        act = menu.addAction(text)
        if shortcut is not None:
            act.setShortcut(QtGui.QKeySequence(shortcut))
        act.triggered.connect(slot)
        return act

    def _build_menus(self) -> None:
        menu = self.menuBar()

        file_menu = menu.addMenu("&File")
        self._add_action(file_menu, "Import Photos…", self._on_import, "Ctrl+Shift+I")
        self._add_action(file_menu, "Export…", self._on_export_selected, "Ctrl+Shift+E")
        self._add_action(file_menu, "Export All…", self._on_export_all)
        file_menu.addSeparator()
        self._add_action(file_menu, "Load Preset…", self._on_load_preset)
        self._add_action(file_menu, "Save Preset…", self._on_save_preset)
        file_menu.addSeparator()
        self._add_action(file_menu, "Export Settings…", self._on_export_settings)
        file_menu.addSeparator()
        self._add_action(file_menu, "Quit", self.close, QtGui.QKeySequence.StandardKey.Quit)

        edit_menu = menu.addMenu("&Edit")
        self._add_action(edit_menu, "Select All", self._on_select_all, "Ctrl+A")
        self._add_action(edit_menu, "Deselect All", self._on_deselect_all, "Ctrl+D")
        self._add_action(edit_menu, "Delete Selected…", self._on_delete_selected, QtGui.QKeySequence.StandardKey.Delete)
        edit_menu.addSeparator()
        self._add_action(edit_menu, "Copy Settings", self._on_copy_settings, "Ctrl+Shift+C")
        self._add_action(edit_menu, "Paste Settings", self._on_paste_settings, "Ctrl+Shift+V")
        self._add_action(edit_menu, "Reset Adjustments", self._on_reset_adjustments, "Ctrl+Shift+R")
        self._add_action(edit_menu, "Auto Adjust", self._on_auto_adjust, "Ctrl+U")

        library_menu = menu.addMenu("&Library")
        self._add_action(library_menu, "New Collection…", self._on_new_collection, "Ctrl+N")
        self._add_action(library_menu, "Add Selected to Collection…", self._on_add_to_collection)

        view_menu = menu.addMenu("&View")
        self._add_action(view_menu, "Before / After", self.before_after_btn.toggle, "\\")
        view_menu.addSeparator()
        self._add_action(view_menu, "Zoom In", self.viewport.zoom_in, "Ctrl++")
        self._add_action(view_menu, "Zoom Out", self.viewport.zoom_out, "Ctrl+-")
        self._add_action(view_menu, "Fit", self.viewport.fit, "Ctrl+0")
        self._add_action(view_menu, "Zoom 100%", self._on_zoom_100, "Ctrl+1")

        help_menu = menu.addMenu("&Help")
        self._add_action(help_menu, "Show Log File", self._on_show_log)

    def _on_zoom_100(self) -> None:
        self.viewport.set_view(self.viewport.view.zoom_100())

    def _on_show_log(self) -> None:
        path = find_latest_log_file()
        if path is None:
            QtWidgets.QMessageBox.information(self, "Show Log File", "No log file has been written yet.")
            return
        QtGui.QDesktopServices.openUrl(QtCore.QUrl.fromLocalFile(str(path)))

    def _make_slider(
        self, min_v: int, max_v: int, value: int
    ) -> tuple[QtWidgets.QSlider, ValueField, QtWidgets.QToolButton]:
        s = QtWidgets.QSlider(QtCore.Qt.Orientation.Horizontal)
        s.setRange(min_v, max_v)
        s.setValue(value)
        s.setSingleStep(1)
        field = ValueField()
        reset = QtWidgets.QToolButton()
        reset.setText("↺")
        reset.setToolTip("Reset to default")
        reset.setAutoRaise(True)
        policy = reset.sizePolicy()
        policy.setRetainSizeWhenHidden(True)
        reset.setSizePolicy(policy)
        reset.setVisible(value != 0)
        return s, field, reset

    def _hbox(self, slider: QtWidgets.QSlider, *extras: QtWidgets.QWidget) -> QtWidgets.QWidget:
        w = QtWidgets.QWidget()
        lay = QtWidgets.QHBoxLayout(w)
        lay.setContentsMargins(0, 0, 0, 0)
        lay.setSpacing(8)
        lay.addWidget(slider, 1)
        for extra in extras:
            lay.addWidget(extra)
        return w

    # State -> widgets

    def _on_state_changed(self, state: StoreState) -> None:
        current = state.current_photo
        self.viewport.set_photo(current)
        self.histogram.set_photo(current)
        self._refresh_photo_list()
        self._refresh_view_combo(state)
        self._rebuild_preset_tree(state)
        self._sync_sliders(current)

        has_photo = current is not None
        self.sidebar.setEnabled(has_photo)
        self.reset_btn.setEnabled(has_photo)
        self.auto_btn.setEnabled(has_photo)
        self.paste_btn.setEnabled(has_photo and self._copied is not None)
        self.export_btn.setEnabled(bool(state.photos))

    def _current_view(self) -> str:
        view = self.view_combo.currentData()
        return str(view) if view else VIEW_ALL

    def _refresh_view_combo(self, state: StoreState) -> None:
        entries = [
            ("All Photographs", VIEW_ALL),
            ("Favorites", VIEW_FAVORITES),
            ("Recent", VIEW_RECENT),
            ("Quick Collection", VIEW_QUICK),
        ]
        entries += [(f"Collection: {c.name}", c.id) for c in state.collections]
        if [(self.view_combo.itemText(i), self.view_combo.itemData(i)) for i in range(self.view_combo.count())] == entries:
            return

        selected = self._current_view()
        self.view_combo.blockSignals(True)
        self.view_combo.clear()
        for text, data in entries:
            self.view_combo.addItem(text, data)
        idx = self.view_combo.findData(selected)
        self.view_combo.setCurrentIndex(max(0, idx))
        self.view_combo.blockSignals(False)

    def _refresh_photo_list(self, force: bool = False) -> None:
        state = self._store.state
        visible = filter_photos(state, self.search_edit.text(), self._current_view())
        key = (tuple((p.id, p.name, p.is_selected) for p in visible), state.current_photo_id)
        if key == self._photo_list_key and not force:
            return
        self._photo_list_key = key

        self.photo_list.blockSignals(True)
        self.photo_list.clear()
        for photo in visible:
            meta = photo.metadata
            item = QtWidgets.QListWidgetItem(photo.name)
            item.setData(QtCore.Qt.ItemDataRole.UserRole, photo.id)
            item.setToolTip(f"{meta.width}×{meta.height} {meta.format}")
            self.photo_list.addItem(item)
            if photo.id == state.current_photo_id:
                self.photo_list.setCurrentItem(item)
        self.photo_list.blockSignals(False)

    def _rebuild_preset_tree(self, state: StoreState) -> None:
        ids = tuple(p.id for p in state.presets)
        if ids == self._preset_ids:
            return
        self._preset_ids = ids

        self.preset_tree.clear()
        # Later presets with the same id replace earlier ones.
        latest: dict[str, Preset] = {}
        for p in state.presets:
            latest[p.id] = p
        cats = group_by_category(latest.values())

        def add_category(cat_name: str) -> None:
            items = cats.get(cat_name)
            if not items:
                return
            cat_item = QtWidgets.QTreeWidgetItem([cat_name])
            cat_item.setFlags(cat_item.flags() & ~QtCore.Qt.ItemFlag.ItemIsSelectable)
            self.preset_tree.addTopLevelItem(cat_item)
            cat_item.setExpanded(cat_name in ("General", "User"))
            for preset in items:
                child = QtWidgets.QTreeWidgetItem([preset.name])
                child.setData(0, int(QtCore.Qt.ItemDataRole.UserRole), preset.id)
                cat_item.addChild(child)

        for cat in CATEGORY_ORDER:
            add_category(cat)
        for cat in sorted(c for c in cats if c not in CATEGORY_ORDER):
            add_category(cat)

    def _sync_sliders(self, photo: PhotoEntity | None) -> None:
        adjustments = photo.adjustments if photo is not None else AdjustmentSet()
        self._syncing = True
        try:
            for name, (slider, field, reset) in self._sliders.items():
                value = getattr(adjustments, name)
                scale = SLIDER_SCALE.get(name, 1)
                slider.setValue(int(round(value * scale)))
                field.set_display(self._format_value(name, value))
                reset.setVisible(photo is not None and value != 0)
        finally:
            self._syncing = False

    def _format_value(self, name: str, value: float) -> str:
        if name in SLIDER_SCALE:
            return f"{value:+.2f}" if value else "0.00"
        return f"{round(value):+d}" if round(value) else "0"

    # Widgets -> store

    def _current_id(self) -> str | None:
        return self._store.state.current_photo_id

    def _on_slider_changed(self, name: str, raw: int) -> None:
        if self._syncing:
            return
        self._set_adjustment(name, raw / SLIDER_SCALE.get(name, 1))

    def _set_adjustment(self, name: str, value: float) -> None:
        photo_id = self._current_id()
        if photo_id is None:
            return
        self._store.dispatch(UpdateAdjustments(photo_id, clamp_adjustments({name: value})))

    def _on_value_entered(self, name: str, text: str) -> None:
        value = parse_adjustment_input(name, text)
        if value is None:
            lo, hi = ADJUSTMENT_RANGES[name]
            self.statusBar().showMessage(f"Enter a number between {lo:g} and {hi:g}", 3000)
            return
        self._set_adjustment(name, value)

    def _on_photo_item_changed(
        self, current: QtWidgets.QListWidgetItem | None, _previous: QtWidgets.QListWidgetItem | None
    ) -> None:
        if current is None:
            return
        photo_id = current.data(QtCore.Qt.ItemDataRole.UserRole)
        if photo_id and photo_id != self._current_id():
            self._store.dispatch(SelectPhoto(str(photo_id)))

    def _on_preset_activated(self, item: QtWidgets.QTreeWidgetItem, _column: int = 0) -> None:
        preset_id = item.data(0, int(QtCore.Qt.ItemDataRole.UserRole))
        photo_id = self._current_id()
        if not preset_id or photo_id is None:
            return
        preset = self._store.state.find_preset(str(preset_id))
        if preset is None:
            return
        self._store.dispatch(ApplyPreset(photo_id, preset))
        self.statusBar().showMessage(f"Applied preset {preset.name}", 3000)

    def _on_reset_adjustments(self) -> None:
        photo_id = self._current_id()
        if photo_id is not None:
            self._store.dispatch(reset_adjustments_action(photo_id))

    def _on_auto_adjust(self) -> None:
        photo_id = self._current_id()
        if photo_id is not None:
            self._store.dispatch(auto_adjust_action(photo_id))

    def _on_copy_settings(self) -> None:
        photo = self._store.state.current_photo
        if photo is None:
            return
        self._copied = photo.adjustments
        self.paste_btn.setEnabled(True)
        self.statusBar().showMessage("Settings copied", 2000)

    def _on_paste_settings(self) -> None:
        photo_id = self._current_id()
        if photo_id is None or self._copied is None:
            return
        self._store.dispatch(paste_adjustments_action(photo_id, self._copied))

    def _on_select_all(self) -> None:
        self._store.dispatch(SelectAllPhotos())

    def _on_deselect_all(self) -> None:
        self._store.dispatch(DeselectAllPhotos())

    def _on_delete_selected(self) -> None:
        selected = self._store.state.selected_photos
        if not selected:
            return
        answer = QtWidgets.QMessageBox.question(self, "Delete Photos", f"Delete {len(selected)} selected photo(s)?")
        if answer == QtWidgets.QMessageBox.StandardButton.Yes:
            self._store.dispatch(DeleteSelectedPhotos())

    def _on_new_collection(self) -> None:
        name, ok = QtWidgets.QInputDialog.getText(self, "New Collection", "Enter collection name:")
        if not ok or not name.strip():
            return
        collection = Collection(id=uuid.uuid4().hex, name=name.strip())
        self._store.dispatch(CreateCollection(collection))
        selected = tuple(p.id for p in self._store.state.selected_photos)
        if selected:
            self._store.dispatch(AddToCollection(collection.id, selected))

    def _on_add_to_collection(self) -> None:
        state = self._store.state
        selected = tuple(p.id for p in state.selected_photos)
        if not state.collections or not selected:
            return
        names = [c.name for c in state.collections]
        name, ok = QtWidgets.QInputDialog.getItem(self, "Add to Collection", "Collection:", names, 0, False)
        if not ok:
            return
        collection = state.collections[names.index(name)]
        self._store.dispatch(AddToCollection(collection.id, selected))

    # Import / export

    def _on_import(self) -> None:
        start = self._settings.last_import_dir or str(Path.home())
        files, _ = QtWidgets.QFileDialog.getOpenFileNames(self, "Import Photos", start, IMAGE_FILTER)
        if not files:
            return

        sources = []
        for fn in files:
            try:
                sources.append(source_from_path(fn))
            except OSError as e:
                logger.warning("Cannot import {}: {}", fn, e)
        photos = import_sources(sources)
        if not photos:
            return

        self._update_settings(last_import_dir=str(Path(files[0]).parent))
        self._store.dispatch(AddPhotos(tuple(photos)))
        if self._current_id() is None:
            self._store.dispatch(SelectPhoto(photos[0].id))
        self.statusBar().showMessage(f"Imported {len(photos)} photo(s)", 3000)

    def _on_export_selected(self) -> None:
        state = self._store.state
        photos = list(state.selected_photos)
        if not photos and state.current_photo is not None:
            photos = [state.current_photo]
        self._start_export(photos)

    def _on_export_all(self) -> None:
        self._start_export(list(self._store.state.photos))

    def _start_export(self, photos: list[PhotoEntity]) -> None:
        if not photos:
            return
        start = self._settings.export_dir or self._settings.last_import_dir or str(Path.home())
        folder = QtWidgets.QFileDialog.getExistingDirectory(self, "Export To", start)
        if not folder:
            return
        self._update_settings(export_dir=folder)

        self.export_btn.setEnabled(False)
        self.statusBar().showMessage(f"Exporting {len(photos)} photo(s)…")
        task = _ExportTask(photos, folder, self._settings)
        task.signals.finished.connect(self._on_export_finished)
        task.signals.failed.connect(self._on_export_failed)
        self._export_pool.start(task)

    def _on_export_finished(self, result: BatchExportResult) -> None:
        self.export_btn.setEnabled(bool(self._store.state.photos))
        if result.failed is not None:
            QtWidgets.QMessageBox.critical(self, "Export Failed", result.failed.error or "Unknown error")
            self.statusBar().showMessage(f"Export stopped after {len(result.exported)} photo(s)", 5000)
            return
        self.statusBar().showMessage(f"Exported {len(result.exported)} photo(s)", 5000)

    def _on_export_failed(self, err: str) -> None:
        self.export_btn.setEnabled(bool(self._store.state.photos))
        logger.error("Export task crashed:\n{}", err)
        QtWidgets.QMessageBox.critical(self, "Export Error", err)

    def _on_export_settings(self) -> None:
        fmt, ok = QtWidgets.QInputDialog.getItem(
            self,
            "Export Format",
            "Format:",
            ["jpeg", "png", "webp"],
            ["jpeg", "png", "webp"].index(self._settings.export_format),
            False,
        )
        if not ok:
            return
        quality = self._settings.export_quality
        if fmt in ("jpeg", "webp"):
            quality, ok = QtWidgets.QInputDialog.getInt(self, "Export Quality", "Quality:", quality, 1, 100)
            if not ok:
                return
        self._update_settings(export_format=fmt, export_quality=quality)

    # Presets

    def _on_save_preset(self) -> None:
        photo = self._store.state.current_photo
        if photo is None:
            return
        name, ok = QtWidgets.QInputDialog.getText(self, "Preset Name", "Name:")
        if not ok or not name.strip():
            return
        name = name.strip()

        default_dir = Path(self._settings.user_presets_dir) if self._settings.user_presets_dir else Path.home()
        if not default_dir.exists():
            default_dir = Path.home()
        fn, _ = QtWidgets.QFileDialog.getSaveFileName(
            self,
            "Save Preset",
            str(default_dir / f"{slugify(name)}.json"),
            "Preset JSON (*.json)",
        )
        if not fn:
            return

        preset = Preset(id=f"user-{slugify(name)}", name=name, adjustments=photo.adjustments, category="User")
        try:
            save_preset_file(preset, fn)
        except OSError as e:
            QtWidgets.QMessageBox.critical(self, "Failed to save preset", str(e))
            return
        self._store.dispatch(AddPreset(preset))

    def _on_load_preset(self) -> None:
        fn, _ = QtWidgets.QFileDialog.getOpenFileName(
            self,
            "Load Preset",
            self._settings.user_presets_dir or str(Path.home()),
            "Preset JSON (*.json);;All Files (*)",
        )
        if not fn:
            return

        try:
            preset = load_preset_file(fn)
        except (PresetFormatError, OSError) as e:
            QtWidgets.QMessageBox.critical(self, "Failed to load preset", str(e))
            return

        self._store.dispatch(AddPreset(preset))
        photo_id = self._current_id()
        if photo_id is not None:
            self._store.dispatch(ApplyPreset(photo_id, preset))

    def _on_browse_user_presets_dir(self) -> None:
        start = self._settings.user_presets_dir or str(Path.home())
        folder = QtWidgets.QFileDialog.getExistingDirectory(self, "Select User Presets Folder", start)
        if not folder:
            return
        self.user_presets_edit.setText(folder)
        self._set_user_presets_dir(folder)

    def _on_user_presets_dir_edited(self) -> None:
        folder = self.user_presets_edit.text().strip()
        if folder != self._settings.user_presets_dir:
            self._set_user_presets_dir(folder)

    def _set_user_presets_dir(self, folder: str) -> None:
        self._update_settings(user_presets_dir=folder)
        self._reload_user_presets_from_folder()

    def _reload_user_presets_from_folder(self) -> None:
        known = {p.id: p for p in self._store.state.presets}
        for preset in load_presets_from_folder(self._settings.user_presets_dir):
            if known.get(preset.id) != preset:
                self._store.dispatch(AddPreset(preset))

    # Settings

    def _update_settings(self, **changes: object) -> None:
        self._settings = replace(self._settings, **changes)
        save_settings(self._qsettings, self._settings)

    def closeEvent(self, event: QtGui.QCloseEvent) -> None:
        self._unsubscribe()
        save_settings(self._qsettings, self._settings)
        super().closeEvent(event)


def main() -> int:
    init_logging()
    app = QtWidgets.QApplication(sys.argv)

    apply_develop_theme(app)

    w = MainWindow()
    w.resize(1400, 860)
    w.show()
    return app.exec()


if __name__ == "__main__":
    raise SystemExit(main())
