"""
overlay_table_window.py

Pure UI container: borderless translucent window with a header label and a
vertical stack of QTableWidgets. Draggable, minimal padding, small font.
No timing logic.
"""

from typing import List, Optional, Sequence, Tuple

from PyQt5 import QtCore, QtGui, QtWidgets


class OverlayTableWindow(QtWidgets.QWidget):
    """Borderless translucent window holding a header label and stacked tables."""

    key_pressed = QtCore.pyqtSignal(str)

    def __init__(self, cfg, n_tables: int = 2):
        super().__init__()
        self._cfg = cfg
        flags = (
            QtCore.Qt.FramelessWindowHint
            | QtCore.Qt.Tool
            | QtCore.Qt.WindowStaysOnTopHint
        )
        self.setWindowFlags(flags)
        self.setAttribute(QtCore.Qt.WA_TranslucentBackground, True)

        layout = QtWidgets.QVBoxLayout(self)
        layout.setContentsMargins(0, 0, 0, 0)
        layout.setSpacing(2)

        self.header = QtWidgets.QLabel()
        layout.addWidget(self.header)

        self.tables: List[QtWidgets.QTableWidget] = []
        for _ in range(max(1, n_tables)):
            t = QtWidgets.QTableWidget()
            self._configure_table(t)
            self.tables.append(t)
            layout.addWidget(t)

        self.apply_config(cfg)

        # Dragging support
        self._drag_pos: Optional[QtCore.QPoint] = None
        self.header.installEventFilter(self)
        for t in self.tables:
            t.viewport().installEventFilter(self)
            t.horizontalHeader().installEventFilter(self)

    def apply_config(self, cfg):
        """(Re)apply fonts and colours from ``cfg`` to the header and every table."""
        self._cfg = cfg
        font = QtGui.QFont(cfg.font_family)
        font.setPointSize(cfg.font_size)

        self.header.setFont(font)
        self.header.setStyleSheet(
            f"background: rgba({cfg.background_rgba}); color: {cfg.text_color}; padding: 2px;"
        )

        row_h = QtGui.QFontMetrics(font).height() + 2
        for t in self.tables:
            t.setFont(font)
            t.horizontalHeader().setFont(font)
            t.verticalHeader().setDefaultSectionSize(row_h)
            t.verticalHeader().setMinimumSectionSize(row_h)
            t.setStyleSheet(
                f"""
                QTableWidget {{
                    background: rgba({cfg.background_rgba});
                    color: {cfg.text_color};
                    gridline-color: {cfg.grid_color};
                }}
                QHeaderView::section {{
                    background: {cfg.header_bg};
                    color: {cfg.header_fg};
                    padding: 0px 2px;
                }}
                """
            )

    def _configure_table(self, t: QtWidgets.QTableWidget):
        t.setShowGrid(False)
        t.verticalHeader().setVisible(False)
        t.setSelectionMode(QtWidgets.QAbstractItemView.NoSelection)
        t.setEditTriggers(QtWidgets.QAbstractItemView.NoEditTriggers)
        t.setFocusPolicy(QtCore.Qt.NoFocus)
        t.setWordWrap(False)
        t.setVerticalScrollBarPolicy(QtCore.Qt.ScrollBarAlwaysOff)
        t.setHorizontalScrollBarPolicy(QtCore.Qt.ScrollBarAlwaysOff)

    # --- Event filter for dragging ---
    def eventFilter(self, source, event):
        draggable = [self.header]
        for t in self.tables:
            draggable.extend((t.viewport(), t.horizontalHeader()))
        if source in draggable:
            if event.type() == QtCore.QEvent.MouseButtonPress and event.button() == QtCore.Qt.LeftButton:
                self._drag_pos = event.globalPos() - self.frameGeometry().topLeft()
                event.accept()
                return True
            elif event.type() == QtCore.QEvent.MouseMove and (event.buttons() & QtCore.Qt.LeftButton):
                if self._drag_pos is not None:
                    self.move(event.globalPos() - self._drag_pos)
                    event.accept()
                    return True
            elif event.type() == QtCore.QEvent.MouseButtonRelease:
                self._drag_pos = None
                event.accept()
                return True
        return super().eventFilter(source, event)

    def keyPressEvent(self, event):
        text = event.text().lower()
        if text:
            self.key_pressed.emit(text)
        super().keyPressEvent(event)

    # --- Helpers ---
    def set_headers(self, table_idx: int, labels: Sequence[str]):
        t = self.tables[table_idx]
        t.setColumnCount(len(labels))
        t.setHorizontalHeaderLabels(list(labels))

    def fill_table(self, table_idx: int, rows: Sequence[Sequence[Tuple[str, Optional[str]]]]):
        """Write (text, color) cells into a table, resizing its row count."""
        t = self.tables[table_idx]
        t.setRowCount(len(rows))
        for r, row in enumerate(rows):
            for c, (text, color) in enumerate(row):
                item = t.item(r, c)
                if item is None:
                    item = QtWidgets.QTableWidgetItem()
                    t.setItem(r, c, item)
                item.setText(text)
                item.setForeground(QtGui.QBrush(QtGui.QColor(color or self._cfg.text_color)))

    def resize_to_fit(self):
        """Resize columns to their contents and the window to wrap the tables."""
        total_w, total_h = 0, self.header.sizeHint().height()
        for t in self.tables:
            for c in range(t.columnCount()):
                t.resizeColumnToContents(c)
            header_h = t.horizontalHeader().height()
            rows_h = sum(t.rowHeight(i) for i in range(t.rowCount()))
            cols_w = sum(t.columnWidth(i) for i in range(t.columnCount()))
            w = cols_w + t.frameWidth() * 2
            h = header_h + rows_h + t.frameWidth() * 2
            t.setFixedHeight(h)
            total_w = max(total_w, w)
            total_h += h + self.layout().spacing()
        self.resize(total_w + self._cfg.fudge_px, total_h)
