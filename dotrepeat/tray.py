"""System tray icon with context menu for dotrepeat."""
import logging
from PyQt5.QtWidgets import QSystemTrayIcon, QMenu, QAction, QApplication
from PyQt5.QtGui import QIcon, QPixmap, QPainter, QColor, QFont
from PyQt5.QtCore import Qt

logger = logging.getLogger(__name__)


def _create_icon(enabled: bool) -> QIcon:
    """Create a simple colored icon indicating enabled/disabled state."""
    size = 64
    pixmap = QPixmap(size, size)
    pixmap.fill(Qt.transparent)
    painter = QPainter(pixmap)
    painter.setRenderHint(QPainter.Antialiasing)

    color = QColor(0x21, 0x96, 0xF3) if enabled else QColor(0x9E, 0x9E, 0x9E)
    painter.setBrush(color)
    painter.setPen(Qt.NoPen)
    painter.drawEllipse(4, 4, size - 8, size - 8)

    painter.setPen(QColor(255, 255, 255))
    painter.setFont(QFont("Sans", 36, QFont.Bold))
    painter.drawText(pixmap.rect(), Qt.AlignCenter, ".")

    painter.end()
    return QIcon(pixmap)


class TrayIcon(QSystemTrayIcon):
    """System tray icon: enable/disable, clear history, notifications."""

    def __init__(self, config, daemon, parent=None):
        super().__init__(parent)
        self.config = config
        self.daemon = daemon

        self._refresh_state()
        self._build_menu()
        self.activated.connect(self._on_activated)

    def _refresh_state(self):
        enabled = self.config.enabled
        self.setIcon(_create_icon(enabled))
        self.setToolTip("dotrepeat" + (" [ON]" if enabled else " [OFF]"))

    def _build_menu(self):
        menu = QMenu()

        self._toggle_action = QAction("Disable" if self.config.enabled else "Enable", menu)
        self._toggle_action.triggered.connect(self._toggle_enabled)
        menu.addAction(self._toggle_action)

        menu.addSeparator()

        clear_action = QAction("Clear history", menu)
        clear_action.triggered.connect(self.daemon.clear_history)
        menu.addAction(clear_action)

        menu.addSeparator()

        quit_action = QAction("Quit", menu)
        quit_action.triggered.connect(self._quit)
        menu.addAction(quit_action)

        self.setContextMenu(menu)

    def show_notification(self, text: str):
        self.showMessage("dotrepeat", text, QSystemTrayIcon.Warning, 4000)

    def _toggle_enabled(self):
        self.config.enabled = not self.config.enabled
        self._toggle_action.setText("Disable" if self.config.enabled else "Enable")
        self._refresh_state()
        logger.info("Toggled: %s", "enabled" if self.config.enabled else "disabled")

    def _quit(self):
        self.daemon.stop()
        QApplication.quit()

    def _on_activated(self, reason):
        if reason == QSystemTrayIcon.Trigger:  # left click
            self._toggle_enabled()
