import logging
import os
import sys
from pathlib import Path

from PySide6.QtGui import QFont
from PySide6.QtWidgets import QApplication, QMainWindow, QPlainTextEdit

from tagjump.settings_store import SettingsStoreError, load_jump_settings
from tagjump.ui.controllers import JumpController

APP_NAME = "TagJump"
SETTINGS_ENV = "TAGJUMP_SETTINGS"


def _settings_path() -> Path:
    override = str(os.environ.get(SETTINGS_ENV) or "").strip()
    if override:
        return Path(override).expanduser()
    return Path.home() / ".tagjump" / "settings.json"


def _startup_file_from_cli(argv: list[str]) -> Path:
    if argv:
        candidate = Path(argv[0]).expanduser()
        if candidate.is_file():
            return candidate
    return Path(__file__).resolve()


class JumpDemoWindow(QMainWindow):
    def __init__(self, file_path: Path, settings: dict):
        super().__init__()
        self.setWindowTitle(f"{APP_NAME} [{file_path.name}]")
        self.resize(900, 700)

        self.editor = QPlainTextEdit(self)
        self.editor.setLineWrapMode(QPlainTextEdit.LineWrapMode.NoWrap)
        self.editor.setFont(QFont("Monospace", 11))
        self.editor.setPlainText(file_path.read_text(encoding="utf-8", errors="replace"))
        self.setCentralWidget(self.editor)

        self.jump_controller = JumpController(self.editor, settings)
        self.jump_controller.jumpCompleted.connect(
            lambda offset: self.statusBar().showMessage(f"Jumped to offset {offset}", 2000)
        )
        self.statusBar().showMessage("Ctrl+; starts tag jump, Ctrl+Shift+; starts regex jump.", 4000)


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(name)s %(levelname)s %(message)s")
    try:
        jump_settings = load_jump_settings(_settings_path())
    except SettingsStoreError as exc:
        logging.getLogger(APP_NAME).warning(f"{exc}; using defaults")
        jump_settings = None

    app = QApplication(sys.argv)
    app.setStyle("Fusion")
    app.setApplicationName(APP_NAME)
    window = JumpDemoWindow(_startup_file_from_cli(sys.argv[1:]), jump_settings or {})
    window.show()
    sys.exit(app.exec())
