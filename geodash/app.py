"""PySide6 application entry point."""

import sys

from PySide6.QtWidgets import QApplication

from geodash.core.config import load_config
from geodash.core.logger import setup_logging
from geodash.gui.main_window import MainWindow


def main(config_path=None) -> int:
    config = load_config(override_path=config_path)
    setup_logging()

    app = QApplication.instance() or QApplication(sys.argv)
    app.setQuitOnLastWindowClosed(True)
    window = MainWindow(config=config)
    window.resize(1200, 800)
    window.show()
    return app.exec()


if __name__ == "__main__":
    sys.exit(main())
