"""PySide6 user interface: map canvas, measurement panel, main window."""
