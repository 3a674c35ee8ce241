"""
------------------------------------------------------------------------------
Project:        StackSnack
File:           main.py
Version:        1.0.0
Description:    Application entry point. Initializes the Qt environment and
                logging, then launches the reference debugger host with the
                library frame hider attached.
------------------------------------------------------------------------------
"""

import sys
import argparse
from PyQt6.QtWidgets import QApplication
from PyQt6.QtCore import QCoreApplication

from core.config import AppConfig
from core.logger import setup_logging, get_logger
from core.service import StackSnackService
from gui.delegates.hidden_frame_delegate import make_hidden_frame_delegate
from gui.main_window import MainWindow


def main() -> None:
    """
    StackSnack Entry Point.
    """
    parser = argparse.ArgumentParser(description="StackSnack - Hide library frames in the call stack")
    parser.add_argument("-P", "--profile", type=str, help="Application profile for isolation (e.g. 'dev')")
    args, unknown = parser.parse_known_args()

    app = QApplication(sys.argv)

    app_id = "stacksnack"
    if args.profile:
        app_id = f"stacksnack-{args.profile}"
    QCoreApplication.setApplicationName(app_id)

    app_config = AppConfig(profile=args.profile)

    setup_logging(
        level=app_config.get_log_level(),
        log_file=str(app_config.get_log_file_path()),
        component_levels=app_config.get_log_components()
    )
    logger = get_logger("core")
    logger.info(f"StackSnack started (Profile: {args.profile or 'default'})")

    window = MainWindow(app_config=app_config)
    service = StackSnackService(window, app_config, renderer_factory=make_hidden_frame_delegate, parent=window)
    window.attach_service(service)
    if args.profile:
        window.setWindowTitle(f"{window.windowTitle()} [PROFILE: {args.profile.upper()}]")

    window.show()
    sys.exit(app.exec())


if __name__ == "__main__":
    main()
