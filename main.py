import logging
import os
import sys
from pathlib import Path

from PySide6.QtCore import QSettings, QStandardPaths
from PySide6.QtWidgets import QApplication

ROOT = Path(__file__).resolve().parent
SRC_DIR = ROOT / "src"

if str(SRC_DIR) not in sys.path:
    sys.path.insert(0, str(SRC_DIR))

from core.state import AppState, Notify
from library.catalog import TrackCatalog
from player.now_playing import NowPlayingCenter
from player.player import Player
from ui.main_window import MainWindow

logger = logging.getLogger("simpleplayer")

def configure_logging() -> None:
    level = os.getenv("SIMPLEPLAYER_LOG_LEVEL", "INFO").upper()
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

def get_app_data_dir() -> str:
    base = os.getenv("SIMPLEPLAYER_DATA_DIR") or QStandardPaths.writableLocation(QStandardPaths.AppDataLocation)
    os.makedirs(base, exist_ok=True)
    return base

def init_app_state() -> AppState:
    app_state = AppState()

    app_data_dir = get_app_data_dir()
    app_state.app_data_dir = app_data_dir
    app_state.media_dir = os.path.join(app_data_dir, "Music")
    logger.info("App data directory: %s", app_data_dir)

    app_state.settings = QSettings(os.path.join(app_data_dir, "settings.ini"), QSettings.IniFormat)

    app_state.catalog = TrackCatalog(app_state.settings, app_state.media_dir)
    app_state.catalog.load()
    logger.info("Loaded %d track(s)", len(app_state.catalog))

    app_state.now_playing = NowPlayingCenter()

    try:
        app_state.player = Player(app_state.now_playing)
    except Exception as e:
        logger.exception("Failed to initialize audio player")
        app_state.player = None
        app_state.queued_notifications.append(
            Notify(message=f"Failed to initialize audio player: {e}", notify_type="error")
        )

    return app_state

def main() -> int:
    configure_logging()

    qt_app = QApplication(sys.argv)
    qt_app.setApplicationName("SimplePlayer")
    qt_app.setOrganizationName("SimplePlayer")

    app_state = init_app_state()
    main_window = MainWindow(app_state)
    main_window.show()

    return qt_app.exec()

if __name__ == "__main__":
    raise SystemExit(main())
