import argparse
import logging
import sys
from pathlib import Path

from PySide6.QtWidgets import QApplication

from commit_panel.settings_manager import SettingsManager
from commit_panel.ui.main_window import CommitPanelWindow


def _parse_args(argv: list[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Review and commit local Git changes.")
    parser.add_argument("project", nargs="?", default=".", help="project directory (default: current directory)")
    parser.add_argument("--settings", default=None, help="path to the settings JSON file")
    parser.add_argument("--verbose", action="store_true", help="enable debug logging")
    return parser.parse_known_args(argv)[0]


def _canonical_existing_dir(path_value: str | Path | None) -> str | None:
    text = str(path_value or "").strip()
    if not text:
        return None
    candidate = Path(text).expanduser()
    if not candidate.is_dir():
        return None
    try:
        return str(candidate.resolve())
    except OSError:
        return str(candidate)


if __name__ == "__main__":
    args = _parse_args(sys.argv[1:])
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    project_root = _canonical_existing_dir(args.project)
    if project_root is None:
        logging.getLogger("commit_panel").error("Project directory does not exist: %s", args.project)
        sys.exit(2)

    settings = SettingsManager(args.settings)
    settings.load()
    if settings.load_error:
        logging.getLogger("commit_panel").warning("Using default settings: %s", settings.load_error)

    app = QApplication([sys.argv[0]])
    app.setStyle("Fusion")
    app.setApplicationName(CommitPanelWindow.APP_NAME)
    window = CommitPanelWindow(project_root, settings)
    window.show()
    sys.exit(app.exec())
