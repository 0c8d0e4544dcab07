from __future__ import annotations

import argparse
import sys
from pathlib import Path

from PySide6.QtWidgets import QApplication

from .core.logger import configure_logging
from .core.settings import load_settings
from .ui.main_window import MainWindow


def _parse_args(argv: list[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="MiniPhoto")
    parser.add_argument(
        "image",
        nargs="?",
        help="Optional Pfad zu einer Bilddatei, die beim Start geöffnet wird.",
    )
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    configure_logging()
    settings = load_settings()
    args = _parse_args(argv if argv is not None else sys.argv[1:])
    initial_path = Path(args.image).expanduser() if args.image else None

    app = QApplication(sys.argv)
    app.setApplicationName("MiniPhoto")
    app.setOrganizationName("MiniPhoto")

    if initial_path and not initial_path.exists():
        initial_path = None

    window = MainWindow(settings, initial_path=initial_path)
    window.show()

    return app.exec()


if __name__ == "__main__":
    raise SystemExit(main())
