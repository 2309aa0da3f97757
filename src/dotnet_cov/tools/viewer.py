"""Open a generated report in the host's default viewer."""

from __future__ import annotations

import logging
import webbrowser
from pathlib import Path
from typing import Callable

LOGGER = logging.getLogger(__name__)

ReportViewer = Callable[[Path], bool]


def open_in_browser(entry_point: Path) -> bool:
    """Open ``entry_point`` through its ``file://`` URI; return whether a browser accepted it."""

    opened = webbrowser.open(entry_point.absolute().as_uri())
    if not opened:
        LOGGER.warning("viewer.not_opened entry_point=%s", entry_point)
    return opened
