from __future__ import annotations

import logging

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def setup_logging(level: str = "INFO") -> None:
    """Configure the root logger once; later calls only adjust the level."""
    root = logging.getLogger()
    if not root.handlers:
        logging.basicConfig(format=LOG_FORMAT)

    resolved = logging.getLevelName((level or "").strip().upper())
    # getLevelName returns "Level X" for unknown names.
    root.setLevel(resolved if isinstance(resolved, int) else logging.INFO)
