from __future__ import annotations

import logging


def configure_logging(level: str = "WARNING") -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.WARNING),
        format="%(asctime)s - %(name)s - [%(levelname)s] - %(message)s",
        force=True,
    )
    # urllib3 logs full request lines at DEBUG, including query strings.
    logging.getLogger("urllib3").setLevel(logging.WARNING)
