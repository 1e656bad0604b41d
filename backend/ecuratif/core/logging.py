"""Process-wide logging setup."""

from __future__ import annotations

import logging

from ecuratif.core.config import get_settings


def configure_logging() -> None:
    """Configure root logging once for the API or worker process."""
    level_name = get_settings().log_level.strip().upper()
    logging.basicConfig(
        level=getattr(logging, level_name, logging.INFO),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )
