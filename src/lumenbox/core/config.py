"""
Runtime settings for LumenBox, read from environment variables:

    LUMENBOX_HOME       storage root for .enc containers (default ~/.lumenbox)
    LUMENBOX_FORMAT     container format for new writes: "legacy" or "sealed"
    LUMENBOX_LOG_LEVEL  logging level name (default INFO)

Passwords are never read from the environment.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional

from .exceptions import InvalidInputError

FORMAT_LEGACY = "legacy"
FORMAT_SEALED = "sealed"
CONTAINER_FORMATS = (FORMAT_LEGACY, FORMAT_SEALED)


@dataclass
class Settings:
    home: Path
    container_format: str = FORMAT_LEGACY
    log_level: int = logging.INFO

    def __post_init__(self):
        if self.container_format not in CONTAINER_FORMATS:
            raise InvalidInputError(
                f"Unknown container format {self.container_format!r}; "
                f"expected one of {', '.join(CONTAINER_FORMATS)}"
            )

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "Settings":
        env = os.environ if environ is None else environ

        home = env.get("LUMENBOX_HOME")
        level_name = env.get("LUMENBOX_LOG_LEVEL", "INFO").upper()
        level = logging.getLevelName(level_name)
        if not isinstance(level, int):
            raise InvalidInputError(f"Unknown log level {level_name!r}")

        return cls(
            home=Path(home).expanduser() if home else Path.home() / ".lumenbox",
            container_format=env.get("LUMENBOX_FORMAT", FORMAT_LEGACY).lower(),
            log_level=level,
        )
