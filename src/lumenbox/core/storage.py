"""
Storage module for encrypted secret containers

Structure Map for reference:
==============================
 - <storage_root>/
      - {name}.enc
      - .{name}.enc.<random>.tmp (only while a write is in flight)
==============================
> One container per logical name. The ``.enc`` suffix is appended here and
  nowhere else, so callers only ever deal with logical names.
> Writes are atomic: a reader sees either the previous container or the new one.
> OSError from the filesystem is propagated unchanged; retrying is up to the caller.
"""

import logging
import os
import tempfile
from pathlib import Path
from typing import List, Optional

from .exceptions import InvalidInputError

logger = logging.getLogger(__name__)

SUFFIX = ".enc"


class SecretStorage:
    """File-backed storage for encrypted containers"""

    def __init__(self, root_path: Optional[str | Path] = None):
        self.root = (
            Path(root_path).expanduser() if root_path else Path.home() / ".lumenbox"
        )
        self.root.mkdir(parents=True, exist_ok=True)

    def path_for(self, name: str) -> Path:
        if not name or not name.strip():
            raise InvalidInputError("Secret name must not be empty")
        if "/" in name or "\\" in name or os.sep in name:
            raise InvalidInputError(f"Secret name must not contain path components: {name!r}")
        if name.startswith("."):
            # dot-prefixed names are reserved for in-flight temporary files
            raise InvalidInputError(f"Secret name must not start with a dot: {name!r}")
        return self.root / f"{name}{SUFFIX}"

    def write(self, name: str, data: bytes) -> Path:
        destination = self.path_for(name)
        fd, tmp_name = tempfile.mkstemp(
            prefix=f".{destination.name}.", suffix=".tmp", dir=self.root
        )
        tmp_path = Path(tmp_name)
        try:
            with os.fdopen(fd, "wb") as f:
                f.write(data)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp_path, destination)
        except BaseException:
            tmp_path.unlink(missing_ok=True)
            raise
        logger.debug("Wrote container %s (%d bytes)", destination.name, len(data))
        return destination

    def read(self, name: str) -> bytes:
        return self.path_for(name).read_bytes()

    def exists(self, name: str) -> bool:
        return self.path_for(name).is_file()

    def delete(self, name: str) -> None:
        self.path_for(name).unlink()
        logger.debug("Deleted container %s%s", name, SUFFIX)

    def list_names(self) -> List[str]:
        return sorted(
            p.name[: -len(SUFFIX)]
            for p in self.root.glob(f"*{SUFFIX}")
            if p.is_file() and not p.name.startswith(".")
        )
