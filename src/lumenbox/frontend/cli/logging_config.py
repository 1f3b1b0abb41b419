"""Lightweight logging setup for the command line and the TUI."""

import logging
import sys


def configure_logging(level: int = logging.INFO) -> None:
    # Configure root logger once; stderr keeps stdout clean for decrypted output.
    logging.basicConfig(
        level=level,
        format="[%(asctime)s] %(levelname)s %(name)s: %(message)s",
        datefmt="%H:%M:%S",
        stream=sys.stderr,
    )
