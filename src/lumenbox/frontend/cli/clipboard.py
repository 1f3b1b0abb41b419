"""Clipboard utilities for the CLI frontend.

Uses pyperclip for cross-platform clipboard access. Decrypted secrets go to the
clipboard instead of the screen.
"""

from __future__ import annotations

import pyperclip


def copy_to_clipboard(text: str) -> None:
    """Copy text to the system clipboard.

    Raises:
        pyperclip.PyperclipException: If clipboard access fails.
    """
    pyperclip.copy(text)


def clear_clipboard() -> None:
    """Overwrite the clipboard with an empty string."""
    pyperclip.copy("")
