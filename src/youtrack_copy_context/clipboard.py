"""Clipboard writing with an ordered chain of fallbacks.

Each strategy takes the text and reports whether it reached the clipboard.
Strategies are tried in order and the first success wins; an exception inside
a strategy counts as a failure of that strategy only.
"""

from __future__ import annotations

import base64
import logging
import shutil
import subprocess
import sys
from typing import TYPE_CHECKING, Final

import pyperclip

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence

    ClipboardStrategy = Callable[[str], bool]

logger: logging.Logger = logging.getLogger(__name__)

# Native copy commands, in order of preference
COPY_COMMANDS: Final[tuple[tuple[str, ...], ...]] = (
    ("pbcopy",),
    ("wl-copy",),
    ("xclip", "-selection", "clipboard"),
    ("xsel", "--clipboard", "--input"),
    ("clip",),
)
_COMMAND_TIMEOUT_SECONDS: Final[float] = 5.0
_TTY_PATH: Final[str] = "/dev/tty"


def copy_with_pyperclip(text: str) -> bool:
    """Copy through the system clipboard API."""
    pyperclip.copy(text)
    return True


def copy_with_command(text: str) -> bool:
    """Copy by piping the text into the native copy commands found on PATH, until one succeeds."""
    for command in COPY_COMMANDS:
        if shutil.which(command[0]) is None:
            continue
        try:
            _ = subprocess.run(  # noqa: S603
                list(command), input=text, text=True, check=True, capture_output=True, timeout=_COMMAND_TIMEOUT_SECONDS
            )
        except (subprocess.SubprocessError, OSError) as e:
            logger.debug(f"Copy command {command[0]} failed: {e}")
            continue
        return True
    return False


def copy_with_osc52(text: str) -> bool:
    """Ask the terminal emulator to set the clipboard through an OSC 52 escape sequence.

    Works over SSH in terminals that support it. Delivery cannot be confirmed.
    """
    if not sys.stderr.isatty():
        return False
    payload = base64.b64encode(text.encode("utf-8")).decode("ascii")
    with open(_TTY_PATH, "w", encoding="ascii") as tty:  # noqa: PTH123
        _ = tty.write(f"\x1b]52;c;{payload}\x07")
        tty.flush()
    return True


DEFAULT_STRATEGIES: Final[Sequence[ClipboardStrategy]] = (copy_with_pyperclip, copy_with_command, copy_with_osc52)


def copy_to_clipboard(text: str, strategies: Sequence[ClipboardStrategy] = DEFAULT_STRATEGIES) -> bool:
    """Copy text to the clipboard with the first strategy that succeeds.

    Returns:
        True if any strategy succeeded. Never raises.
    """
    for strategy in strategies:
        name = getattr(strategy, "__name__", repr(strategy))
        try:
            if strategy(text):
                logger.debug(f"Copied {len(text)} characters with {name}")
                return True
        except Exception as e:
            logger.debug(f"Clipboard strategy {name} failed: {e}")
        else:
            logger.debug(f"Clipboard strategy {name} not available")
    return False
