"""Clipboard via the OSC 52 escape sequence, and the external pager command"""

import base64
import shlex

# Payload limit in bytes of UTF-8 text, before base64 encoding
OSC52_MAX_TEXT_BYTES = 100 * 1024

SCREEN_CHUNK_SIZE = 76

DEFAULT_PAGER = ("vim", "-R")


def truncate_utf8(text: str, max_bytes: int) -> str:
    """Cut text to at most max_bytes of UTF-8 without splitting a character"""
    data = text.encode("utf-8")
    if len(data) <= max_bytes:
        return text
    return data[:max_bytes].decode("utf-8", errors="ignore")


def osc52_sequence(text: str, term: str = "", tmux: bool = False) -> str:
    """Build the escape sequence that puts text on the system clipboard.

    Inside tmux the sequence is wrapped in a DCS passthrough with every inner
    ESC doubled. GNU screen limits DCS strings, so the payload is split into
    chunks that each get their own DCS wrapper.
    """
    payload = truncate_utf8(text, OSC52_MAX_TEXT_BYTES)
    encoded = base64.b64encode(payload.encode("utf-8")).decode("ascii")
    term = term.lower()

    if tmux or term.startswith("tmux"):
        inner = f"\x1b]52;c;{encoded}\x07".replace("\x1b", "\x1b\x1b")
        return f"\x1bPtmux;{inner}\x1b\\"

    if term.startswith("screen"):
        chunks = [
            encoded[i : i + SCREEN_CHUNK_SIZE]
            for i in range(0, len(encoded), SCREEN_CHUNK_SIZE)
        ]
        return "\x1bP\x1b]52;c;" + "\x1b\\\x1bP".join(chunks) + "\x07\x1b\\"

    return f"\x1b]52;c;{encoded}\x07"


def pager_command(path: str, pager: str | None = None) -> list[str]:
    """Get the command that opens a file in the user's pager"""
    args = shlex.split(pager) if pager else []
    if not args:
        args = list(DEFAULT_PAGER)
    return [*args, path]
