"""
Append-only note log helpers.

Each entry is written as "[ISO timestamp] text" on its own line.
"""

from __future__ import annotations

from datetime import datetime


def format_note(text: str, at: datetime) -> str:
    return f"[{at.isoformat()}] {text.strip()}"


def append_note(existing: str, text: str, at: datetime) -> str:
    text = (text or "").strip()
    if not text:
        return existing or ""
    entry = format_note(text, at)
    if not existing:
        return entry
    return f"{existing}\n{entry}"
