# doc_distiller/ui_utils.py
from __future__ import annotations

import hashlib

__all__ = ["button_key", "human_size"]


def button_key(*parts: object) -> str:
    """
    Build a deterministic, collision-resistant Streamlit key from any number of parts.
    Examples:
      button_key("rm", 0, "notes.txt")
      button_key("download", "md")
    """
    strs = [str(p) for p in parts if p is not None]
    base = strs[0].lower().replace(" ", "_") if strs else "key"
    h = hashlib.sha1(("||".join(strs)).encode("utf-8")).hexdigest()[:10]
    return f"btn::{base}::{h}"


def human_size(n: int) -> str:
    if n < 1024:
        return f"{n} B"
    if n < 1024 * 1024:
        return f"{n / 1024:.1f} KB"
    return f"{n / (1024 * 1024):.1f} MB"
