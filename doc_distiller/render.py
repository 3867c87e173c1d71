# doc_distiller/render.py
from __future__ import annotations

import io
import re
from dataclasses import dataclass
from typing import Any, Optional

from docx import Document
from markdown_it import MarkdownIt

DOWNLOAD_NAME = "processed_result.md"
DOWNLOAD_MIME = "text/markdown; charset=utf-8"
DOCX_NAME = "processed_result.docx"
DOCX_MIME = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"

# Raw HTML in model output is escaped, not passed through to the page.
_md = MarkdownIt("commonmark", {"html": False}).enable(["table", "strikethrough"])


def render_markdown(markdown: str) -> str:
    return _md.render(markdown or "")


@dataclass(frozen=True)
class DownloadArtifact:
    filename: str
    mime: str
    data: bytes

    @property
    def text(self) -> str:
        return self.data.decode("utf-8")


def build_download(markdown: str) -> Optional[DownloadArtifact]:
    """The markdown exactly as the backend returned it, or None before any result."""
    if not markdown:
        return None
    return DownloadArtifact(DOWNLOAD_NAME, DOWNLOAD_MIME, markdown.encode("utf-8"))


# -----------------------------
# DOCX export
# -----------------------------
_XML_INVALID = re.compile(r"[\x00-\x08\x0B\x0C\x0E-\x1F\x7F]")  # allow \t \n \r
_HEADING_RE = re.compile(r"^(#{1,6})\s+(.*?)\s*#*\s*$")
_BULLET_RE = re.compile(r"^\s*[-*+]\s+(.*)$")
_NUMBERED_RE = re.compile(r"^\s*\d+[.)]\s+(.*)$")
_BOLD_RE = re.compile(r"(\*\*[^*]+\*\*)")


def _xml_safe_text(text: Any) -> str:
    """Return a string with characters invalid in XML 1.0 replaced."""
    if text is None:
        return ""
    return _XML_INVALID.sub(" ", str(text))


def _add_runs(paragraph, text: str) -> None:
    for part in _BOLD_RE.split(_xml_safe_text(text)):
        if not part:
            continue
        if part.startswith("**") and part.endswith("**") and len(part) > 4:
            paragraph.add_run(part[2:-2]).bold = True
        else:
            paragraph.add_run(part)


def build_docx_document(markdown: str) -> Optional[bytes]:
    """
    Lay the markdown result out as a .docx: headings, bullet and numbered
    lists, bold spans. Anything else becomes a plain paragraph.
    """
    if not markdown:
        return None
    doc = Document()
    in_fence = False
    for line in markdown.splitlines():
        if line.strip().startswith("```"):
            in_fence = not in_fence
            continue
        if in_fence:
            doc.add_paragraph(_xml_safe_text(line), style="No Spacing")
            continue
        if not line.strip():
            continue
        m = _HEADING_RE.match(line)
        if m:
            doc.add_heading(_xml_safe_text(m.group(2).replace("**", "")), level=len(m.group(1)))
            continue
        m = _BULLET_RE.match(line)
        if m:
            _add_runs(doc.add_paragraph(style="List Bullet"), m.group(1))
            continue
        m = _NUMBERED_RE.match(line)
        if m:
            _add_runs(doc.add_paragraph(style="List Number"), m.group(1))
            continue
        _add_runs(doc.add_paragraph(), line.strip())

    bio = io.BytesIO()
    doc.save(bio)
    return bio.getvalue()
