from __future__ import annotations

import io
from typing import List, Sequence

import pytest
from openpyxl import Workbook

from doc_distiller import extractor
from doc_distiller.extractor import SelectedFile

_ENV = [
    "LLM_PROVIDER", "LLM_MODEL", "LLM_BASE_URL", "LLM_TEMPERATURE", "LLM_TIMEOUT",
    "GEMINI_API_KEY", "GEMINI_MODEL", "OPENAI_API_KEY", "OPENAI_MODEL",
    "GROQ_API_KEY", "GROQ_MODEL",
    "DISTILLER_LANG", "DISTILLER_MAX_WORKERS", "DISTILLER_LOG_FILE", "DISTILLER_DEBUG",
]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in _ENV:
        monkeypatch.delenv(name, raising=False)


class FakePage:
    """Stands in for a pypdf page: reports its items to the text visitor."""

    def __init__(self, items: Sequence[str]):
        self.items = list(items)

    def extract_text(self, visitor_text=None):
        for item in self.items:
            if visitor_text:
                visitor_text(item, None, None, None, None)
        return " ".join(self.items)


class FakeReader:
    def __init__(self, pages: List[List[str]]):
        self.pages = [FakePage(p) for p in pages]


@pytest.fixture
def fake_pdf(monkeypatch):
    """Route every PDF through fake pages; call with the list of page items."""

    def install(pages: List[List[str]]):
        monkeypatch.setattr(extractor, "PdfReader", lambda stream: FakeReader(pages))

    return install


def make_xlsx(sheets) -> bytes:
    wb = Workbook()
    wb.remove(wb.active)
    for title, rows in sheets:
        ws = wb.create_sheet(title)
        for row in rows:
            ws.append(list(row))
    bio = io.BytesIO()
    wb.save(bio)
    return bio.getvalue()


def text_file(name: str, body: str, mime: str = "text/plain") -> SelectedFile:
    return SelectedFile(name=name, data=body.encode("utf-8"), mime_type=mime)


def make_pdf(streams: Sequence[str]) -> bytes:
    """Minimal PDF with one Helvetica page per content stream."""
    n = len(streams)
    kids = " ".join(f"{4 + 2 * i} 0 R" for i in range(n))
    objects = [
        "<< /Type /Catalog /Pages 2 0 R >>",
        f"<< /Type /Pages /Kids [{kids}] /Count {n} >>",
        "<< /Type /Font /Subtype /Type1 /BaseFont /Helvetica >>",
    ]
    for i, stream in enumerate(streams):
        body = stream.encode("latin-1")
        objects.append(
            "<< /Type /Page /Parent 2 0 R /MediaBox [0 0 612 792] "
            f"/Resources << /Font << /F1 3 0 R >> >> /Contents {5 + 2 * i} 0 R >>"
        )
        objects.append(f"<< /Length {len(body)} >>\nstream\n{stream}\nendstream")

    out = io.BytesIO()
    out.write(b"%PDF-1.4\n")
    offsets = []
    for num, obj in enumerate(objects, start=1):
        offsets.append(out.tell())
        out.write(f"{num} 0 obj\n{obj}\nendobj\n".encode("latin-1"))
    xref = out.tell()
    out.write(f"xref\n0 {len(objects) + 1}\n0000000000 65535 f \n".encode("latin-1"))
    for off in offsets:
        out.write(f"{off:010d} 00000 n \n".encode("latin-1"))
    out.write(
        f"trailer\n<< /Size {len(objects) + 1} /Root 1 0 R >>\nstartxref\n{xref}\n%%EOF\n".encode("latin-1")
    )
    return out.getvalue()
