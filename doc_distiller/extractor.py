# doc_distiller/extractor.py
from __future__ import annotations

import csv
import io
import mimetypes
import os
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any, List, Optional, Sequence

from openpyxl import load_workbook
from pypdf import PdfReader

from .logs import LogFn, log

TEXT_EXTS = {".txt", ".md", ".markdown"}
TEXT_MIMES = {"text/plain", "text/markdown", "text/x-markdown"}

PDF_EXTS = {".pdf"}
PDF_MIMES = {"application/pdf"}

SHEET_EXTS = {".xlsx", ".xlsm"}
SHEET_MIMES = {
    "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
    "application/vnd.ms-excel.sheet.macroenabled.12",
}


@dataclass(frozen=True)
class SelectedFile:
    name: str
    data: bytes
    mime_type: str = ""

    @classmethod
    def from_upload(cls, upload: Any) -> "SelectedFile":
        """Wrap a Streamlit UploadedFile (anything with .name/.type/.getvalue())."""
        return cls(name=upload.name, data=upload.getvalue(), mime_type=getattr(upload, "type", "") or "")

    @classmethod
    def from_path(cls, path: str | os.PathLike) -> "SelectedFile":
        p = Path(path)
        mime, _ = mimetypes.guess_type(p.name)
        return cls(name=p.name, data=p.read_bytes(), mime_type=mime or "")

    @property
    def ext(self) -> str:
        return Path(self.name).suffix.lower()


class ExtractionStatus(str, Enum):
    OK = "ok"
    UNSUPPORTED = "unsupported"
    FAILED = "failed"


@dataclass(frozen=True)
class ExtractionResult:
    name: str
    status: ExtractionStatus
    text: str = ""
    detail: str = ""   # format label for FAILED, error repr kept for the log

    @property
    def ok(self) -> bool:
        return self.status is ExtractionStatus.OK

    @property
    def prompt_text(self) -> str:
        """The text this file contributes to the request, placeholder included."""
        if self.status is ExtractionStatus.OK:
            return self.text
        if self.status is ExtractionStatus.UNSUPPORTED:
            return f"[Unsupported file type: {self.name}]"
        return f"[Error: could not read {self.detail or 'file'} file {self.name}]"


# ---------------------
# Format readers
# ---------------------

def _read_text(data: bytes) -> str:
    return data.decode("utf-8", errors="replace")


def _page_items(page: Any) -> List[str]:
    items: List[str] = []

    def visitor(text, *_args):
        s = (text or "").strip()
        if s:
            items.append(s)

    page.extract_text(visitor_text=visitor)
    return items


def _read_pdf(data: bytes) -> str:
    reader = PdfReader(io.BytesIO(data))
    return "\n".join(" ".join(_page_items(page)) for page in reader.pages)


def _sheet_to_csv(ws) -> str:
    buf = io.StringIO()
    writer = csv.writer(buf, lineterminator="\n")
    for row in ws.iter_rows(values_only=True):
        writer.writerow(["" if v is None else v for v in row])
    return buf.getvalue()


def _read_workbook(data: bytes) -> str:
    wb = load_workbook(io.BytesIO(data), read_only=True, data_only=True)
    try:
        blocks = [f"--- Sheet: {ws.title} ---\n{_sheet_to_csv(ws)}" for ws in wb.worksheets]
    finally:
        wb.close()
    return "\n".join(blocks)


# ---------------------
# Dispatch
# ---------------------

def detect_kind(file: SelectedFile) -> Optional[str]:
    """Extension first, declared MIME type second."""
    ext = file.ext
    if ext in TEXT_EXTS:
        return "text"
    if ext in PDF_EXTS:
        return "pdf"
    if ext in SHEET_EXTS:
        return "xlsx"
    mime = (file.mime_type or "").split(";")[0].strip().lower()
    if mime in TEXT_MIMES:
        return "text"
    if mime in PDF_MIMES:
        return "pdf"
    if mime in SHEET_MIMES:
        return "xlsx"
    return None


def extract(file: SelectedFile, *, logger: Optional[LogFn] = None) -> ExtractionResult:
    kind = detect_kind(file)

    if kind == "text":
        text = _read_text(file.data)
        log(f"[extract] {file.name}: text chars={len(text)}", logger)
        return ExtractionResult(file.name, ExtractionStatus.OK, text)

    if kind in ("pdf", "xlsx"):
        label = "PDF" if kind == "pdf" else "spreadsheet"
        try:
            text = _read_pdf(file.data) if kind == "pdf" else _read_workbook(file.data)
        except Exception as e:
            log(f"[extract:err] {file.name}: {label} parse failed -> {e!r}", logger)
            return ExtractionResult(file.name, ExtractionStatus.FAILED, detail=label)
        log(f"[extract] {file.name}: {kind} chars={len(text)}", logger)
        return ExtractionResult(file.name, ExtractionStatus.OK, text)

    log(f"[extract:warn] {file.name}: unsupported type (mime={file.mime_type or '?'})", logger)
    return ExtractionResult(file.name, ExtractionStatus.UNSUPPORTED)


def extract_all(
    files: Sequence[SelectedFile],
    *,
    max_workers: Optional[int] = None,
    logger: Optional[LogFn] = None,
) -> List[ExtractionResult]:
    """
    Extract every file concurrently; results come back in input order.

    Executor.map re-raises the first escaped exception, so one unexpected
    failure fails the batch.
    """
    if not files:
        return []
    with ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="extract") as pool:
        return list(pool.map(lambda f: extract(f, logger=logger), files))
