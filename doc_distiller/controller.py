# doc_distiller/controller.py
from __future__ import annotations

import traceback
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Dict, Iterable, List, Optional, Protocol

from .config import Settings
from .extractor import ExtractionResult, SelectedFile, extract_all
from .llm_client import LLMClient
from .logs import LogFn, log
from .prompting import ComposedRequest, compose
from .render import DownloadArtifact, DOCX_MIME, DOCX_NAME, build_docx_document, build_download, render_markdown
from .selection import SelectionStore

MESSAGES: Dict[str, Dict[str, str]] = {
    "en": {
        "no_files": "No files selected",
        "processing_error": (
            "An error occurred while processing the files. "
            "Please check your network connection or the file contents and try again."
        ),
    },
    "zh": {
        "no_files": "未选择文件",
        "processing_error": "处理文件时发生错误。请检查您的网络连接或文件内容，然后重试。",
    },
}


def message(key: str, lang: str = "en") -> str:
    return MESSAGES.get(lang, MESSAGES["en"])[key]


class Generator(Protocol):
    def generate(self, request: ComposedRequest) -> str: ...


class Phase(str, Enum):
    IDLE = "idle"
    LOADING = "loading"
    SUCCESS = "success"
    FAILED = "failed"


@dataclass
class AppState:
    files: SelectionStore = field(default_factory=SelectionStore)
    phase: Phase = Phase.IDLE
    loading: bool = False
    markdown_result: str = ""
    html_result: str = ""
    error_message: str = ""
    last_results: List[ExtractionResult] = field(default_factory=list)

    @property
    def show_loader(self) -> bool:
        return self.loading

    @property
    def show_result(self) -> bool:
        return self.phase is Phase.SUCCESS and not self.loading

    @property
    def show_error(self) -> bool:
        return self.phase is Phase.FAILED and not self.loading


class Controller:
    """
    The user actions of the app: add files, remove a file, process, download.

    The controller owns an AppState; the UI only reads it. `process` is
    synchronous and refuses to start while the store is empty or a run is
    already in flight.
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        *,
        state: Optional[AppState] = None,
        client_factory: Optional[Callable[[Settings], Generator]] = None,
        logger: Optional[LogFn] = None,
    ) -> None:
        self.settings = settings or Settings.from_env()
        self.state = state or AppState()
        self.logger = logger
        self._client_factory = client_factory or (lambda s: LLMClient(s, logger=self.logger))

    # ---------------- selection ----------------

    def add_files(self, files: Iterable[SelectedFile]) -> List[SelectedFile]:
        added = self.state.files.add(files)
        if added:
            log(f"[select] added {', '.join(f.name for f in added)}", self.logger)
        return added

    def remove_file(self, index: int) -> SelectedFile:
        removed = self.state.files.remove_at(index)
        log(f"[select] removed {removed.name}", self.logger)
        return removed

    @property
    def can_process(self) -> bool:
        return bool(self.state.files) and not self.state.loading

    # ---------------- processing ----------------

    def process(self) -> bool:
        """Run one extract -> compose -> generate -> render pass. False if it did not start."""
        if not self.can_process:
            return False

        state = self.state
        state.loading = True
        state.phase = Phase.LOADING
        state.error_message = ""
        files = state.files.list()
        stage = "extract"
        log(f"[run] start files={len(files)} provider={self.settings.provider}", self.logger)
        try:
            results = extract_all(files, max_workers=self.settings.max_workers, logger=self.logger)
            state.last_results = results

            stage = "compose"
            request = compose(results, lang=self.settings.lang)
            log(f"[run] composed prompt_chars={request.chars}", self.logger)

            stage = "generate"
            client = self._client_factory(self.settings)
            markdown = client.generate(request)

            stage = "render"
            html = render_markdown(markdown)

            state.markdown_result = markdown
            state.html_result = html
            state.phase = Phase.SUCCESS
            log(f"[run] ok chars_out={len(markdown)}", self.logger)
        except Exception as e:
            log(f"[run:err] stage={stage} exc={type(e).__name__}: {e}", self.logger)
            log(traceback.format_exc().rstrip())
            state.phase = Phase.FAILED
            state.error_message = message("processing_error", self.settings.lang)
        finally:
            state.loading = False
        return True

    # ---------------- export ----------------

    def download(self) -> Optional[DownloadArtifact]:
        return build_download(self.state.markdown_result)

    def download_docx(self) -> Optional[DownloadArtifact]:
        data = build_docx_document(self.state.markdown_result)
        if data is None:
            return None
        return DownloadArtifact(DOCX_NAME, DOCX_MIME, data)
