# apps/streamlit_app.py
from __future__ import annotations

# ---------- import bootstrap (make project root importable) ----------
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]  # repo root
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))
# --------------------------------------------------------------------

import os
from typing import List

import streamlit as st
from dotenv import find_dotenv, load_dotenv

# Load .env early so key badges reflect env even before running
load_dotenv(find_dotenv(usecwd=True) or (ROOT / ".env"), override=False)

from doc_distiller.config import LANGUAGES, PROVIDERS, ConfigError, Settings
from doc_distiller.controller import Controller, message
from doc_distiller.extractor import ExtractionStatus, SelectedFile
from doc_distiller.ui_utils import button_key, human_size


st.set_page_config(page_title="Document Distiller", page_icon="📑", layout="wide")
st.title("📑 Document Distiller")
st.caption("Upload documents, let the model restructure them into one clean markdown file.")

# ---- Session state ----
st.session_state.setdefault("uploader_gen", 0)
st.session_state.setdefault("log_messages", [])
if "controller" not in st.session_state:
    try:
        base_settings = Settings.from_env()
    except ConfigError as e:
        st.error(f"Configuration error: {e}")
        st.stop()
    st.session_state.base_settings = base_settings
    st.session_state.controller = Controller(base_settings)

ctl: Controller = st.session_state.controller
state = ctl.state
base: Settings = st.session_state.base_settings

# ---- Sidebar Configuration ----
with st.sidebar:
    st.subheader("⚙️ Options")
    providers = sorted(PROVIDERS)
    provider = st.selectbox(
        "LLM provider",
        options=providers,
        index=providers.index(base.provider) if base.provider in PROVIDERS else 0,
        help="Switching away from LLM_PROVIDER uses the chosen provider's own key, model and endpoint; LLM_MODEL and LLM_BASE_URL are ignored.",
        key="provider",
    )
    model = st.text_input("Model (blank = provider default)", value="", key="model")
    lang = st.radio("Language", options=list(LANGUAGES), index=LANGUAGES.index(base.lang), horizontal=True, key="lang")

    # Key badges
    st.caption(
        "  |  ".join(
            f"{key_env} set: {'✅' if os.getenv(key_env) else '❌'}"
            for key_env in (PROVIDERS[p][1] for p in providers)
        )
    )

ctl.settings = base.with_overrides(provider=provider, model=model or None, lang=lang)

# ---- Upload ----
st.markdown("### Upload documents")
uploads = st.file_uploader(
    "Text, markdown, PDF or Excel files (other types are passed on as a placeholder)",
    type=None,
    accept_multiple_files=True,
    key=f"uploader_{st.session_state.uploader_gen}",
)
if uploads:
    ctl.add_files(SelectedFile.from_upload(u) for u in uploads)
    # Fresh widget so a removed file can be chosen again
    st.session_state.uploader_gen += 1
    st.rerun()

# ---- Selected files ----
files = state.files.list()
if not files:
    st.info(message("no_files", ctl.settings.lang))
else:
    for i, f in enumerate(files):
        c1, c2, c3 = st.columns([0.06, 0.64, 0.30])
        if c1.button("✕", key=button_key("rm", i, f.name), help=f"Remove {f.name}"):
            ctl.remove_file(i)
            st.rerun()
        c2.write(f.name)
        c3.caption(f"{human_size(len(f.data))} | `{f.mime_type or 'unknown'}`")

run = st.button(
    "✨ Process files",
    type="primary",
    key="process",
    disabled=not ctl.can_process,
)
st.divider()

if run:
    run_log: List[str] = []

    # Extraction logs arrive from worker threads; only touch session_state here.
    with st.spinner("Extracting text and waiting for the model…"):
        ctl.logger = run_log.append
        try:
            ctl.process()
        finally:
            ctl.logger = None
    st.session_state.log_messages = run_log

# ---- Result / error panels ----
if state.show_error:
    st.error(state.error_message)

if state.show_result:
    problems = [r for r in state.last_results if not r.ok]
    if problems:
        with st.expander(f"⚠️ {len(problems)} file(s) could not be read", expanded=False):
            for r in problems:
                kind = "unsupported type" if r.status is ExtractionStatus.UNSUPPORTED else f"{r.detail} parse error"
                st.write(f"• `{r.name}`: {kind}")

    st.subheader("📄 Result")
    md_art = ctl.download()
    docx_art = ctl.download_docx()
    col_md, col_docx = st.columns(2)
    if md_art:
        col_md.download_button(
            "⬇️ Download Markdown", md_art.data, md_art.filename, md_art.mime,
            key=button_key("download", "md"), use_container_width=True,
        )
    if docx_art:
        col_docx.download_button(
            "⬇️ Download .docx", docx_art.data, docx_art.filename, docx_art.mime,
            key=button_key("download", "docx"), use_container_width=True,
        )
    with st.container(border=True):
        st.markdown(state.html_result, unsafe_allow_html=True)

if st.session_state.log_messages:
    with st.expander("🪵 Run Logs", expanded=False):
        st.text_area(
            "Logs",
            "\n".join(st.session_state.log_messages),
            height=240,
            key="run_log_display",
            label_visibility="collapsed",
        )
