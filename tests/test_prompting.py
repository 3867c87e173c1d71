from __future__ import annotations

from doc_distiller.extractor import ExtractionResult, ExtractionStatus
from doc_distiller.prompting import PROMPT_TEMPLATE_EN, PROMPT_TEMPLATE_ZH, compose


def _ok(name, text):
    return ExtractionResult(name, ExtractionStatus.OK, text)


def test_files_wrapped_with_markers_in_order():
    req = compose([_ok("b.md", "second"), _ok("a.txt", "first")])
    assert req.content == (
        "START OF FILE: b.md\nsecond\nEND OF FILE: b.md"
        "\n\n"
        "START OF FILE: a.txt\nfirst\nEND OF FILE: a.txt"
    )


def test_placeholders_included_verbatim():
    req = compose([
        ExtractionResult("x.png", ExtractionStatus.UNSUPPORTED),
        ExtractionResult("y.pdf", ExtractionStatus.FAILED, detail="PDF"),
    ])
    assert "START OF FILE: x.png\n[Unsupported file type: x.png]\nEND OF FILE: x.png" in req.content
    assert "[Error: could not read PDF file y.pdf]" in req.content


def test_messages_are_system_then_user():
    req = compose([_ok("a.txt", "Hello")])
    msgs = req.messages()
    assert [m["role"] for m in msgs] == ["system", "user"]
    assert msgs[0]["content"] == PROMPT_TEMPLATE_EN
    assert msgs[1]["content"] == req.content
    assert req.chars == len(PROMPT_TEMPLATE_EN) + len(req.content)


def test_language_selects_template():
    assert compose([], lang="zh").instructions == PROMPT_TEMPLATE_ZH
    assert compose([], lang="fr").instructions == PROMPT_TEMPLATE_EN


def test_template_carries_the_core_rules():
    t = PROMPT_TEMPLATE_EN
    for phrase in ("information units", "outline", "identical", "never discard", "Markdown", "no preamble"):
        assert phrase in t
    assert "{file_content}" not in t


def test_empty_selection_composes_empty_content():
    assert compose([]).content == ""
