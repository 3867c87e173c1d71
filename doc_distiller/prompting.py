# doc_distiller/prompting.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Sequence

from .extractor import ExtractionResult

PROMPT_TEMPLATE_EN = """\
#### 1. Role & Goal
You are an expert assistant for information consolidation and data cleaning. Your task is to turn raw text whose content is mixed and whose formatting is messy into a structured document that is logically clear, well organised and loses no content.

#### 2. Core Instructions
Process the raw text supplied in the next message by following these steps strictly:

**Step 1: Format Parsing & Cleaning**
- **Remove formatting markup**: strip all non-content HTML tags (such as `<div>`, `<span>`, `<p>`, `<body>`) and markdown markers (such as `#`, `*`, `-`, `[]()`).
- **Keep the semantics**: while removing markup, understand what it meant. `<h1>` or `# Title` marks a top-level heading; `<li>` or `- item` marks a list item. Carry that hierarchy into the later steps.
- **Remove whitespace and noise**: drop redundant spaces, blank lines and stray special characters.

**Step 2: Information Identification & Extraction**
- Split the cleaned text into independent "information units" (a sentence, a paragraph, a definition or a key data point).
- Read each unit carefully and understand its core meaning.

**Step 3: Topic Clustering & Structuring**
- **Find the core topics** that recur across the information units.
- **Build an outline**: derive a clear hierarchical outline from those topics (topic A -> subtopic A1 -> details; topic B -> subtopic B1 -> details).
- **Place every unit** under the matching position of the outline.

**Step 4: Deduplication & Merging**
- **Find duplicate or similar units**: identical content or content with highly similar meaning.
- **Merge intelligently**:
    - For **identical** content keep exactly one copy.
    - For **overlapping or complementary** content (one place says "apples are fruit", another says "apples are rich in vitamins"), merge them into one fuller, more accurate statement ("apples are a vitamin-rich fruit").
    - Merged sentences must read naturally.

**Step 5: Information Integrity**
- **This is the highest-priority rule**: never discard or arbitrarily cut any **unique, non-duplicate** information unit. Even a unit that looks unimportant or off-topic must be kept, for example under an "Other information" section.
- **The goal is lossless reorganisation, not lossy compression.**

#### 3. Output Requirements
- **Format**: clean **Markdown**.
- **Structure**:
    - Use heading levels (`#`, `##`, `###`) to reflect the hierarchy.
    - Use unordered (`-`) or ordered (`1.`) lists for peer items.
    - Use **bold** for key terms.
- **Language**: concise, neutral, professional and easy to understand.
- Output only the document: no preamble, no explanation of what you did.

#### 4. Text to Process
The text follows in the next message. Each source file is enclosed between `START OF FILE: <name>` and `END OF FILE: <name>` lines.
"""

PROMPT_TEMPLATE_ZH = """\
#### 1. 角色与目标 (Role & Goal)
你是一个精通信息整合和数据清洗的专家级AI助手。你的任务是将一份内容混杂、格式混乱的原始文本，转换成一份逻辑清晰、结构合理、内容无损的结构化文档。

#### 2. 核心指令 (Core Instructions)
请严格遵循以下步骤，处理下一条消息中提供的原始文本：

**步骤一：格式解析与清理**
- **识别并移除格式标签**：去除所有非内容性的HTML标签（如 `<div>`, `<span>`, `<p>`, `<body>` 等）和Markdown标记（如 `#`, `*`, `-`, `[]()` 等）。
- **保留语义信息**：在移除标签的同时，要理解其原始意图。例如，`<h1>` 或 `# 标题` 暗示这是一个顶级标题；`<li>` 或 `- 列表项` 暗示这是一个列表项。在后续的结构化步骤中要保留这种层级和关系。
- **清理空白与噪声**：移除多余的空格、空行和不必要的特殊字符，使文本干净整洁。

**步骤二：信息识别与提取**
- 将清理后的文本分解为独立的“信息单元”（可以是一个句子、一个段落、一个定义或一个关键数据点）。
- 仔细阅读和理解每一个信息单元的核心含义。

**步骤三：主题归类与结构化**
- **识别核心主题**：分析所有的信息单元，找出其中反复出现的几个核心主题或议题。
- **构建逻辑大纲**：根据识别出的核心主题，创建一个逻辑清晰的层级大纲（例如：主题A -> 子主题A1 -> 具体信息；主题B -> 子主题B1 -> 具体信息）。
- **内容归位**：将每一个信息单元，根据其内容，精准地放置到大纲的相应位置下。

**步骤四：内容去重与合并**
- **识别重复/相似内容**：找出内容完全相同或语义上高度相似的信息单元。
- **智能合并**：
    - 对于**完全相同**的内容，只保留一个。
    - 对于**部分重叠或互为补充**的内容（例如，一处说“苹果是水果”，另一处说“苹果富含维生素”），将它们合并成一个更完整、更准确的陈述（如“苹果是一种富含维生素的水果”）。
    - 合并时，要确保新生成的语句通顺自然。

**步骤五：保持信息完整性**
- **这是最高准则**：在整个整理过程中，绝对不能主观臆断、任意删减任何**独特的、非重复的**信息点。即使某个信息点看起来不重要或与主题略有偏离，也必须保留下来，可以放在一个“其他信息”或相关性较低的类别下。
- **目标是“无损重组”，而非“有损压缩”**。

#### 3. 输出要求 (Output Requirements)
- **格式**: 请使用清晰的 **Markdown** 格式进行输出。
- **结构**:
    - 使用不同级别的标题（`#`, `##`, `###`）来体现信息的层级结构。
    - 对并列信息使用无序列表（`-`）或有序列表（`1.`）。
    - 对关键术语或重点内容可以使用**粗体**进行强调。
- **语言**: 使用简洁、中立、专业、易于理解的语言风格。
- 只输出整理后的文档，不要添加任何开场白或说明。

#### 4. 待处理文本 (Text to Process)
待处理文本见下一条消息。每个源文件都位于 `START OF FILE: <name>` 与 `END OF FILE: <name>` 两行之间。
"""

PROMPT_TEMPLATES: Dict[str, str] = {"en": PROMPT_TEMPLATE_EN, "zh": PROMPT_TEMPLATE_ZH}


@dataclass(frozen=True)
class ComposedRequest:
    instructions: str
    content: str

    def messages(self) -> List[Dict[str, str]]:
        return [
            {"role": "system", "content": self.instructions},
            {"role": "user", "content": self.content},
        ]

    @property
    def chars(self) -> int:
        return len(self.instructions) + len(self.content)


def wrap_file(name: str, text: str) -> str:
    return f"START OF FILE: {name}\n{text}\nEND OF FILE: {name}"


def combine(results: Sequence[ExtractionResult]) -> str:
    return "\n\n".join(wrap_file(r.name, r.prompt_text) for r in results)


def compose(results: Sequence[ExtractionResult], *, lang: str = "en") -> ComposedRequest:
    """Build the two-part request: fixed instructions plus the wrapped files, in order."""
    template = PROMPT_TEMPLATES.get(lang, PROMPT_TEMPLATE_EN)
    return ComposedRequest(instructions=template, content=combine(results))
