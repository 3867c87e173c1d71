"""Upload documents, distill them through an LLM, download the markdown."""
from __future__ import annotations

__version__ = "0.1.0"
