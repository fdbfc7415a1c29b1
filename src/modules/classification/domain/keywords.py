"""Keyword table and pattern rules used by the relevance classifier.

The table is built once and shared read-only; it is passed into the
classifier rather than looked up globally.
"""

import re
from collections.abc import Iterator, Mapping
from dataclasses import dataclass
from types import MappingProxyType

from pydantic import BaseModel, ConfigDict, Field


class KeywordRule(BaseModel):
    model_config = ConfigDict(frozen=True)

    weight: int = Field(..., ge=1, le=10)
    tags: tuple[str, ...]
    category: str


@dataclass(frozen=True)
class SemanticPattern:
    """Phrase pattern tested against the joined title and description."""

    pattern: re.Pattern[str]
    tag: str
    confidence: float


class KeywordTable:
    """Immutable mapping of lowercase keyword -> KeywordRule."""

    def __init__(
        self,
        rules: Mapping[str, KeywordRule],
        tag_categories: Mapping[str, str],
    ):
        self._rules = MappingProxyType({k.lower(): v for k, v in rules.items()})
        self._tag_categories = MappingProxyType(dict(tag_categories))

    def __iter__(self) -> Iterator[str]:
        return iter(self._rules)

    def __len__(self) -> int:
        return len(self._rules)

    def items(self):
        return self._rules.items()

    def get(self, keyword: str) -> KeywordRule | None:
        return self._rules.get(keyword.lower())

    def category_for(self, tag_name: str) -> str | None:
        return self._tag_categories.get(tag_name)

    @property
    def tag_categories(self) -> Mapping[str, str]:
        return self._tag_categories


def _rule(weight: int, tag: str, category: str) -> KeywordRule:
    return KeywordRule(weight=weight, tags=(tag,), category=category)


# 关键词顺序影响同分标签的先后，保持固定
DEFAULT_RULES: dict[str, KeywordRule] = {
    # framework
    "langchain": _rule(10, "langchain", "framework"),
    "llamaindex": _rule(10, "llamaindex", "framework"),
    "autogen": _rule(10, "autogen", "framework"),
    "crewai": _rule(10, "crewai", "framework"),
    "langgraph": _rule(10, "langgraph", "framework"),
    "transformers": _rule(9, "transformers", "framework"),
    # application
    "chatbot": _rule(8, "chatbot", "application"),
    "chat-bot": _rule(8, "chatbot", "application"),
    "code-generation": _rule(9, "code-generation", "application"),
    "code-generator": _rule(9, "code-generation", "application"),
    "rag": _rule(9, "rag", "application"),
    "retrieval-augmented": _rule(9, "rag", "application"),
    "agent-tools": _rule(8, "agent-tools", "application"),
    "ai-agent": _rule(9, "agent-tools", "application"),
    "content-generation": _rule(7, "content-generation", "application"),
    "data-analysis": _rule(7, "data-analysis", "application"),
    # technology
    "openai": _rule(8, "openai-api", "technology"),
    "openai-api": _rule(9, "openai-api", "technology"),
    "huggingface": _rule(8, "huggingface", "technology"),
    "hugging-face": _rule(8, "huggingface", "technology"),
    "vector-database": _rule(8, "vector-database", "technology"),
    "vector-db": _rule(8, "vector-database", "technology"),
    "fine-tuning": _rule(8, "fine-tuning", "technology"),
    "finetune": _rule(8, "fine-tuning", "technology"),
    "prompt-engineering": _rule(7, "prompt-engineering", "technology"),
    "prompt-optimizer": _rule(7, "prompt-engineering", "technology"),
    # general AI
    "llm": _rule(9, "llm", "technology"),
    "large-language-model": _rule(9, "llm", "technology"),
    "artificial-intelligence": _rule(6, "ai", "technology"),
    "machine-learning": _rule(5, "ml", "technology"),
    "deep-learning": _rule(5, "dl", "technology"),
    "neural-network": _rule(5, "neural", "technology"),
    "gpt": _rule(7, "openai-api", "technology"),
    "claude": _rule(7, "anthropic", "technology"),
    "anthropic": _rule(7, "anthropic", "technology"),
}

# 只有分类体系里的标签才有固定分类，其余落入默认分类
TAG_CATEGORY_MAP: dict[str, str] = {
    "langchain": "framework",
    "llamaindex": "framework",
    "autogen": "framework",
    "crewai": "framework",
    "langgraph": "framework",
    "transformers": "framework",
    "chatbot": "application",
    "code-generation": "application",
    "rag": "application",
    "agent-tools": "application",
    "content-generation": "application",
    "data-analysis": "application",
    "openai-api": "technology",
    "huggingface": "technology",
    "vector-database": "technology",
    "fine-tuning": "technology",
    "prompt-engineering": "technology",
}

DEFAULT_SEMANTIC_PATTERNS: tuple[SemanticPattern, ...] = (
    SemanticPattern(
        pattern=re.compile(r"(conversational|dialogue|chat|talk)", re.IGNORECASE),
        tag="chatbot",
        confidence=0.6,
    ),
    SemanticPattern(
        pattern=re.compile(r"(generate|creation|synthesis|produce)", re.IGNORECASE),
        tag="content-generation",
        confidence=0.5,
    ),
    SemanticPattern(
        pattern=re.compile(r"(analysis|analyze|insight|examine)", re.IGNORECASE),
        tag="data-analysis",
        confidence=0.5,
    ),
    SemanticPattern(
        pattern=re.compile(r"(assistant|helper|tool|utility)", re.IGNORECASE),
        tag="agent-tools",
        confidence=0.4,
    ),
    SemanticPattern(
        pattern=re.compile(r"(embedding|vector|similarity|search)", re.IGNORECASE),
        tag="vector-database",
        confidence=0.6,
    ),
    SemanticPattern(
        pattern=re.compile(r"(training|train|finetune|adapt)", re.IGNORECASE),
        tag="fine-tuning",
        confidence=0.6,
    ),
)

DEFAULT_KEYWORD_TABLE = KeywordTable(DEFAULT_RULES, TAG_CATEGORY_MAP)
