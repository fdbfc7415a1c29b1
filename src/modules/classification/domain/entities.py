"""Classification value objects."""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class MatchSource(str, Enum):
    """Which pass produced a tag match."""

    KEYWORD = "keyword"
    DESCRIPTION = "description"
    AI = "ai"
    MANUAL = "manual"


class TagMatch(BaseModel):
    """Candidate tag for an item, before or after ranking."""

    model_config = ConfigDict(frozen=True)

    tag_name: str = Field(..., description="标签名")
    confidence: float = Field(..., ge=0, le=1, description="置信度")
    source: MatchSource = Field(..., description="匹配来源")
    reasoning: str = Field(default="", description="匹配原因")


class Classification(BaseModel):
    """Result of classifying one StandardItem. Immutable once produced."""

    model_config = ConfigDict(frozen=True)

    primary_category: str = Field(..., description="主分类")
    confidence: float = Field(..., ge=0, le=1, description="整体置信度")
    suggested_tags: tuple[TagMatch, ...] = Field(default=(), description="排序后的标签")
    is_relevant: bool = Field(..., description="是否属于目标领域")
    relevance_score: float = Field(..., ge=0, le=1, description="相关性分数")
    reasoning: str = Field(default="", description="分类说明")
