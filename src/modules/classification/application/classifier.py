"""相关性分类服务。

判断条目是否属于 AI/LLM 领域，并给出：
- 相关性分数（标题/描述/主题三路文本分析 + 热度加成）
- 排序后的候选标签（关键词、语义模式、项目特征三路合并）
- 主分类与整体置信度
"""

from src.core.config import settings
from src.modules.classification.domain.entities import (
    Classification,
    MatchSource,
    TagMatch,
)
from src.modules.classification.domain.keywords import (
    DEFAULT_KEYWORD_TABLE,
    DEFAULT_SEMANTIC_PATTERNS,
    KeywordTable,
    SemanticPattern,
)
from src.modules.items.domain.entities import StandardItem


class RelevanceClassifier:
    """Pure, deterministic classifier over StandardItem.

    权重常量为经验值，作为类属性暴露以便调参。
    """

    # 相关性字段权重
    TITLE_WEIGHT = 0.4
    DESCRIPTION_WEIGHT = 0.3
    TOPICS_WEIGHT = 0.2
    POPULARITY_WEIGHT = 0.1

    # 单字段分数 = min(1, total*BREADTH + max*PEAK)
    BREADTH_WEIGHT = 0.3
    PEAK_WEIGHT = 0.7

    POPULARITY_CAP = 0.2
    POPULARITY_DIVISOR = 1000.0

    # 关键词出现位置对应的匹配置信度
    TITLE_MATCH_CONFIDENCE = 0.9
    DESCRIPTION_MATCH_CONFIDENCE = 0.7
    TOPICS_MATCH_CONFIDENCE = 0.8

    # 整体置信度 = avg(tag)*TAG + relevance*RELEVANCE
    TAG_CONFIDENCE_WEIGHT = 0.7
    RELEVANCE_CONFIDENCE_WEIGHT = 0.3

    # 项目特征
    LANGUAGE_HINT_CONFIDENCE = 0.3
    FRAMEWORK_HINT_CONFIDENCE = 0.4
    FRAMEWORK_POPULARITY_THRESHOLD = 1000
    KNOWN_FRAMEWORKS = ("langchain", "llamaindex", "transformers")

    # 说明文本
    HIGH_RELEVANCE_THRESHOLD = 0.7
    HIGH_INTEREST_THRESHOLD = 500
    REASONING_TOP_TAGS = 3
    BELOW_THRESHOLD_REASONING = "Item does not meet AI/LLM relevance threshold"
    FALLBACK_REASONING = "Automated classification based on content analysis"

    OTHER_CATEGORY = "other"
    DEFAULT_CATEGORY = "application"

    def __init__(
        self,
        keyword_table: KeywordTable = DEFAULT_KEYWORD_TABLE,
        semantic_patterns: tuple[SemanticPattern, ...] = DEFAULT_SEMANTIC_PATTERNS,
        *,
        threshold: float | None = None,
        max_tags: int | None = None,
        min_tag_confidence: float | None = None,
    ):
        self.keyword_table = keyword_table
        self.semantic_patterns = semantic_patterns
        self.threshold = (
            settings.RELEVANCE_THRESHOLD if threshold is None else threshold
        )
        self.max_tags = settings.MAX_SUGGESTED_TAGS if max_tags is None else max_tags
        self.min_tag_confidence = (
            settings.MIN_TAG_CONFIDENCE
            if min_tag_confidence is None
            else min_tag_confidence
        )

    def classify(self, item: StandardItem) -> Classification:
        relevance = self.calculate_relevance(item)

        if relevance < self.threshold:
            return Classification(
                primary_category=self.OTHER_CATEGORY,
                confidence=0.0,
                suggested_tags=(),
                is_relevant=False,
                relevance_score=relevance,
                reasoning=self.BELOW_THRESHOLD_REASONING,
            )

        tags = self.extract_tags(item)
        return Classification(
            primary_category=self._primary_category(tags),
            confidence=self._confidence(tags, relevance),
            suggested_tags=tuple(tags),
            is_relevant=True,
            relevance_score=relevance,
            reasoning=self._reasoning(tags, relevance, item),
        )

    # ------------------------------------------------------------------
    # 相关性
    # ------------------------------------------------------------------

    def calculate_relevance(self, item: StandardItem) -> float:
        score = self.analyze_text(item.title) * self.TITLE_WEIGHT
        score += self.analyze_text(item.description) * self.DESCRIPTION_WEIGHT

        if item.topics:
            score += self.analyze_text(" ".join(item.topics)) * self.TOPICS_WEIGHT

        bonus = min(
            self.POPULARITY_CAP,
            max(0.0, item.metrics.primary) / self.POPULARITY_DIVISOR,
        )
        score += bonus * self.POPULARITY_WEIGHT

        return max(0.0, min(1.0, score))

    def analyze_text(self, text: str | None) -> float:
        """Score one text field against the keyword table."""
        if not text:
            return 0.0

        normalized = text.lower()
        total = 0.0
        peak = 0.0
        for keyword, rule in self.keyword_table.items():
            if keyword in normalized:
                weight = rule.weight / 10
                total += weight
                peak = max(peak, weight)

        return min(1.0, total * self.BREADTH_WEIGHT + peak * self.PEAK_WEIGHT)

    # ------------------------------------------------------------------
    # 标签
    # ------------------------------------------------------------------

    def extract_tags(self, item: StandardItem) -> list[TagMatch]:
        """Pool all passes, keep the best match per tag, rank and truncate."""
        candidates = [
            *self._keyword_matches(item),
            *self._semantic_matches(item),
            *self._feature_matches(item),
        ]
        return self._rank(candidates)[: self.max_tags]

    def _keyword_matches(self, item: StandardItem) -> list[TagMatch]:
        title = (item.title or "").lower()
        description = (item.description or "").lower()
        topics = " ".join(item.topics).lower()

        matches: list[TagMatch] = []
        for keyword, rule in self.keyword_table.items():
            confidence = 0.0
            reasoning = ""

            # 优先级：标题 > 描述 > 主题；原因取第一个命中的位置
            if keyword in title:
                confidence = max(confidence, self.TITLE_MATCH_CONFIDENCE)
                reasoning = f'Found "{keyword}" in title'
            if keyword in description:
                confidence = max(confidence, self.DESCRIPTION_MATCH_CONFIDENCE)
                reasoning = reasoning or f'Found "{keyword}" in description'
            if keyword in topics:
                confidence = max(confidence, self.TOPICS_MATCH_CONFIDENCE)
                reasoning = reasoning or f'Found "{keyword}" in topics'

            if confidence <= 0:
                continue

            for tag in rule.tags:
                matches.append(
                    TagMatch(
                        tag_name=tag,
                        confidence=confidence * (rule.weight / 10),
                        source=MatchSource.KEYWORD,
                        reasoning=reasoning,
                    )
                )
        return matches

    def _semantic_matches(self, item: StandardItem) -> list[TagMatch]:
        text = f"{item.title or ''} {item.description or ''}".lower()
        return [
            TagMatch(
                tag_name=rule.tag,
                confidence=rule.confidence,
                source=MatchSource.DESCRIPTION,
                reasoning=f"Semantic pattern match for {rule.tag}",
            )
            for rule in self.semantic_patterns
            if rule.pattern.search(text)
        ]

    def _feature_matches(self, item: StandardItem) -> list[TagMatch]:
        matches: list[TagMatch] = []

        if item.language == "Python":
            matches.append(
                TagMatch(
                    tag_name="data-analysis",
                    confidence=self.LANGUAGE_HINT_CONFIDENCE,
                    source=MatchSource.KEYWORD,
                    reasoning="Python language suggests data analysis capability",
                )
            )
        if item.language in ("JavaScript", "TypeScript"):
            matches.append(
                TagMatch(
                    tag_name="chatbot",
                    confidence=self.LANGUAGE_HINT_CONFIDENCE,
                    source=MatchSource.KEYWORD,
                    reasoning="JS/TS language suggests web-based AI applications",
                )
            )

        if item.metrics.primary > self.FRAMEWORK_POPULARITY_THRESHOLD:
            title = (item.title or "").lower()
            description = (item.description or "").lower()
            if any(
                name in title or name in description for name in self.KNOWN_FRAMEWORKS
            ):
                matches.append(
                    TagMatch(
                        tag_name="framework",
                        confidence=self.FRAMEWORK_HINT_CONFIDENCE,
                        source=MatchSource.MANUAL,
                        reasoning="High popularity suggests important framework",
                    )
                )
        return matches

    def _rank(self, candidates: list[TagMatch]) -> list[TagMatch]:
        best: dict[str, TagMatch] = {}
        for match in candidates:
            existing = best.get(match.tag_name)
            # 仅在严格更高时替换，同分保留先出现的匹配
            if existing is None or match.confidence > existing.confidence:
                best[match.tag_name] = match

        ranked = sorted(best.values(), key=lambda m: m.confidence, reverse=True)
        return [m for m in ranked if m.confidence > self.min_tag_confidence]

    # ------------------------------------------------------------------
    # 分类结果
    # ------------------------------------------------------------------

    def _primary_category(self, tags: list[TagMatch]) -> str:
        if not tags:
            return self.OTHER_CATEGORY
        category = self.keyword_table.category_for(tags[0].tag_name)
        return category or self.DEFAULT_CATEGORY

    def _confidence(self, tags: list[TagMatch], relevance: float) -> float:
        if not tags:
            return 0.0
        average = sum(t.confidence for t in tags) / len(tags)
        confidence = (
            average * self.TAG_CONFIDENCE_WEIGHT
            + relevance * self.RELEVANCE_CONFIDENCE_WEIGHT
        )
        return max(0.0, min(1.0, confidence))

    def _reasoning(
        self,
        tags: list[TagMatch],
        relevance: float,
        item: StandardItem,
    ) -> str:
        reasons: list[str] = []
        if relevance > self.HIGH_RELEVANCE_THRESHOLD:
            reasons.append("High AI/LLM relevance score")
        if tags:
            top = ", ".join(t.tag_name for t in tags[: self.REASONING_TOP_TAGS])
            reasons.append(f"Identified as: {top}")
        if item.metrics.primary > self.HIGH_INTEREST_THRESHOLD:
            reasons.append("High community interest")
        return ". ".join(reasons) or self.FALLBACK_REASONING
