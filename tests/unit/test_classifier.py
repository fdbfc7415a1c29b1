"""相关性分类器单元测试。

测试覆盖：
- 相关性分数范围与阈值
- 标签提取、去重与排序
- 主分类与置信度
- 端到端场景
"""

import pytest

from src.modules.classification.application.classifier import RelevanceClassifier
from src.modules.classification.domain.entities import MatchSource, TagMatch
from src.modules.classification.domain.keywords import DEFAULT_KEYWORD_TABLE
from src.modules.items.domain.entities import ItemMetrics, StandardItem


def _item(
    title: str = "",
    description: str = "",
    topics: tuple[str, ...] = (),
    stars: float = 0,
    language: str | None = None,
) -> StandardItem:
    return StandardItem(
        title=title,
        url="https://github.com/acme/repo",
        description=description,
        topics=topics,
        metrics=ItemMetrics(primary=stars),
        language=language,
    )


@pytest.fixture
def classifier() -> RelevanceClassifier:
    return RelevanceClassifier(threshold=0.3, max_tags=8, min_tag_confidence=0.3)


@pytest.fixture
def langchain_item() -> StandardItem:
    return _item(
        title="awesome-langchain-tools",
        description="A curated list of LangChain tools for building AI agents",
        topics=("langchain", "ai-agent"),
        stars=1200,
    )


# ============================================
# 相关性
# ============================================


class TestRelevance:
    def test_empty_text_scores_zero(self, classifier):
        assert classifier.analyze_text("") == 0.0
        assert classifier.analyze_text(None) == 0.0

    def test_single_keyword_field_score(self, classifier):
        # llm: weight 9 -> 0.9*0.3 + 0.9*0.7
        assert classifier.analyze_text("LLM") == pytest.approx(0.9)

    def test_field_score_capped_at_one(self, classifier):
        text = "langchain llamaindex autogen crewai langgraph transformers llm rag"
        assert classifier.analyze_text(text) == 1.0

    def test_relevance_is_bounded(self, classifier):
        keywords = " ".join(DEFAULT_KEYWORD_TABLE)
        item = _item(title=keywords, description=keywords, topics=(keywords,), stars=10**9)
        score = classifier.calculate_relevance(item)
        assert 0.0 <= score <= 1.0

    def test_popularity_bonus_is_capped(self, classifier):
        small = classifier.calculate_relevance(_item(stars=100))
        huge = classifier.calculate_relevance(_item(stars=10**7))
        assert small == pytest.approx(0.01)
        assert huge == pytest.approx(0.02)

    def test_threshold_is_inclusive(self):
        item = _item(title="llm")
        score = RelevanceClassifier().calculate_relevance(item)

        at_threshold = RelevanceClassifier(threshold=score).classify(item)
        above_threshold = RelevanceClassifier(threshold=score + 1e-9).classify(item)

        assert at_threshold.is_relevant is True
        assert above_threshold.is_relevant is False

    def test_irrelevant_item_short_circuits(self, classifier):
        result = classifier.classify(
            _item(title="acme/dotfiles", description="Personal shell configuration", stars=50)
        )

        assert result.is_relevant is False
        assert result.primary_category == "other"
        assert result.confidence == 0.0
        assert result.suggested_tags == ()
        assert result.reasoning == RelevanceClassifier.BELOW_THRESHOLD_REASONING

    def test_missing_description_is_treated_as_empty(self, classifier):
        item = StandardItem(title="llm-router", url="https://x.test", description=None)
        assert classifier.classify(item).relevance_score > 0


# ============================================
# 标签
# ============================================


class TestTagExtraction:
    def test_title_match_takes_precedence_in_reasoning(self, classifier):
        item = _item(title="rag-server", description="rag pipeline", topics=("rag",))
        tags = classifier.extract_tags(item)
        rag = next(t for t in tags if t.tag_name == "rag")

        assert rag.confidence == pytest.approx(0.9 * 0.9)
        assert rag.reasoning == 'Found "rag" in title'
        assert rag.source == MatchSource.KEYWORD

    def test_best_match_per_tag_is_kept(self, classifier, langchain_item):
        tags = classifier.extract_tags(langchain_item)
        names = [t.tag_name for t in tags]

        assert len(names) == len(set(names))
        agent = next(t for t in tags if t.tag_name == "agent-tools")
        # 关键词 ai-agent(0.8*0.9) 高于语义模式 tool(0.4)
        assert agent.confidence == pytest.approx(0.72)
        assert agent.source == MatchSource.KEYWORD

    def test_tags_sorted_descending_and_above_minimum(self, classifier, langchain_item):
        tags = classifier.extract_tags(langchain_item)
        confidences = [t.confidence for t in tags]

        assert confidences == sorted(confidences, reverse=True)
        assert all(c > classifier.min_tag_confidence for c in confidences)

    def test_max_tags_truncates(self, langchain_item):
        classifier = RelevanceClassifier(max_tags=2)
        assert len(classifier.extract_tags(langchain_item)) == 2

    def test_rank_keeps_first_on_tie(self, classifier):
        first = TagMatch(tag_name="rag", confidence=0.6, source=MatchSource.KEYWORD, reasoning="a")
        second = TagMatch(
            tag_name="rag", confidence=0.6, source=MatchSource.DESCRIPTION, reasoning="b"
        )
        ranked = classifier._rank([first, second])
        assert ranked == [first]

    def test_language_hint_for_python(self, classifier):
        tags = classifier._feature_matches(_item(title="x", language="Python"))
        assert [t.tag_name for t in tags] == ["data-analysis"]
        assert tags[0].confidence == 0.3

    def test_language_hint_is_below_minimum_confidence(self, classifier):
        # 0.3 不严格大于最小置信度，会被过滤掉
        tags = classifier.extract_tags(_item(title="llm", language="TypeScript"))
        assert "chatbot" not in [t.tag_name for t in tags]

    def test_framework_hint_requires_popularity(self, classifier):
        quiet = classifier._feature_matches(_item(title="langchain-demo", stars=1000))
        popular = classifier._feature_matches(_item(title="langchain-demo", stars=1001))

        assert quiet == []
        assert [t.tag_name for t in popular] == ["framework"]
        assert popular[0].source == MatchSource.MANUAL

    def test_semantic_pattern_match(self, classifier):
        tags = classifier._semantic_matches(_item(title="conversational memory"))
        assert [(t.tag_name, t.confidence) for t in tags] == [("chatbot", 0.6)]


# ============================================
# 分类结果
# ============================================


class TestClassification:
    def test_end_to_end_langchain_scenario(self, classifier, langchain_item):
        result = classifier.classify(langchain_item)

        assert result.is_relevant is True
        assert result.relevance_score == pytest.approx(0.92)
        assert [t.tag_name for t in result.suggested_tags] == [
            "langchain",
            "agent-tools",
            "framework",
        ]
        assert result.suggested_tags[0].confidence == pytest.approx(0.9)
        assert result.primary_category == "framework"
        assert result.confidence == pytest.approx((0.9 + 0.72 + 0.4) / 3 * 0.7 + 0.92 * 0.3)
        assert result.reasoning == (
            "High AI/LLM relevance score. "
            "Identified as: langchain, agent-tools, framework. "
            "High community interest"
        )

    def test_classification_is_deterministic(self, classifier, langchain_item):
        assert classifier.classify(langchain_item) == classifier.classify(langchain_item)

    def test_unknown_top_tag_falls_back_to_application(self, classifier):
        tags = [TagMatch(tag_name="llm", confidence=0.8, source=MatchSource.KEYWORD)]
        assert classifier._primary_category(tags) == "application"

    def test_fallback_reasoning(self, classifier):
        reasoning = classifier._reasoning([], 0.5, _item(title="x"))
        assert reasoning == RelevanceClassifier.FALLBACK_REASONING

    def test_keyword_table_is_read_only(self):
        with pytest.raises(TypeError):
            DEFAULT_KEYWORD_TABLE._rules["new"] = DEFAULT_KEYWORD_TABLE.get("llm")
