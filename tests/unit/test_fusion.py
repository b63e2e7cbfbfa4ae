"""Unit tests for candidate fusion and the near-duplicate guard."""
import pytest

from catalog_classifier.models import ClassificationCandidate, ClassificationStrategy
from catalog_classifier.services.classification.fusion import (
    DEFAULT_STRATEGY_WEIGHT,
    find_existing_duplicate,
    fuse,
    score_groups,
    shares_variant_group,
    strategy_weight,
)
from catalog_classifier.services.classification.knowledge_base import DEFAULT_KNOWLEDGE_BASE
from tests.helpers import make_context


def candidate(category_id, confidence, strategy, name=None, is_new=False):
    return ClassificationCandidate(
        category_id=category_id,
        category_name=name or category_id.title(),
        confidence=confidence,
        strategy=strategy,
        reasoning="test",
        is_new_category=is_new,
    )


class TestStrategyWeights:
    """Tests for strategy trust weights."""

    def test_known_weights(self):
        assert strategy_weight(ClassificationStrategy.EXACT_MATCH) == 1.0
        assert strategy_weight(ClassificationStrategy.PATTERN_MATCHING) == 0.9
        assert strategy_weight(ClassificationStrategy.KEYWORD_ANALYSIS) == 0.8
        assert strategy_weight(ClassificationStrategy.SEMANTIC_ANALYSIS) == 0.7
        assert strategy_weight(ClassificationStrategy.PRODUCT_SIMILARITY) == 0.6

    def test_unknown_strategy_uses_default(self):
        assert strategy_weight(ClassificationStrategy.COMBINED) == DEFAULT_STRATEGY_WEIGHT


class TestScoreGroups:
    """Tests for score_groups()."""

    def test_weighted_mean(self):
        scores = score_groups([
            candidate("herramientas", 0.85, ClassificationStrategy.PATTERN_MATCHING),
            candidate("herramientas", 0.5, ClassificationStrategy.KEYWORD_ANALYSIS),
        ])

        assert len(scores) == 1
        assert scores[0].score == pytest.approx((0.85 * 0.9 + 0.5 * 0.8) / 1.7)
        assert scores[0].representative.strategy == ClassificationStrategy.PATTERN_MATCHING

    @pytest.mark.parametrize("order", [(0, 1), (1, 0)])
    def test_ties_break_by_category_id(self, order):
        pool = [
            candidate("b-cat", 0.7, ClassificationStrategy.PATTERN_MATCHING),
            candidate("a-cat", 0.7, ClassificationStrategy.KEYWORD_ANALYSIS),
        ]
        scores = score_groups([pool[i] for i in order])
        assert [s.category_id for s in scores] == ["a-cat", "b-cat"]


class TestFuse:
    """Tests for fuse()."""

    def test_no_candidates(self):
        assert fuse([], make_context()) is None

    def test_exact_match_short_circuits(self):
        context = make_context({"tools-1": "Herramientas Manuales"})
        result = fuse([
            candidate("herramientas", 0.85, ClassificationStrategy.PATTERN_MATCHING, is_new=True),
            candidate("tools-1", 1.0, ClassificationStrategy.EXACT_MATCH, name="Herramientas Manuales"),
        ], context)

        assert result.category_id == "tools-1"
        assert result.confidence == 1.0
        assert result.strategy == ClassificationStrategy.EXACT_MATCH

    def test_agreeing_strategies_combine(self):
        context = make_context({"herramientas": "Herramientas"})
        result = fuse([
            candidate("herramientas", 0.85, ClassificationStrategy.PATTERN_MATCHING),
            candidate("herramientas", 0.5, ClassificationStrategy.KEYWORD_ANALYSIS),
        ], context)

        assert result.category_id == "herramientas"
        assert result.confidence == pytest.approx(1.165 / 1.7)
        assert result.strategy == ClassificationStrategy.COMBINED

    def test_single_strategy_keeps_its_name(self):
        context = make_context({"electrico": "Eléctrico"})
        result = fuse([
            candidate("electrico", 0.85, ClassificationStrategy.PATTERN_MATCHING, name="Eléctrico"),
        ], context)

        assert result.strategy == ClassificationStrategy.PATTERN_MATCHING
        assert result.confidence == pytest.approx(0.85)

    @pytest.mark.parametrize("order", [(0, 1), (1, 0)])
    def test_equal_scores_from_different_strategies(self, order):
        context = make_context({"a-cat": "A Cat", "b-cat": "B Cat"})
        pool = [
            candidate("b-cat", 0.7, ClassificationStrategy.PATTERN_MATCHING),
            candidate("a-cat", 0.7, ClassificationStrategy.KEYWORD_ANALYSIS),
        ]

        result = fuse([pool[i] for i in order], context)

        assert result.category_id == "a-cat"
        assert result.confidence == 0.7

    def test_below_threshold(self):
        result = fuse(
            [candidate("herramientas", 0.5, ClassificationStrategy.KEYWORD_ANALYSIS)],
            make_context(),
        )
        assert result is None

    def test_guard_rewrites_variant_of_existing_category(self, hardware_categories):
        context = make_context({c.id: c.name for c in hardware_categories})
        result = fuse([
            candidate(
                "herramientas", 0.85, ClassificationStrategy.PATTERN_MATCHING,
                name="Herramientas", is_new=True,
            ),
        ], context)

        assert result.category_id == "tools-1"
        assert result.category_name == "Herramientas Manuales"
        assert result.strategy == ClassificationStrategy.EXISTING_CATEGORY_SIMILARITY
        assert result.confidence == pytest.approx(0.85)
        assert result.is_new_category is False
        assert "Herramientas Manuales" in result.reasoning

    def test_guard_rewrites_accent_variant(self, hardware_categories):
        context = make_context({c.id: c.name for c in hardware_categories})
        result = fuse([
            candidate(
                "tornilleria", 0.85, ClassificationStrategy.PATTERN_MATCHING,
                name="Tornilleria", is_new=True,
            ),
        ], context)

        assert result.category_id == "screws-1"
        assert result.category_name == "Tornillería"

    def test_unrelated_new_category_kept(self, hardware_categories):
        context = make_context({c.id: c.name for c in hardware_categories})
        result = fuse([
            candidate(
                "pintura", 0.85, ClassificationStrategy.PATTERN_MATCHING,
                name="Pintura", is_new=True,
            ),
        ], context)

        assert result.category_id == "pintura"
        assert result.is_new_category is True
        assert result.strategy == ClassificationStrategy.PATTERN_MATCHING


class TestDuplicateGuard:
    """Tests for find_existing_duplicate() and shares_variant_group()."""

    def test_variant_group_across_names(self):
        group = shares_variant_group("Electricidad", "Material Eléctrico", DEFAULT_KNOWLEDGE_BASE)
        assert group is not None
        assert "electricidad" in group

    def test_no_variant_group(self):
        assert shares_variant_group("Pintura", "Tornillería", DEFAULT_KNOWLEDGE_BASE) is None

    def test_picks_most_similar_duplicate(self):
        categories = {"a": "Pintura y Acabados", "b": "Pintura"}

        match = find_existing_duplicate("Pinturas", categories, DEFAULT_KNOWLEDGE_BASE)

        assert match.category_id == "b"
        assert match.similarity == pytest.approx(7 / 8)

    def test_similarity_threshold(self):
        categories = {"c": "Cerrajería"}
        assert find_existing_duplicate("Cerrajeria", categories, DEFAULT_KNOWLEDGE_BASE) is not None
        assert find_existing_duplicate("Cerrojos", categories, DEFAULT_KNOWLEDGE_BASE) is None

    def test_empty_catalog(self):
        assert find_existing_duplicate("Pintura", {}, DEFAULT_KNOWLEDGE_BASE) is None
