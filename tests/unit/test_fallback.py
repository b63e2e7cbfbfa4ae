"""Unit tests for the fallback cascade."""
import pytest

from catalog_classifier.models import ClassificationStrategy, ProductInput
from catalog_classifier.services.classification.fallback import (
    FallbackResolver,
    synonym_bonus,
    token_score,
)
from catalog_classifier.services.classification.knowledge_base import DEFAULT_KNOWLEDGE_BASE
from tests.helpers import make_context


@pytest.fixture
def resolver():
    return FallbackResolver()


class TestScoringHelpers:
    """Tests for synonym_bonus() and token_score()."""

    def test_synonym_bonus_per_hit(self):
        assert synonym_bonus("tubo de agua", "Plomería", DEFAULT_KNOWLEDGE_BASE) == pytest.approx(0.3)

    def test_synonym_bonus_capped(self):
        text = "tubo de agua con tuberia de fontaneria"
        assert synonym_bonus(text, "Plomería", DEFAULT_KNOWLEDGE_BASE) == pytest.approx(0.6)

    def test_synonym_bonus_unrelated_category(self):
        assert synonym_bonus("tubo de agua", "Pintura", DEFAULT_KNOWLEDGE_BASE) == 0.0

    def test_token_score_strong_pairs_only(self):
        assert token_score("Martillo cromado", "Martillos") == pytest.approx(8 / 9)

    def test_token_score_ignores_short_words(self):
        assert token_score("de la", "de la") == 0.0


class TestFindSimilarExistingCategory:
    """Tier 1: deep scan of existing categories."""

    def test_direct_name_match(self, resolver):
        context = make_context({"paint-1": "Pintura"})

        result = resolver.find_similar_existing_category(ProductInput(name="Pinturas"), context)

        assert result.category_id == "paint-1"
        assert result.confidence == pytest.approx(0.875)
        assert result.strategy == ClassificationStrategy.EXISTING_CATEGORY_SIMILARITY
        assert result.is_new_category is False

    def test_composite_score_capped(self, resolver):
        context = make_context({"tools-1": "Herramientas"})

        result = resolver.find_similar_existing_category(
            ProductInput(name="Juego de herramientas"), context
        )

        assert result.category_id == "tools-1"
        assert result.confidence == pytest.approx(0.95)

    def test_description_and_synonyms_count(self, resolver):
        context = make_context({"plum-1": "Plomería"})
        product = ProductInput(name="Kit X9", description="Plomeria")

        result = resolver.find_similar_existing_category(product, context)

        assert result.category_id == "plum-1"
        assert 0.6 < result.confidence <= 0.95

    def test_nothing_similar(self, resolver):
        context = make_context({"tools-1": "Herramientas"})
        product = ProductInput(name="Pala cuadrada")
        assert resolver.find_similar_existing_category(product, context) is None

    def test_empty_catalog(self, resolver):
        assert resolver.find_similar_existing_category(
            ProductInput(name="Pinturas"), make_context()
        ) is None


class TestIdentifyBroadCategory:
    """Tier 2: broad buckets."""

    def test_new_bucket(self, resolver):
        result = resolver.identify_broad_category(ProductInput(name="Pala cuadrada"), make_context())

        assert result.category_id == "jardineria"
        assert result.category_name == "Jardinería"
        assert result.confidence == pytest.approx(0.8)
        assert result.strategy == ClassificationStrategy.BROAD_CATEGORY_IDENTIFICATION
        assert result.is_new_category is True
        assert result.reasoning == 'Broad category identified by keyword: "pala"'

    def test_cached_bucket_is_not_new(self, resolver):
        context = make_context({"jardineria": "Jardinería"})
        result = resolver.identify_broad_category(ProductInput(name="Pala cuadrada"), context)
        assert result.category_id == "jardineria"
        assert result.is_new_category is False

    def test_bucket_guarded_against_variant(self, resolver):
        context = make_context({"garden-1": "Jardineria y Exterior"})

        result = resolver.identify_broad_category(ProductInput(name="Pala cuadrada"), context)

        assert result.category_id == "garden-1"
        assert result.category_name == "Jardineria y Exterior"
        assert result.strategy == ClassificationStrategy.EXISTING_CATEGORY_SIMILARITY
        assert result.is_new_category is False

    def test_no_bucket(self, resolver):
        assert resolver.identify_broad_category(ProductInput(name="Xyz 123"), make_context()) is None


class TestGeneralCategory:
    """Tier 3: catch-all."""

    def test_new_general(self, resolver):
        result = resolver.general_category(ProductInput(name="Xyz 123"), make_context())

        assert result.category_id == "general"
        assert result.category_name == "General"
        assert result.confidence == pytest.approx(0.3)
        assert result.strategy == ClassificationStrategy.FALLBACK_GENERAL
        assert result.is_new_category is True

    def test_cached_general(self, resolver):
        context = make_context({"general": "General"})
        result = resolver.general_category(ProductInput(name="Xyz 123"), context)
        assert result.is_new_category is False

    def test_general_variant_reused(self, resolver):
        context = make_context({"misc": "Generales"})

        result = resolver.general_category(ProductInput(name="Xyz 123"), context)

        assert result.category_id == "misc"
        assert result.category_name == "Generales"
        assert result.strategy == ClassificationStrategy.FALLBACK_GENERAL
        assert result.is_new_category is False


class TestResolve:
    """Tests for the full cascade."""

    def test_tiers_short_circuit(self, resolver):
        context = make_context({"paint-1": "Pintura"})
        result = resolver.resolve(ProductInput(name="Pinturas"), context)
        assert result.strategy == ClassificationStrategy.EXISTING_CATEGORY_SIMILARITY

    def test_falls_through_to_general(self, resolver):
        result = resolver.resolve(ProductInput(name="Xyz 123"), make_context())
        assert result.category_id == "general"

    def test_always_returns_result(self, resolver, hardware_categories):
        context = make_context({c.id: c.name for c in hardware_categories})
        for name in ("Pala cuadrada", "Xyz 123", "Tornillería varios"):
            result = resolver.resolve(ProductInput(name=name), context)
            assert 0.0 <= result.confidence <= 1.0
