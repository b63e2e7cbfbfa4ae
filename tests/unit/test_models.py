"""Unit tests for classification models and product parsing."""
from decimal import Decimal

import pytest
from pydantic import ValidationError

from catalog_classifier.errors import ClassificationError, ClassifierError
from catalog_classifier.models import (
    ClassificationCandidate,
    ClassificationResult,
    ClassificationStrategy,
    ProductInput,
)
from catalog_classifier.services.classification import parse_product


class TestProductInput:
    """Tests for ProductInput."""

    def test_full_text(self):
        product = ProductInput(name="Cemento gris", description="bulto de 50 kg")
        assert product.full_text == "Cemento gris bulto de 50 kg"

    def test_full_text_without_description(self):
        assert ProductInput(name="Pala").full_text == "Pala "

    def test_cost_defaults_to_zero(self):
        assert ProductInput(name="Pala").cost == Decimal("0")

    @pytest.mark.parametrize("name", ["", "   "])
    def test_blank_name_rejected(self, name):
        with pytest.raises(ValidationError):
            ProductInput(name=name)

    def test_negative_cost_rejected(self):
        with pytest.raises(ValidationError):
            ProductInput(name="Pala", cost=Decimal("-1"))

    def test_frozen(self):
        product = ProductInput(name="Pala")
        with pytest.raises(ValidationError):
            product.name = "Rastrillo"


class TestClassificationResult:
    """Tests for ClassificationResult helpers."""

    def make(self, confidence):
        return ClassificationResult(
            category_id="general",
            category_name="General",
            confidence=confidence,
            strategy=ClassificationStrategy.FALLBACK_GENERAL,
        )

    @pytest.mark.parametrize("confidence,confident,review", [
        (0.3, False, True),
        (0.6, False, False),
        (0.8, True, False),
        (1.0, True, False),
    ])
    def test_review_flags(self, confidence, confident, review):
        result = self.make(confidence).with_review_flags(0.6, 0.8)
        assert result.is_confident is confident
        assert result.needs_review is review

    def test_confidence_bounds_enforced(self):
        with pytest.raises(ValidationError):
            self.make(1.2)

    def test_from_candidate_overrides(self):
        candidate = ClassificationCandidate(
            category_id="herramientas",
            category_name="Herramientas",
            confidence=0.85,
            strategy=ClassificationStrategy.PATTERN_MATCHING,
            is_new_category=True,
        )

        result = ClassificationResult.from_candidate(
            candidate, strategy=ClassificationStrategy.COMBINED
        )

        assert isinstance(result, ClassificationResult)
        assert result.strategy == ClassificationStrategy.COMBINED
        assert result.category_id == "herramientas"
        assert result.is_new_category is True
        assert result.is_confident is False
        assert result.needs_review is False

    def test_review_flags_use_given_thresholds(self):
        result = self.make(0.85).with_review_flags(0.6, 0.9)
        assert result.is_confident is False
        assert result.needs_review is False

    def test_strategy_serializes_as_value(self):
        dumped = self.make(0.3).model_dump(mode="json")
        assert dumped["strategy"] == "fallback_general"


class TestParseProduct:
    """Tests for parse_product()."""

    def test_valid_fields(self):
        product = parse_product({"name": "Pala", "cost": "129.50", "hint_category_id": None})
        assert product.cost == Decimal("129.50")

    def test_invalid_fields_raise_classification_error(self):
        with pytest.raises(ClassificationError) as exc_info:
            parse_product({"name": "  ", "cost": "abc"})

        fields = {err["field"] for err in exc_info.value.details["errors"]}
        assert fields == {"name", "cost"}
        assert isinstance(exc_info.value, ClassifierError)
