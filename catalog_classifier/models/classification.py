"""Pydantic models for the product classification pipeline.

This module defines the data transfer objects exchanged between the
classifier, its strategies and the catalog store.
"""
from decimal import Decimal
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class ClassificationStrategy(str, Enum):
    """Which part of the pipeline produced a candidate.

    The first five are the independent strategies; the rest are
    produced by fusion and the fallback cascade.
    """
    EXACT_MATCH = "exact_match"
    KEYWORD_ANALYSIS = "keyword_analysis"
    SEMANTIC_ANALYSIS = "semantic_analysis"
    PRODUCT_SIMILARITY = "product_similarity"
    PATTERN_MATCHING = "pattern_matching"
    COMBINED = "combined"
    EXISTING_CATEGORY_SIMILARITY = "existing_category_similarity"
    BROAD_CATEGORY_IDENTIFICATION = "broad_category_identification"
    FALLBACK_GENERAL = "fallback_general"


class ProductInput(BaseModel):
    """A product record submitted for classification.

    Attributes:
        name: Product name as typed by the user or read from an import
        description: Optional free-text description
        cost: Unit cost (not used for scoring, carried for callers)
        hint_category_id: Category the caller already believes is right
    """

    name: str = Field(..., min_length=1, max_length=500)
    description: Optional[str] = None
    cost: Decimal = Field(default=Decimal("0"), ge=0)
    hint_category_id: Optional[str] = None

    model_config = ConfigDict(frozen=True)

    @field_validator("name")
    @classmethod
    def validate_name_not_blank(cls, v: str) -> str:
        """Reject names made only of whitespace."""
        if not v.strip():
            raise ValueError("name must not be blank")
        return v

    @property
    def full_text(self) -> str:
        """Name and description joined the way rule strategies read them."""
        return f"{self.name} {self.description or ''}"


class CategoryRecord(BaseModel):
    """An active category as stored in the catalog."""

    id: str = Field(..., min_length=1)
    name: str

    model_config = ConfigDict(frozen=True)


class ExistingProductSample(BaseModel):
    """Read-only snapshot of an active product, used for similarity."""

    id: str
    name: str
    description: Optional[str] = None
    category_id: str
    category_name: str

    model_config = ConfigDict(frozen=True)


class ClassificationCandidate(BaseModel):
    """A scored category proposal.

    Every strategy produces at most one of these; fusion and the fallback
    cascade reduce them to a single ClassificationResult.
    """

    category_id: str
    category_name: str
    confidence: float = Field(..., ge=0.0, le=1.0)
    strategy: ClassificationStrategy
    reasoning: str = ""
    is_new_category: bool = False

    model_config = ConfigDict(frozen=True)


class ClassificationResult(ClassificationCandidate):
    """Final classification decision for one product.

    Attributes:
        is_confident: Confidence is high enough for auto-assignment
        needs_review: Confidence is below the acceptance threshold
    """

    is_confident: bool = False
    needs_review: bool = False

    def with_review_flags(
        self,
        confidence_threshold: float,
        high_confidence_threshold: float,
    ) -> "ClassificationResult":
        """Copy with is_confident / needs_review set from the given thresholds."""
        return self.model_copy(update={
            "is_confident": self.confidence >= high_confidence_threshold,
            "needs_review": self.confidence < confidence_threshold,
        })

    @classmethod
    def from_candidate(
        cls,
        candidate: ClassificationCandidate,
        **updates,
    ) -> "ClassificationResult":
        """Promote a candidate to a result, optionally overriding fields."""
        data = candidate.model_dump()
        data.update(updates)
        return cls(**data)
