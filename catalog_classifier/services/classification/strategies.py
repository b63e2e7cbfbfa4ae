"""Independent classification strategies.

Each strategy looks at one product plus an immutable snapshot of the
classifier's caches and proposes at most one scored category. Strategies
share no mutable state, so their execution order never changes what any
single strategy returns.

Key Components:
    - ClassificationContext: Read-only inputs shared by all strategies
    - ClassifierStrategy: Abstract base class for strategies
    - ExactMatchStrategy, KeywordAnalysisStrategy, SemanticAnalysisStrategy,
      ProductSimilarityStrategy, PatternMatchingStrategy
"""
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Dict, List, Mapping, Optional, Tuple

from catalog_classifier.config import ClassifierSettings
from catalog_classifier.models import (
    ClassificationCandidate,
    ClassificationStrategy,
    ExistingProductSample,
    ProductInput,
)
from catalog_classifier.services.classification.knowledge_base import KnowledgeBase
from catalog_classifier.services.classification.similarity import title_case, token_overlap


@dataclass(frozen=True)
class ClassificationContext:
    """Everything a strategy may read besides the product itself.

    Attributes:
        categories: Snapshot of the category cache (id -> name)
        products: Sample of existing products for similarity
        knowledge_base: Vocabulary tables
        settings: Classifier tunables
    """
    categories: Mapping[str, str]
    products: Tuple[ExistingProductSample, ...]
    knowledge_base: KnowledgeBase
    settings: ClassifierSettings

    def display_name(self, category_key: str) -> str:
        """Stored name for a cached key, otherwise a title-cased key."""
        return self.categories.get(category_key) or title_case(category_key)

    def is_new(self, category_key: str) -> bool:
        return category_key not in self.categories


class ClassifierStrategy(ABC):
    """Abstract base class for classification strategies.

    All implementations must honor the contract:
        - evaluate() returns None or exactly one candidate
        - candidate confidence is within 0.0 - 1.0
        - evaluate() reads the context but never mutates it
    """

    name: ClassificationStrategy

    @abstractmethod
    def evaluate(
        self,
        product: ProductInput,
        context: ClassificationContext,
    ) -> Optional[ClassificationCandidate]:
        """Propose a category for the product, or None."""
        pass


class ExactMatchStrategy(ClassifierStrategy):
    """Trust the caller's hint when it names a known category."""

    name = ClassificationStrategy.EXACT_MATCH

    def evaluate(
        self,
        product: ProductInput,
        context: ClassificationContext,
    ) -> Optional[ClassificationCandidate]:
        hint = product.hint_category_id
        if not hint:
            return None

        category_name = context.categories.get(hint)
        if category_name is None:
            return None

        return ClassificationCandidate(
            category_id=hint,
            category_name=category_name,
            confidence=1.0,
            strategy=self.name,
            reasoning=f"Category {hint} exists in the catalog",
            is_new_category=False,
        )


class KeywordAnalysisStrategy(ClassifierStrategy):
    """Weighted keyword scoring against the knowledge base.

    Primary keywords score 2 x weight, secondary 1 x weight, matched as
    substrings of the lowercased name and description. The best raw score
    is normalized by an empirical ceiling (6 by default).
    """

    name = ClassificationStrategy.KEYWORD_ANALYSIS

    def evaluate(
        self,
        product: ProductInput,
        context: ClassificationContext,
    ) -> Optional[ClassificationCandidate]:
        text = product.full_text.lower()
        settings = context.settings

        best_key: Optional[str] = None
        best_score = 0.0
        for entry in context.knowledge_base.entries:
            score = 0.0
            for keyword in entry.primary_keywords:
                if keyword in text:
                    score += 2 * entry.weight
            for keyword in entry.secondary_keywords:
                if keyword in text:
                    score += 1 * entry.weight

            # Strict comparison: ties resolve to the earlier entry
            if score > best_score:
                best_key = entry.category_key
                best_score = score

        if best_key is None:
            return None

        confidence = min(best_score / settings.keyword_score_ceiling, 1.0)
        if confidence < settings.keyword_min_confidence:
            return None

        entry = context.knowledge_base.get(best_key)
        matched = entry.matched_keywords(text) if entry else []

        return ClassificationCandidate(
            category_id=best_key,
            category_name=context.display_name(best_key),
            confidence=confidence,
            strategy=self.name,
            reasoning=f"Keywords detected: {', '.join(matched)}",
            is_new_category=context.is_new(best_key),
        )


class SemanticAnalysisStrategy(ClassifierStrategy):
    """Cross-lingual synonym lookup in the product name (first hit wins)."""

    name = ClassificationStrategy.SEMANTIC_ANALYSIS

    def evaluate(
        self,
        product: ProductInput,
        context: ClassificationContext,
    ) -> Optional[ClassificationCandidate]:
        text = product.name.lower()

        for category_key, patterns in context.knowledge_base.semantic_patterns.items():
            for pattern in patterns:
                if pattern in text:
                    return ClassificationCandidate(
                        category_id=category_key,
                        category_name=context.display_name(category_key),
                        confidence=context.settings.semantic_confidence,
                        strategy=self.name,
                        reasoning=f'Semantic pattern detected: "{pattern}"',
                        is_new_category=context.is_new(category_key),
                    )

        return None


class ProductSimilarityStrategy(ClassifierStrategy):
    """Nearest-neighbour vote among existing products.

    Products whose names overlap the input by more than the floor are
    ranked; the top N vote for their categories and the category with the
    highest mean similarity (scaled by a damping factor) wins.
    """

    name = ClassificationStrategy.PRODUCT_SIMILARITY

    def evaluate(
        self,
        product: ProductInput,
        context: ClassificationContext,
    ) -> Optional[ClassificationCandidate]:
        if not context.products:
            return None

        settings = context.settings
        scored: List[Tuple[ExistingProductSample, float]] = []
        for existing in context.products:
            similarity = token_overlap(product.name, existing.name)
            if similarity > settings.product_similarity_floor:
                scored.append((existing, similarity))

        if not scored:
            return None

        # sorted() is stable: equal similarities keep sample order
        top = sorted(scored, key=lambda item: item[1], reverse=True)
        top = top[:settings.max_similarity_products]

        groups: Dict[str, Tuple[str, List[float]]] = {}
        for existing, similarity in top:
            if existing.category_id not in groups:
                groups[existing.category_id] = (existing.category_name, [])
            groups[existing.category_id][1].append(similarity)

        best_id = ""
        best_name = ""
        best_confidence = 0.0
        for category_id, (category_name, similarities) in groups.items():
            confidence = sum(similarities) / len(similarities) * settings.product_similarity_factor
            if confidence > best_confidence:
                best_id = category_id
                best_name = category_name
                best_confidence = confidence

        if best_confidence < settings.product_similarity_floor:
            return None

        similar_names = ", ".join(existing.name for existing, _ in top[:3])
        return ClassificationCandidate(
            category_id=best_id,
            category_name=best_name,
            confidence=min(best_confidence, 1.0),
            strategy=self.name,
            reasoning=f"Similar to: {similar_names}",
            is_new_category=False,
        )


class PatternMatchingStrategy(ClassifierStrategy):
    """Regex patterns from the knowledge base, in table order (first hit wins)."""

    name = ClassificationStrategy.PATTERN_MATCHING

    def evaluate(
        self,
        product: ProductInput,
        context: ClassificationContext,
    ) -> Optional[ClassificationCandidate]:
        text = product.full_text

        for entry in context.knowledge_base.entries:
            for pattern in entry.patterns:
                if pattern.search(text):
                    return ClassificationCandidate(
                        category_id=entry.category_key,
                        category_name=context.display_name(entry.category_key),
                        confidence=context.settings.pattern_confidence,
                        strategy=self.name,
                        reasoning=f"Pattern detected: {pattern.pattern}",
                        is_new_category=context.is_new(entry.category_key),
                    )

        return None


def default_strategies() -> List[ClassifierStrategy]:
    """The five strategies in their standard order."""
    return [
        ExactMatchStrategy(),
        KeywordAnalysisStrategy(),
        SemanticAnalysisStrategy(),
        ProductSimilarityStrategy(),
        PatternMatchingStrategy(),
    ]
