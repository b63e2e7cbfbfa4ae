"""Fallback cascade for products fusion could not classify confidently.

Tiers, each short-circuiting on success:
1. Deep scan of existing categories (name, token, description and
   synonym evidence)
2. Broad hardware-store buckets keyed by keyword, checked against the
   near-duplicate guard
3. The generic "General" category with low confidence for manual review
"""
from typing import Optional, Tuple

from catalog_classifier.models import ClassificationResult, ClassificationStrategy, ProductInput
from catalog_classifier.services.classification.fusion import find_existing_duplicate
from catalog_classifier.services.classification.knowledge_base import KnowledgeBase
from catalog_classifier.services.classification.similarity import advanced_similarity, normalize
from catalog_classifier.services.classification.strategies import ClassificationContext
from catalog_classifier.utils.logger import get_logger

logger = get_logger(__name__)

DIRECT_MATCH_THRESHOLD = 0.8
TOKEN_MATCH_THRESHOLD = 0.8
MIN_TOKEN_LENGTH = 3
DESCRIPTION_MATCH_THRESHOLD = 0.6
DESCRIPTION_WEIGHT = 0.5
SYNONYM_HIT_BONUS = 0.3
SYNONYM_MAX_BONUS = 0.6


def synonym_bonus(product_text: str, category_name: str, knowledge_base: KnowledgeBase) -> float:
    """Bonus for synonyms of the category's theme found in the product text.

    Each synonym hit adds 0.3, capped at 0.6 overall.
    """
    norm_text = normalize(product_text)
    norm_category = normalize(category_name)

    score = 0.0
    for theme, synonyms in knowledge_base.category_synonyms.items():
        if normalize(theme) not in norm_category:
            continue
        for synonym in synonyms:
            if normalize(synonym) in norm_text:
                score += SYNONYM_HIT_BONUS
    return min(score, SYNONYM_MAX_BONUS)


def token_score(product_name: str, category_name: str) -> float:
    """Sum of strong word-to-word similarities between the two names."""
    product_words = [w for w in normalize(product_name).split() if len(w) >= MIN_TOKEN_LENGTH]
    category_words = [w for w in normalize(category_name).split() if len(w) >= MIN_TOKEN_LENGTH]

    score = 0.0
    for product_word in product_words:
        for category_word in category_words:
            similarity = advanced_similarity(product_word, category_word)
            if similarity > TOKEN_MATCH_THRESHOLD:
                score += similarity
    return score


class FallbackResolver:
    """Three-tier resolution when fusion yields no confident result."""

    def resolve(self, product: ProductInput, context: ClassificationContext) -> ClassificationResult:
        """Run the cascade; always returns a result."""
        result = self.find_similar_existing_category(product, context)
        if result is not None:
            return result

        result = self.identify_broad_category(product, context)
        if result is not None:
            return result

        return self.general_category(product, context)

    def composite_score(
        self,
        product: ProductInput,
        category_name: str,
        context: ClassificationContext,
    ) -> Tuple[float, bool]:
        """Deep-scan score of one category.

        Returns:
            (score, is_direct) where is_direct means the name alone was
            similar enough to accept the category immediately
        """
        direct = advanced_similarity(product.name, category_name)
        if direct > DIRECT_MATCH_THRESHOLD:
            return direct, True

        description_score = 0.0
        if product.description:
            similarity = advanced_similarity(product.description, category_name)
            if similarity > DESCRIPTION_MATCH_THRESHOLD:
                description_score = similarity * DESCRIPTION_WEIGHT

        total = (
            direct
            + token_score(product.name, category_name)
            + description_score
            + synonym_bonus(product.full_text, category_name, context.knowledge_base)
        )
        return min(total, 1.0), False

    def find_similar_existing_category(
        self,
        product: ProductInput,
        context: ClassificationContext,
    ) -> Optional[ClassificationResult]:
        """Tier 1: best existing category by composite score."""
        settings = context.settings
        best: Optional[Tuple[str, str, float]] = None

        for category_id, category_name in context.categories.items():
            score, is_direct = self.composite_score(product, category_name, context)
            if is_direct:
                best = (category_id, category_name, score)
                break
            if score > settings.existing_category_threshold and (best is None or score > best[2]):
                best = (category_id, category_name, score)

        if best is None or best[2] <= settings.existing_category_threshold:
            logger.debug(
                "fallback.no_similar_category",
                product=product.name[:50],
                best_score=round(best[2], 3) if best else 0.0,
            )
            return None

        category_id, category_name, score = best
        logger.debug(
            "fallback.similar_category_found",
            product=product.name[:50],
            category_id=category_id,
            score=round(score, 3),
        )
        return ClassificationResult(
            category_id=category_id,
            category_name=category_name,
            confidence=min(score, settings.existing_category_max_confidence),
            strategy=ClassificationStrategy.EXISTING_CATEGORY_SIMILARITY,
            reasoning=(
                f'Found similar existing category "{category_name}" '
                f"with {score * 100:.0f}% similarity"
            ),
            is_new_category=False,
        )

    def identify_broad_category(
        self,
        product: ProductInput,
        context: ClassificationContext,
    ) -> Optional[ClassificationResult]:
        """Tier 2: first broad bucket whose keyword appears in the product."""
        text = product.full_text.lower()
        settings = context.settings

        for bucket in context.knowledge_base.broad_categories:
            for keyword in bucket.keywords:
                if keyword not in text:
                    continue

                duplicate = find_existing_duplicate(
                    bucket.name,
                    context.categories,
                    context.knowledge_base,
                    threshold=settings.duplicate_similarity_threshold,
                )
                if duplicate is not None:
                    logger.info(
                        "fallback.duplicate_category_avoided",
                        proposed=bucket.name,
                        existing_id=duplicate.category_id,
                        existing_name=duplicate.category_name,
                    )
                    return ClassificationResult(
                        category_id=duplicate.category_id,
                        category_name=duplicate.category_name,
                        confidence=settings.broad_category_confidence,
                        strategy=ClassificationStrategy.EXISTING_CATEGORY_SIMILARITY,
                        reasoning=(
                            f'Using similar existing category "{duplicate.category_name}" '
                            f'instead of creating "{bucket.name}"'
                        ),
                        is_new_category=False,
                    )

                logger.debug(
                    "fallback.broad_category_identified",
                    product=product.name[:50],
                    category_id=bucket.category_id,
                    keyword=keyword,
                )
                return ClassificationResult(
                    category_id=bucket.category_id,
                    category_name=bucket.name,
                    confidence=settings.broad_category_confidence,
                    strategy=ClassificationStrategy.BROAD_CATEGORY_IDENTIFICATION,
                    reasoning=f'Broad category identified by keyword: "{keyword}"',
                    is_new_category=bucket.category_id not in context.categories,
                )

        return None

    def general_category(
        self,
        product: ProductInput,
        context: ClassificationContext,
    ) -> ClassificationResult:
        """Tier 3: catch-all category, flagged for manual review.

        When the catch-all id is not cached but a variant of its name is
        (e.g. "Generales" under another id), that category is used.
        """
        settings = context.settings
        category_id = settings.fallback_category_id
        category_name = settings.fallback_category_name
        is_new = category_id not in context.categories

        if is_new:
            duplicate = find_existing_duplicate(
                category_name,
                context.categories,
                context.knowledge_base,
                threshold=settings.duplicate_similarity_threshold,
            )
            if duplicate is not None:
                category_id = duplicate.category_id
                category_name = duplicate.category_name
                is_new = False

        logger.info(
            "fallback.general_category_assigned",
            product=product.name[:50],
            category_id=category_id,
        )
        return ClassificationResult(
            category_id=category_id,
            category_name=category_name,
            confidence=settings.fallback_confidence,
            strategy=ClassificationStrategy.FALLBACK_GENERAL,
            reasoning="No specific category identified; assigned to General for manual review",
            is_new_category=is_new,
        )
