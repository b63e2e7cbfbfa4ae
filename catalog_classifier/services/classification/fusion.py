"""Fusion of strategy candidates into one classification decision.

Candidates are grouped by category id and each group is scored with a
weighted mean of its confidences, using a fixed trust weight per strategy.
The best group wins; before a winner that would create a new category is
accepted, the near-duplicate guard checks whether an existing category is
a lexical variant of it and, if so, points the result there instead.
"""
from dataclasses import dataclass
from typing import Dict, List, Mapping, Optional, Sequence

from catalog_classifier.models import (
    ClassificationCandidate,
    ClassificationResult,
    ClassificationStrategy,
)
from catalog_classifier.services.classification.knowledge_base import KnowledgeBase
from catalog_classifier.services.classification.similarity import advanced_similarity, normalize
from catalog_classifier.services.classification.strategies import ClassificationContext
from catalog_classifier.utils.logger import get_logger

logger = get_logger(__name__)

STRATEGY_WEIGHTS: Mapping[ClassificationStrategy, float] = {
    ClassificationStrategy.EXACT_MATCH: 1.0,
    ClassificationStrategy.PATTERN_MATCHING: 0.9,
    ClassificationStrategy.KEYWORD_ANALYSIS: 0.8,
    ClassificationStrategy.SEMANTIC_ANALYSIS: 0.7,
    ClassificationStrategy.PRODUCT_SIMILARITY: 0.6,
}
DEFAULT_STRATEGY_WEIGHT = 0.5
SCORE_PRECISION = 9


def strategy_weight(strategy: ClassificationStrategy) -> float:
    """Trust weight of a strategy in the weighted mean."""
    return STRATEGY_WEIGHTS.get(strategy, DEFAULT_STRATEGY_WEIGHT)


@dataclass(frozen=True)
class DuplicateMatch:
    """An existing category that a proposed name duplicates."""
    category_id: str
    category_name: str
    similarity: float
    variant_group: Optional[tuple] = None


@dataclass(frozen=True)
class CategoryScore:
    """Fused score of one candidate group."""
    category_id: str
    score: float
    representative: ClassificationCandidate
    strategies: tuple


def shares_variant_group(
    name_a: str,
    name_b: str,
    knowledge_base: KnowledgeBase,
) -> Optional[tuple]:
    """Return the lexical-variant group both names belong to, if any."""
    norm_a = normalize(name_a)
    norm_b = normalize(name_b)
    for group in knowledge_base.lexical_variants:
        variants = [normalize(variant) for variant in group]
        if any(v in norm_a for v in variants) and any(v in norm_b for v in variants):
            return group
    return None


def find_existing_duplicate(
    proposed_name: str,
    categories: Mapping[str, str],
    knowledge_base: KnowledgeBase,
    threshold: float = 0.8,
) -> Optional[DuplicateMatch]:
    """Near-duplicate guard.

    Compares a proposed category name against every existing category.
    An existing category counts as a duplicate when both names share a
    lexical-variant group or their similarity reaches the threshold.

    Returns:
        The most similar duplicate (earliest in cache order on ties), or None
    """
    best: Optional[DuplicateMatch] = None
    for category_id, category_name in categories.items():
        similarity = advanced_similarity(proposed_name, category_name)
        group = shares_variant_group(proposed_name, category_name, knowledge_base)
        if group is None and similarity < threshold:
            continue
        if best is None or similarity > best.similarity:
            best = DuplicateMatch(
                category_id=category_id,
                category_name=category_name,
                similarity=similarity,
                variant_group=group,
            )
    return best


def score_groups(candidates: Sequence[ClassificationCandidate]) -> List[CategoryScore]:
    """Weighted-mean score per category id, ordered best first.

    Ties are broken by category id so the outcome never depends on the
    order in which strategies ran.
    """
    grouped: Dict[str, List[ClassificationCandidate]] = {}
    for candidate in candidates:
        grouped.setdefault(candidate.category_id, []).append(candidate)

    scores: List[CategoryScore] = []
    for category_id, group in grouped.items():
        total_score = 0.0
        total_weight = 0.0
        representative = group[0]
        for candidate in group:
            weight = strategy_weight(candidate.strategy)
            total_score += candidate.confidence * weight
            total_weight += weight
            if candidate.confidence > representative.confidence:
                representative = candidate

        # Quantized so equal means compare equal whichever weights produced them
        score = round(total_score / total_weight, SCORE_PRECISION) if total_weight > 0 else 0.0
        scores.append(CategoryScore(
            category_id=category_id,
            score=min(score, 1.0),
            representative=representative,
            strategies=tuple(candidate.strategy for candidate in group),
        ))

    scores.sort(key=lambda s: (-s.score, s.category_id))
    return scores


def fuse(
    candidates: Sequence[ClassificationCandidate],
    context: ClassificationContext,
) -> Optional[ClassificationResult]:
    """Combine strategy candidates into one result.

    Returns:
        ClassificationResult, or None when nothing clears the confidence
        threshold (the caller then runs the fallback cascade)
    """
    if not candidates:
        return None

    # A valid hint is authoritative and is never averaged down
    for candidate in candidates:
        if candidate.strategy is ClassificationStrategy.EXACT_MATCH:
            return ClassificationResult.from_candidate(candidate)

    scores = score_groups(candidates)
    winner = scores[0]
    settings = context.settings

    logger.debug(
        "fusion.scored",
        groups={s.category_id: round(s.score, 3) for s in scores},
        winner=winner.category_id,
    )

    if winner.score < settings.confidence_threshold:
        logger.debug(
            "fusion.unresolved",
            best_category=winner.category_id,
            best_score=round(winner.score, 3),
            threshold=settings.confidence_threshold,
        )
        return None

    best = winner.representative
    if best.is_new_category:
        duplicate = find_existing_duplicate(
            best.category_name,
            context.categories,
            context.knowledge_base,
            threshold=settings.duplicate_similarity_threshold,
        )
        if duplicate is not None:
            logger.info(
                "fusion.duplicate_category_avoided",
                proposed=best.category_name,
                existing_id=duplicate.category_id,
                existing_name=duplicate.category_name,
                similarity=round(duplicate.similarity, 3),
            )
            return ClassificationResult(
                category_id=duplicate.category_id,
                category_name=duplicate.category_name,
                confidence=winner.score,
                strategy=ClassificationStrategy.EXISTING_CATEGORY_SIMILARITY,
                reasoning=(
                    f'Using similar existing category "{duplicate.category_name}" '
                    f'instead of creating "{best.category_name}"'
                ),
                is_new_category=False,
            )

    strategy = (
        best.strategy if len(winner.strategies) == 1 else ClassificationStrategy.COMBINED
    )
    return ClassificationResult.from_candidate(
        best,
        confidence=winner.score,
        strategy=strategy,
    )
