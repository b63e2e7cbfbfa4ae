"""Builders shared by unit tests."""
from typing import Mapping, Optional, Sequence

from catalog_classifier.config import ClassifierSettings
from catalog_classifier.models import CategoryRecord, ExistingProductSample
from catalog_classifier.services.classification import IntelligentClassifier, InMemoryCatalogStore
from catalog_classifier.services.classification.knowledge_base import (
    DEFAULT_KNOWLEDGE_BASE,
    KnowledgeBase,
)
from catalog_classifier.services.classification.strategies import ClassificationContext


def make_context(
    categories: Optional[Mapping[str, str]] = None,
    products: Sequence[ExistingProductSample] = (),
    settings: Optional[ClassifierSettings] = None,
    knowledge_base: KnowledgeBase = DEFAULT_KNOWLEDGE_BASE,
) -> ClassificationContext:
    """Context snapshot with the given caches."""
    return ClassificationContext(
        categories=dict(categories or {}),
        products=tuple(products),
        knowledge_base=knowledge_base,
        settings=settings or ClassifierSettings(),
    )


async def make_classifier(
    categories: Sequence[CategoryRecord] = (),
    products: Sequence[ExistingProductSample] = (),
    settings: Optional[ClassifierSettings] = None,
    **kwargs,
) -> tuple[IntelligentClassifier, InMemoryCatalogStore]:
    """Initialized classifier over an in-memory store."""
    store = InMemoryCatalogStore(categories, products)
    classifier = IntelligentClassifier(store, settings=settings or ClassifierSettings(), **kwargs)
    await classifier.initialize()
    return classifier, store
