"""Multi-strategy product category classifier.

Assigns a free-text product to an existing category, or proposes a new
one, without ever proposing a lexical variant of a category that already
exists.

Pipeline:
1. Five independent strategies (exact hint, keywords, semantic synonyms,
   similar products, regex patterns) each propose at most one category
2. Fusion scores proposals per category and applies the duplicate guard
3. If nothing is confident enough, the fallback cascade decides
   (similar existing category -> broad bucket -> "General")

Example:
    store = SqlCatalogStore(session)
    classifier = await create_classifier(store)

    result = classifier.classify(ProductInput(name="Martillo Truper 16oz"))
    # result.category_id = "herramientas"
    # result.strategy = "pattern_matching"

    if result.is_new_category:
        await classifier.ensure_category(result.category_id, result.category_name)
"""
import threading
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Sequence

from pydantic import ValidationError

from catalog_classifier.config import ClassifierSettings, get_classifier_settings
from catalog_classifier.errors import ClassificationError, ConfigurationError
from catalog_classifier.models import (
    CategoryRecord,
    ClassificationCandidate,
    ClassificationResult,
    ClassificationStrategy,
    ExistingProductSample,
    ProductInput,
)
from catalog_classifier.services.classification.cache import CategoryCache
from catalog_classifier.services.classification.fallback import FallbackResolver
from catalog_classifier.services.classification.fusion import fuse
from catalog_classifier.services.classification.knowledge_base import (
    DEFAULT_KNOWLEDGE_BASE,
    KnowledgeBase,
)
from catalog_classifier.services.classification.materializer import CategoryMaterializer
from catalog_classifier.services.classification.store import CatalogStore
from catalog_classifier.services.classification.strategies import (
    ClassificationContext,
    ClassifierStrategy,
    default_strategies,
)
from catalog_classifier.utils.logger import get_logger

logger = get_logger(__name__)


def parse_product(data: Mapping[str, Any]) -> ProductInput:
    """Build a ProductInput from raw fields (import rows, CLI arguments).

    Raises:
        ClassificationError: If the fields do not describe a valid product
    """
    try:
        return ProductInput.model_validate(dict(data))
    except ValidationError as e:
        raise ClassificationError(
            "Invalid product data",
            details={
                "errors": [
                    {"field": ".".join(str(p) for p in err["loc"]), "message": err["msg"]}
                    for err in e.errors()
                ],
            },
        ) from e


@dataclass
class ClassifierStats:
    """Counters describing what the classifier decided so far.

    Counters are the only state written during classify(); every update
    holds a lock so callers classifying from several threads lose no counts.
    """

    total_classified: int = 0
    by_strategy: Dict[str, int] = field(default_factory=dict)
    new_categories_proposed: int = 0
    fallback_count: int = 0
    strategy_failures: int = 0
    categories_materialized: int = 0
    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False, compare=False)

    def record(self, result: ClassificationResult, used_fallback: bool) -> None:
        with self._lock:
            self.total_classified += 1
            key = result.strategy.value
            self.by_strategy[key] = self.by_strategy.get(key, 0) + 1
            if result.is_new_category:
                self.new_categories_proposed += 1
            if used_fallback:
                self.fallback_count += 1

    def record_strategy_failure(self) -> None:
        with self._lock:
            self.strategy_failures += 1

    def record_materialized(self, record: CategoryRecord) -> None:
        """Count a category row inserted by the materializer."""
        with self._lock:
            self.categories_materialized += 1

    @property
    def fallback_rate(self) -> float:
        """Share of classifications that needed the fallback cascade (0-100)."""
        if self.total_classified == 0:
            return 0.0
        return self.fallback_count / self.total_classified * 100


class IntelligentClassifier:
    """Classifies products into catalog categories.

    Construct one per process (or per unit of work), call initialize()
    once, then classify() as often as needed. The instance owns its
    caches; they change only through refresh() and ensure_category().

    Attributes:
        settings: Thresholds and confidences
        knowledge_base: Vocabulary tables for rule-based strategies
        stats: Running decision counters
    """

    def __init__(
        self,
        store: CatalogStore,
        settings: Optional[ClassifierSettings] = None,
        knowledge_base: KnowledgeBase = DEFAULT_KNOWLEDGE_BASE,
        strategies: Optional[Sequence[ClassifierStrategy]] = None,
    ):
        self._store = store
        self.settings = settings or get_classifier_settings()
        if self.settings.high_confidence_threshold < self.settings.confidence_threshold:
            raise ConfigurationError(
                "high_confidence_threshold must not be below confidence_threshold",
                details={
                    "confidence_threshold": self.settings.confidence_threshold,
                    "high_confidence_threshold": self.settings.high_confidence_threshold,
                },
            )
        self.knowledge_base = knowledge_base
        self._strategies: List[ClassifierStrategy] = list(strategies or default_strategies())
        self._fallback = FallbackResolver()

        self._categories = CategoryCache()
        self._products: tuple[ExistingProductSample, ...] = ()
        self._materializer = CategoryMaterializer(
            store,
            self._categories,
            on_insert=self._on_category_inserted,
        )
        self._initialized = False

        self.stats = ClassifierStats()
        self._log = logger.bind(component="IntelligentClassifier")

    @property
    def is_initialized(self) -> bool:
        return self._initialized

    @property
    def categories(self) -> Dict[str, str]:
        """Snapshot of the category cache (id -> name)."""
        return self._categories.snapshot()

    @property
    def product_count(self) -> int:
        return len(self._products)

    async def initialize(self) -> None:
        """Load categories and the product sample from the store.

        Store failures are logged and leave the corresponding cache empty;
        the classifier keeps working with the rule-based strategies only.
        """
        try:
            categories = await self._store.load_active_categories()
        except Exception as e:
            self._log.error(
                "classifier.categories_load_failed",
                error=str(e),
                error_type=type(e).__name__,
            )
            categories = []
        self._categories.replace_all(categories)

        try:
            products = await self._store.load_active_product_sample(
                self.settings.product_sample_limit
            )
        except Exception as e:
            self._log.error(
                "classifier.products_load_failed",
                error=str(e),
                error_type=type(e).__name__,
            )
            products = []
        self._products = tuple(products)

        self._initialized = True
        self._log.info(
            "classifier.initialized",
            categories=len(self._categories),
            products=len(self._products),
        )
        if len(self._categories) == 0:
            self._log.warning("classifier.no_existing_categories")

    async def refresh(self) -> None:
        """Reload caches from the store (after bulk category changes)."""
        await self.initialize()

    def build_context(self) -> ClassificationContext:
        """Immutable snapshot handed to strategies, fusion and fallback."""
        return ClassificationContext(
            categories=self._categories.snapshot(),
            products=self._products,
            knowledge_base=self.knowledge_base,
            settings=self.settings,
        )

    def run_strategies(
        self,
        product: ProductInput,
        context: ClassificationContext,
    ) -> List[ClassificationCandidate]:
        """Collect candidates from every strategy.

        A strategy that raises contributes nothing; the others still run.
        """
        candidates: List[ClassificationCandidate] = []
        for strategy in self._strategies:
            try:
                candidate = strategy.evaluate(product, context)
            except Exception as e:
                self.stats.record_strategy_failure()
                self._log.warning(
                    "classifier.strategy_failed",
                    strategy=strategy.name.value,
                    product=product.name[:50],
                    error=str(e),
                    error_type=type(e).__name__,
                )
                continue
            if candidate is not None:
                candidates.append(candidate)
        return candidates

    def classify(self, product: ProductInput) -> ClassificationResult:
        """Classify one product.

        Args:
            product: Product to classify

        Returns:
            ClassificationResult; never None (the fallback cascade always
            produces a decision)
        """
        if not self._initialized:
            self._log.warning("classifier.not_initialized", product=product.name[:50])

        context = self.build_context()
        candidates = self.run_strategies(product, context)

        result = fuse(candidates, context)
        used_fallback = result is None
        if result is None:
            result = self._fallback.resolve(product, context)
        result = result.with_review_flags(
            self.settings.confidence_threshold,
            self.settings.high_confidence_threshold,
        )

        self.stats.record(result, used_fallback)
        self._log.debug(
            "classifier.classified",
            product=product.name[:50],
            category_id=result.category_id,
            confidence=round(result.confidence, 3),
            strategy=result.strategy.value,
            is_new_category=result.is_new_category,
            candidates=len(candidates),
        )
        return result

    async def ensure_category(
        self,
        category_id: str,
        category_name: str,
        description: Optional[str] = None,
    ) -> CategoryRecord:
        """Idempotently persist a category and add it to the cache."""
        return await self._materializer.ensure_category(category_id, category_name, description)

    def _on_category_inserted(self, record: CategoryRecord) -> None:
        self.stats.record_materialized(record)

    async def classify_and_materialize(self, product: ProductInput) -> ClassificationResult:
        """Classify and, for a new category, make sure it exists.

        When the store already holds the category under another id (same
        name, different id), the result is rewritten to that row.
        """
        result = self.classify(product)
        if not result.is_new_category:
            return result

        record = await self.ensure_category(result.category_id, result.category_name)
        if record.id != result.category_id:
            return ClassificationResult.from_candidate(
                result,
                category_id=record.id,
                category_name=record.name,
                strategy=ClassificationStrategy.EXISTING_CATEGORY_SIMILARITY,
                reasoning=f'Category "{record.name}" already exists in the catalog',
                is_new_category=False,
            )
        return result

    def reset_stats(self) -> None:
        """Reset statistics counters."""
        self.stats = ClassifierStats()


async def create_classifier(
    store: CatalogStore,
    settings: Optional[ClassifierSettings] = None,
    **kwargs,
) -> IntelligentClassifier:
    """Build and initialize a classifier."""
    classifier = IntelligentClassifier(store, settings=settings, **kwargs)
    await classifier.initialize()
    return classifier
