#!/usr/bin/env python3
"""Classify a single product from the command line.

Loads categories and a product sample from the catalog database, runs the
classifier and prints the decision as JSON.

Usage:
    python scripts/classify_product.py --name "Martillo Truper 16oz"
    python scripts/classify_product.py --name "Cable THW 12 AWG" --materialize
    python scripts/classify_product.py --name "Pala cuadrada" --offline
"""
import argparse
import asyncio
import json
import sys
from pathlib import Path
from typing import Optional

# Add project root to path
script_dir = Path(__file__).parent
project_root = script_dir.parent
sys.path.insert(0, str(project_root))

from catalog_classifier.db import get_session_maker
from catalog_classifier.db.repositories import SqlCatalogStore
from catalog_classifier.errors import ClassificationError, ClassifierError
from catalog_classifier.models import ClassificationResult, ProductInput
from catalog_classifier.services.classification import (
    InMemoryCatalogStore,
    create_classifier,
    parse_product,
)
from catalog_classifier.utils import configure_logging


def render(result: ClassificationResult) -> str:
    """Format a result as the JSON document printed to stdout."""
    payload = result.model_dump(mode="json")
    payload["message"] = (
        f'Product classified as "{result.category_name}" '
        f"({result.confidence:.0%}, {result.strategy.value})"
    )
    return json.dumps(payload, ensure_ascii=False, indent=2)


async def classify_offline(product: ProductInput) -> ClassificationResult:
    """Classify against an empty catalog (rule-based strategies only)."""
    classifier = await create_classifier(InMemoryCatalogStore())
    return classifier.classify(product)


async def classify_with_database(product: ProductInput, materialize: bool) -> ClassificationResult:
    """Classify against the catalog database, optionally creating the category."""
    async with get_session_maker()() as session:
        classifier = await create_classifier(SqlCatalogStore(session))
        if not materialize:
            return classifier.classify(product)

        result = await classifier.classify_and_materialize(product)
        await session.commit()
        return result


def parse_args(argv: Optional[list] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Classify a product into a catalog category")
    parser.add_argument("--name", required=True, help="Product name")
    parser.add_argument("--description", default=None, help="Product description")
    parser.add_argument("--cost", default="0", help="Unit cost")
    parser.add_argument("--hint-category", default=None, help="Category id suggested by the caller")
    parser.add_argument(
        "--offline",
        action="store_true",
        help="Do not connect to the database; classify against an empty catalog",
    )
    parser.add_argument(
        "--materialize",
        action="store_true",
        help="Create the category in the database when it is new",
    )
    parser.add_argument("--log-level", default="WARNING", help="Log level (default: WARNING)")
    return parser.parse_args(argv)


def main(argv: Optional[list] = None) -> int:
    args = parse_args(argv)
    configure_logging(args.log_level)

    try:
        product = parse_product({
            "name": args.name,
            "description": args.description,
            "cost": args.cost,
            "hint_category_id": args.hint_category,
        })
    except ClassificationError as e:
        print(f"❌ Invalid product: {e.details}", file=sys.stderr)
        return 2

    try:
        if args.offline:
            result = asyncio.run(classify_offline(product))
        else:
            result = asyncio.run(classify_with_database(product, args.materialize))
    except ClassifierError as e:
        print(f"❌ Classification failed: {e.message}", file=sys.stderr)
        return 1

    print(render(result))
    return 0


if __name__ == "__main__":
    sys.exit(main())
