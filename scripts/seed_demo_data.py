#!/usr/bin/env python
"""Load sample rental-property documents into a Chroma collection.

Usage:
    python -m scripts.seed_demo_data --collection test_properties --query

Useful for checking a fresh Chroma server end to end: the collection is
created, documents are embedded and added, and sample searches are run.
"""

import argparse
import asyncio
import sys

from chroma_admin.api.dependencies import ServiceContainer
from chroma_admin.exceptions import ChromaAdminError
from chroma_admin.logging_config import get_logger, setup_logging
from chroma_admin.seed import SAMPLE_QUERIES, seed_demo_data

logger = get_logger(__name__)


async def run_seed(
    collection: str,
    user_id: str,
    run_queries: bool,
    cleanup: bool,
) -> bool:
    """Seed the collection and optionally query and delete it.

    Args:
        collection: Target collection name.
        user_id: Owner recorded in document metadata.
        run_queries: Run the sample searches after seeding.
        cleanup: Delete the collection when done.

    Returns:
        True if every step succeeded, False otherwise.
    """
    setup_logging(level="INFO")
    services = ServiceContainer.build()

    try:
        logger.info(f"Seeding collection {collection} at {services.settings.chroma.url}")
        summary = await seed_demo_data(services.gateway, collection, user_id)

        print("\n" + "=" * 60)
        print("SEED SUMMARY")
        print("=" * 60)
        print(f"Collection: {summary['collection']}")
        print(f"Created: {summary['created']}")
        print(f"Documents Added: {summary['documents_added']}")

        if run_queries:
            for query in SAMPLE_QUERIES:
                results = await services.aggregator.search(query, [collection], n_results=3)
                print(f"\nQuery: {query}")
                for result in results:
                    print(f"  {result.distance:.4f}  {result.id}")
        print("=" * 60)

        if cleanup:
            await services.gateway.delete_collection(collection)
            logger.info(f"Deleted collection {collection}")

    except ChromaAdminError as e:
        logger.error(f"Seeding failed: {e.message}", extra={"details": e.details})
        if e.suggestion:
            print(f"\n{e.message}\n{e.suggestion}")
        return False
    finally:
        await services.aclose()

    return True


def main() -> None:
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description="Load sample documents into a Chroma collection",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )
    parser.add_argument(
        "--collection",
        default="test_properties",
        help="Collection to create and fill",
    )
    parser.add_argument(
        "--user-id",
        default="user_001",
        help="Owner recorded in document metadata",
    )
    parser.add_argument(
        "--query",
        action="store_true",
        help="Run sample searches after seeding",
    )
    parser.add_argument(
        "--cleanup",
        action="store_true",
        help="Delete the collection afterwards",
    )

    args = parser.parse_args()

    ok = asyncio.run(
        run_seed(
            collection=args.collection,
            user_id=args.user_id,
            run_queries=args.query,
            cleanup=args.cleanup,
        )
    )

    sys.exit(0 if ok else 1)


if __name__ == "__main__":
    main()
