"""Script to load an exported document dump into the documents table.

The dump is a JSON object keyed by collection name, each holding a list of
documents with their stored field names, e.g.

    {"students": [{"name": "Alice", "email": "a@x.com", "lessonsSignedUp": 10}],
     "checkins": [...], "classes": [...], "teachers": [...], "classrooms": [...]}

Documents are written unchanged; ids are newly assigned, so check-ins and
classes that point at students by their old id need those ids remapped first.

Usage:
    python scripts/import_documents.py dump.json [--db-url sqlite+aiosqlite:///./tutor_center.db]
"""

import argparse
import asyncio
import json
import logging
from pathlib import Path
import sys

# App imports
sys.path.append(str(Path(__file__).parent.parent))
from src.tutor_center_backend.common.config import settings
from src.tutor_center_backend.database import models as db_models
from src.tutor_center_backend.database.engine import build_engine, build_session_factory, create_tables
from src.tutor_center_backend.database.store import TutoringStore

logging.basicConfig(level=logging.INFO, format="%(levelname)s: %(message)s")
logger = logging.getLogger(__name__)


def load_dump(path: Path) -> dict[str, list[dict]]:
    with open(path, 'r') as f:
        dump = json.load(f)
    if not isinstance(dump, dict):
        raise ValueError("Dump must be a JSON object keyed by collection name.")
    unknown = set(dump) - set(db_models.COLLECTIONS)
    if unknown:
        raise ValueError(f"Unknown collections in dump: {sorted(unknown)}")
    return dump


async def import_documents(dump: dict[str, list[dict]], db_url: str) -> dict[str, int]:
    engine = build_engine(db_url)
    try:
        await create_tables(engine)
        store = TutoringStore(build_session_factory(engine))
        counts = {}
        for collection, documents in dump.items():
            counts[collection] = 0
            for data in documents:
                if not isinstance(data, dict):
                    logger.warning(f"Skipping non-object entry in '{collection}': {data!r}")
                    continue
                await store.add_raw_document(collection, data)
                counts[collection] += 1
        return counts
    finally:
        await engine.dispose()


def main():
    parser = argparse.ArgumentParser(description="Import a JSON document dump.")
    parser.add_argument("dump", type=Path, help="Path to the JSON dump file")
    parser.add_argument("--db-url", default=settings.database_url, help="Target database URL")
    args = parser.parse_args()

    dump = load_dump(args.dump)
    counts = asyncio.run(import_documents(dump, args.db_url))
    for collection, count in counts.items():
        logger.info(f"Imported {count} documents into '{collection}'.")


if __name__ == "__main__":
    main()
