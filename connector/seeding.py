"""One-shot seed step that fills a fresh session from the demo endpoint."""
from __future__ import annotations

import logging
from typing import Any, Dict, Iterable, Mapping, Sequence

from records import COLLECTIONS, ClinicSession, FormError, RecordError
from records.forms import parse_record_id

from .seed_client import SeedClient, SeedClientError

logger = logging.getLogger(__name__)


def load_rows(session: ClinicSession, collection: str, rows: Iterable[Mapping[str, Any]]) -> int:
    """Parse ``rows`` into ``collection`` and return how many were stored.

    Rows keep their ``id`` when it is a positive integer. Rows that fail to
    parse, reuse an id or double-book a provider are skipped.
    """

    store = session.store(collection)
    loaded = 0
    for index, row in enumerate(rows):
        try:
            data = session.parse(collection, row)
            record_id = parse_record_id(row.get("id"))
            if record_id is None:
                store.create(data)
            else:
                store.load(record_id, data)
        except (FormError, RecordError) as exc:
            logger.warning("Skipping %s seed row %s: %s", collection, index, exc)
            continue
        loaded += 1
    return loaded


def seed_session(
    session: ClinicSession,
    client: SeedClient,
    collections: Sequence[str] = COLLECTIONS,
) -> Dict[str, int]:
    """Populate ``session`` once; a failed collection stays empty."""

    summary: Dict[str, int] = {}
    for collection in collections:
        try:
            rows = client.fetch_collection(collection)
        except SeedClientError as exc:
            logger.error("Could not load seed data for %s: %s", collection, exc)
            summary[collection] = 0
            continue
        summary[collection] = load_rows(session, collection, rows)
        logger.info("Seeded %s with %s records", collection, summary[collection])
    return summary


__all__ = ["load_rows", "seed_session"]
