"""Curated-list schema resolution.

A Kleros GTCR emits MetaEvidence in pairs: registration then clearing.
The registration schema of the latest pair is the second-to-last event.
Its evidence field is an IPFS path to a JSON document whose
``metadata.columns`` lists the item columns.
"""

from __future__ import annotations

import logging
from typing import List

from clrscan.errors import DocumentUnavailable, SchemaUnavailable
from clrscan.ledger.context import LedgerContext
from clrscan.models.events import MetaEvidence
from clrscan.models.project import TcrColumn


logger = logging.getLogger(__name__)


async def get_tcr_address(ctx: LedgerContext, registry_address: str) -> str:
    """Curated list the local registry is bound to."""
    return await ctx.client.call(registry_address, "KlerosGTCRAdapter", "tcr")


def registration_meta_evidence(events: List[MetaEvidence]) -> MetaEvidence:
    """Pick the registration entry of the latest meta-evidence pair.

    Raises:
        SchemaUnavailable: If fewer than two meta-evidence events exist.
    """
    if len(events) < 2:
        raise SchemaUnavailable(
            f"Curated list has {len(events)} meta-evidence event(s), need at least 2"
        )
    return events[-2]


def parse_columns(document: object) -> List[TcrColumn]:
    """Extract the column list from a meta-evidence document.

    Raises:
        SchemaUnavailable: If the document has no usable column list.
    """
    metadata = document.get("metadata") if isinstance(document, dict) else None
    columns = metadata.get("columns") if isinstance(metadata, dict) else None
    if not isinstance(columns, list) or not columns:
        raise SchemaUnavailable("Meta-evidence document has no metadata.columns")
    parsed: List[TcrColumn] = []
    for column in columns:
        if not isinstance(column, dict) or "label" not in column or "type" not in column:
            raise SchemaUnavailable(f"Malformed schema column: {column!r}")
        parsed.append(TcrColumn(label=str(column["label"]), type=str(column["type"])))
    return parsed


async def get_tcr_columns(ctx: LedgerContext, tcr_address: str) -> List[TcrColumn]:
    """Resolve the registration column schema of a curated list.

    Raises:
        SchemaUnavailable: If the event or the document is missing.
    """
    events = await ctx.scanner.scan(tcr_address, "KlerosGTCR", MetaEvidence)
    meta_evidence = registration_meta_evidence(events)
    try:
        document = await ctx.documents.fetch_json(meta_evidence.evidence)
    except DocumentUnavailable as exc:
        raise SchemaUnavailable(
            f"Schema document {meta_evidence.evidence} unavailable: {exc}"
        ) from exc
    columns = parse_columns(document)
    logger.debug("Curated list %s has %d columns", tcr_address, len(columns))
    return columns
