"""Recipient registry reconciler — one deduplicated project list per round window.

Two ledgers are merged:
- the local registry (KlerosGTCRAdapter): RecipientAdded / RecipientRemoved
- the curated list (KlerosGTCR): ItemSubmitted, for items registered on the
  list but not yet added locally.

Visibility for a window [start_block, end_block]:
- added at or after end_block            -> hidden (not on that round's ballot)
- removed, no start_block                -> hidden
- removed at or before start_block       -> hidden (never eligible)
- removed after start_block              -> locked (shown, frozen)

The hidden check for late additions runs first; a removal then sets one
of the two flags. A bound of 0 counts as not supplied.

Every scanned event either yields a project or is logged as skipped.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Dict, List, Optional, Sequence, Set

from clrscan.ledger.context import LedgerContext
from clrscan.models.events import ItemSubmitted, RecipientAdded, RecipientRemoved
from clrscan.models.project import ProjectExtra, ProjectRecord, TcrColumn, TcrItemStatus
from clrscan.registry.gtcr_codec import decode_item_data
from clrscan.registry.schema import get_tcr_address, get_tcr_columns


logger = logging.getLogger(__name__)


def curate_item_url(ctx: LedgerContext, item_id: str) -> str:
    return f"{ctx.curate_url}/{item_id}"


def project_from_added(
    ctx: LedgerContext, event: RecipientAdded, columns: Sequence[TcrColumn]
) -> ProjectRecord:
    return ProjectRecord(
        id=event.item_id,
        index=event.index,
        **decode_item_data(columns, event.metadata, ctx.ipfs_gateway_url),
    )


def apply_window(
    project: ProjectRecord,
    added: RecipientAdded,
    removal: Optional[RecipientRemoved],
    start_block: Optional[int],
    end_block: Optional[int],
) -> None:
    """Set is_hidden / is_locked on a locally added project for the window."""
    if end_block and added.block_number >= end_block:
        project.is_hidden = True
    if removal is None:
        return
    if not start_block or removal.block_number <= start_block:
        project.is_hidden = True
    else:
        project.is_locked = True


async def get_projects(
    ctx: LedgerContext,
    registry_address: str,
    start_block: Optional[int] = None,
    end_block: Optional[int] = None,
) -> List[ProjectRecord]:
    """Return every project ever known to the registry, tagged for the window.

    Raises:
        SchemaUnavailable: If the curated list's schema cannot be resolved.
        LedgerUnavailable: On transport failure of any read.
    """
    tcr_address = await get_tcr_address(ctx, registry_address)
    columns = await get_tcr_columns(ctx, tcr_address)
    scanner = ctx.scanner
    added_events, removed_events = await asyncio.gather(
        scanner.scan(registry_address, "KlerosGTCRAdapter", RecipientAdded),
        scanner.scan(registry_address, "KlerosGTCRAdapter", RecipientRemoved),
    )

    removals: Dict[str, RecipientRemoved] = {}
    for event in removed_events:
        # first removal per id wins
        removals.setdefault(event.item_id, event)

    projects: List[ProjectRecord] = []
    known_ids: Set[str] = set()
    for event in added_events:
        if event.item_id in known_ids:
            logger.debug(
                "Skipping RecipientAdded for %s at block %d: duplicate id",
                event.item_id, event.block_number,
            )
            continue
        project = project_from_added(ctx, event, columns)
        apply_window(project, event, removals.get(event.item_id), start_block, end_block)
        projects.append(project)
        known_ids.add(project.id)

    submitted_events = await scanner.scan(tcr_address, "KlerosGTCR", ItemSubmitted)
    for event in submitted_events:
        if event.item_id in known_ids:
            logger.debug("Skipping submitted item %s: already listed", event.item_id)
            continue
        item_data, item_status, _ = await ctx.client.call(
            tcr_address, "KlerosGTCR", "getItemInfo", event.item_id
        )
        if item_status != TcrItemStatus.REGISTERED:
            logger.debug(
                "Skipping submitted item %s: status %s", event.item_id, item_status
            )
            continue
        projects.append(
            ProjectRecord(
                id=event.item_id,
                index=0,
                extra=ProjectExtra(
                    tcr_item_status=int(TcrItemStatus.REGISTERED),
                    tcr_item_url=curate_item_url(ctx, event.item_id),
                ),
                **decode_item_data(columns, bytes(item_data), ctx.ipfs_gateway_url),
            )
        )
        known_ids.add(event.item_id)

    logger.info(
        "Registry %s: %d projects (%d added, %d removed, %d submitted)",
        registry_address, len(projects), len(added_events),
        len(removed_events), len(submitted_events),
    )
    return projects
