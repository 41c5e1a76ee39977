"""Recipient lookup — a single project read from the curated list's live state.

Unlike get_projects(), this path reads the item directly from the curated
list and overlays local registry history without any window reasoning:
any removal locks the project, and is_hidden is never set.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Optional

from clrscan.ledger.context import LedgerContext
from clrscan.models.events import RecipientAdded, RecipientRemoved, normalize_item_id
from clrscan.models.project import ProjectExtra, ProjectRecord
from clrscan.registry.gtcr_codec import decode_item_data
from clrscan.registry.reconciler import curate_item_url
from clrscan.registry.schema import get_tcr_address, get_tcr_columns


logger = logging.getLogger(__name__)


async def get_project(
    ctx: LedgerContext,
    registry_address: str,
    item_id: str,
) -> Optional[ProjectRecord]:
    """Return the project for ``item_id``, or None if the curated list has no data.

    Raises:
        SchemaUnavailable: If the curated list's schema cannot be resolved.
    """
    item_id = normalize_item_id(item_id)
    tcr_address = await get_tcr_address(ctx, registry_address)
    columns = await get_tcr_columns(ctx, tcr_address)
    item_data, item_status, _ = await ctx.client.call(
        tcr_address, "KlerosGTCR", "getItemInfo", item_id
    )
    if not item_data:
        logger.debug("Item %s is not in curated list %s", item_id, tcr_address)
        return None

    project = ProjectRecord(
        id=item_id,
        index=0,
        extra=ProjectExtra(
            tcr_item_status=int(item_status),
            tcr_item_url=curate_item_url(ctx, item_id),
        ),
        **decode_item_data(columns, bytes(item_data), ctx.ipfs_gateway_url),
    )

    id_filter = {"_tcrItemId": item_id}
    scanner = ctx.scanner
    added_events, removed_events = await asyncio.gather(
        scanner.scan(registry_address, "KlerosGTCRAdapter", RecipientAdded, id_filter),
        scanner.scan(registry_address, "KlerosGTCRAdapter", RecipientRemoved, id_filter),
    )
    if added_events:
        project.index = added_events[0].index
    if removed_events:
        project.is_locked = True
    return project
