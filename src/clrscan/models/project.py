"""Recipient (project) models and curated-list item status."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Any, Dict, Optional


class TcrItemStatus(int, enum.Enum):
    """Item status as reported by the Kleros GTCR contract."""
    ABSENT = 0
    REGISTERED = 1
    REGISTRATION_REQUESTED = 2
    CLEARING_REQUESTED = 3


@dataclass(frozen=True)
class TcrColumn:
    """One column of the curated list's registration schema."""
    label: str
    type: str


@dataclass(frozen=True)
class ProjectExtra:
    """Curated-list data for projects not (or not only) known locally."""
    tcr_item_status: int
    tcr_item_url: str


@dataclass
class ProjectRecord:
    """A recipient as presented for a given round window.

    Mutable — the reconciler sets the visibility flags while replaying
    removal events. ``index == 0`` means the project is not registered in
    the local registry.

    is_hidden: not part of the window's ballot.
    is_locked: removal already processed; kept visible but frozen.
    """
    id: str
    address: str = ""
    name: str = ""
    description: str = ""
    image_url: str = ""
    index: int = 0
    is_hidden: bool = False
    is_locked: bool = False
    extra: Optional[ProjectExtra] = None

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "id": self.id,
            "address": self.address,
            "name": self.name,
            "description": self.description,
            "image_url": self.image_url,
            "index": self.index,
            "is_hidden": self.is_hidden,
            "is_locked": self.is_locked,
        }
        if self.extra is not None:
            data["extra"] = {
                "tcr_item_status": self.extra.tcr_item_status,
                "tcr_item_url": self.extra.tcr_item_url,
            }
        return data
