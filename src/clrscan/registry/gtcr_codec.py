"""Kleros GTCR item codec — decodes RLP-encoded item data using the list's columns.

An item's data is an RLP list with one entry per schema column. Each entry
is decoded according to the column type. A field that fails to decode
becomes an empty string; a payload that is not an RLP list yields no
fields at all. Decoding never raises to the caller.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Sequence, Union

import rlp
from rlp.exceptions import DecodingError
from web3 import Web3

from clrscan.errors import MetadataDecodeFailure
from clrscan.ipfs import gateway_url
from clrscan.models.project import TcrColumn


logger = logging.getLogger(__name__)

FieldValue = Union[str, int, bool]

# Column types as written in curated-list schema documents
GTCR_ADDRESS = "GTCR address"
ADDRESS = "address"
RICH_ADDRESS = "rich address"
TEXT = "text"
LONG_TEXT = "long text"
LINK = "link"
FILE = "file"
IMAGE = "image"
TWITTER_USER_ID = "twitter user id"
NUMBER = "number"
BOOLEAN = "boolean"

_ADDRESS_TYPES = frozenset({GTCR_ADDRESS, ADDRESS})
_STRING_TYPES = frozenset({TEXT, LONG_TEXT, LINK, FILE, IMAGE, TWITTER_USER_ID, RICH_ADDRESS})

# Positions of the recipient fields in the registration schema
NAME_COLUMN = 0
ADDRESS_COLUMN = 1
IMAGE_COLUMN = 2
DESCRIPTION_COLUMN = 3


def decode_field(column: TcrColumn, raw: Any) -> FieldValue:
    """Decode one column value.

    Raises:
        MetadataDecodeFailure: If the value does not fit the column type.
    """
    if not isinstance(raw, bytes):
        raise MetadataDecodeFailure(f"{column.label}: nested list where a value was expected")
    try:
        if column.type in _ADDRESS_TYPES:
            if len(raw) != 20:
                raise ValueError(f"address must be 20 bytes, got {len(raw)}")
            return Web3.to_checksum_address("0x" + raw.hex())
        if column.type in _STRING_TYPES:
            return raw.decode("utf-8")
        if column.type == NUMBER:
            return int.from_bytes(raw, "big", signed=len(raw) == 32)
        if column.type == BOOLEAN:
            return int.from_bytes(raw, "big") != 0
    except (ValueError, UnicodeDecodeError) as exc:
        raise MetadataDecodeFailure(f"{column.label} ({column.type}): {exc}") from exc
    raise MetadataDecodeFailure(f"{column.label}: unhandled column type {column.type!r}")


def decode_item_values(columns: Sequence[TcrColumn], data: bytes) -> List[FieldValue]:
    """Decode every column of an item; failed fields become ''."""
    try:
        entries = rlp.decode(data)
    except DecodingError as exc:
        logger.debug("Item data is not RLP: %s", exc)
        return ["" for _ in columns]
    if isinstance(entries, bytes):
        logger.debug("Item data is an RLP string, expected a list")
        return ["" for _ in columns]

    values: List[FieldValue] = []
    for position, column in enumerate(columns):
        if position >= len(entries):
            values.append("")
            continue
        try:
            values.append(decode_field(column, entries[position]))
        except MetadataDecodeFailure as exc:
            logger.debug("Metadata field decode failed: %s", exc)
            values.append("")
    return values


def decode_item_data(
    columns: Sequence[TcrColumn], data: bytes, ipfs_gateway_url: str
) -> Dict[str, str]:
    """Map decoded item data onto the recipient presentation fields."""
    values = decode_item_values(columns, data)

    def text(position: int) -> str:
        if position >= len(values):
            return ""
        value = values[position]
        return value if isinstance(value, str) else str(value)

    return {
        "name": text(NAME_COLUMN),
        "address": text(ADDRESS_COLUMN),
        "image_url": gateway_url(ipfs_gateway_url, text(IMAGE_COLUMN)),
        "description": text(DESCRIPTION_COLUMN),
    }


def encode_item_values(values: Sequence[FieldValue], columns: Sequence[TcrColumn]) -> bytes:
    """Inverse of decode_item_values, used to build registration payloads."""
    encoded: List[bytes] = []
    for value, column in zip(values, columns):
        if column.type in _ADDRESS_TYPES:
            encoded.append(bytes.fromhex(str(value)[2:]))
        elif column.type == NUMBER:
            number = int(value)
            if number < 0:
                encoded.append(number.to_bytes(32, "big", signed=True))
            else:
                encoded.append(number.to_bytes((number.bit_length() + 7) // 8, "big"))
        elif column.type == BOOLEAN:
            encoded.append(b"\x01" if value else b"")
        else:
            encoded.append(str(value).encode("utf-8"))
    return rlp.encode(encoded)
