"""
Decoder for token-metadata accounts.

Two layouts are supported:

- ``packed``: 1-byte key, 32-byte update authority, 32-byte mint, then
  name / symbol / uri each as a 1-byte length followed by that many bytes,
  with nothing in between.
- ``metaplex``: the account as written by the Metaplex token-metadata
  program. Same header, then Borsh strings (u32 little-endian length) whose
  payload is the NUL padded 32/10/200 byte slot, followed by the seller fee,
  the optional creators vector and the two flags.

Strings come back UTF-8 decoded with NUL bytes removed. A length prefix
that points past the end of the buffer raises ``DecodeError`` with the
``truncated`` reason; nothing is ever read out of bounds.
"""

from construct import (
    Bytes,
    ConstructError,
    Flag,
    GreedyBytes,
    If,
    Int8ul,
    Int16ul,
    Int32ul,
    Prefixed,
    PrefixedArray,
    StreamError,
    Struct,
    Tell,
    this,
)
from solders.pubkey import Pubkey

from errors import DecodeError
from models import Creator, DecodedMetadata, MetadataData

PACKED = "packed"
METAPLEX = "metaplex"
LAYOUTS = (PACKED, METAPLEX)

PACKED_LAYOUT = Struct(
    "key" / Int8ul,
    "update_authority" / Bytes(32),
    "mint" / Bytes(32),
    "name" / Prefixed(Int8ul, GreedyBytes),
    "symbol" / Prefixed(Int8ul, GreedyBytes),
    "uri" / Prefixed(Int8ul, GreedyBytes),
)

METAPLEX_LAYOUT = Struct(
    "key" / Int8ul,
    "update_authority" / Bytes(32),
    "mint" / Bytes(32),
    "name" / Prefixed(Int32ul, GreedyBytes),
    "symbol" / Prefixed(Int32ul, GreedyBytes),
    "uri" / Prefixed(Int32ul, GreedyBytes),
    "end" / Tell,
)

CREATOR_LAYOUT = Struct(
    "address" / Bytes(32),
    "verified" / Flag,
    "share" / Int8ul,
)

# Everything after the uri; older accounts may stop early.
METAPLEX_TAIL_LAYOUT = Struct(
    "seller_fee_basis_points" / Int16ul,
    "has_creators" / Flag,
    "creators" / If(this.has_creators, PrefixedArray(Int32ul, CREATOR_LAYOUT)),
    "primary_sale_happened" / Flag,
    "is_mutable" / Flag,
)


def _text(raw: bytes) -> str:
    return raw.decode("utf-8", errors="replace").replace("\x00", "")


def _address(raw: bytes) -> str:
    return str(Pubkey.from_bytes(raw))


def _parse(layout, buffer: bytes):
    try:
        return layout.parse(buffer)
    except StreamError as e:
        raise DecodeError(DecodeError.TRUNCATED, f"metadata buffer truncated: {e}") from e
    except ConstructError as e:
        raise DecodeError(DecodeError.MALFORMED, f"metadata buffer malformed: {e}") from e


def decode(buffer: bytes, layout: str = PACKED) -> DecodedMetadata:
    if layout not in LAYOUTS:
        raise ValueError(f"Unknown metadata layout: {layout}")
    buffer = bytes(buffer)

    if layout == PACKED:
        parsed = _parse(PACKED_LAYOUT, buffer)
        return DecodedMetadata(
            key=parsed.key,
            update_authority=_address(parsed.update_authority),
            mint=_address(parsed.mint),
            data=MetadataData(
                name=_text(parsed.name),
                symbol=_text(parsed.symbol),
                uri=_text(parsed.uri),
            ),
        )

    parsed = _parse(METAPLEX_LAYOUT, buffer)
    metadata = DecodedMetadata(
        key=parsed.key,
        update_authority=_address(parsed.update_authority),
        mint=_address(parsed.mint),
        data=MetadataData(
            name=_text(parsed.name),
            symbol=_text(parsed.symbol),
            uri=_text(parsed.uri),
        ),
    )

    try:
        tail = METAPLEX_TAIL_LAYOUT.parse(buffer[parsed.end:])
    except ConstructError:
        return metadata

    metadata.data.seller_fee_basis_points = tail.seller_fee_basis_points
    if tail.has_creators:
        metadata.data.creators = [
            Creator(address=_address(c.address), verified=bool(c.verified), share=c.share)
            for c in tail.creators
        ]
    metadata.primary_sale_happened = bool(tail.primary_sale_happened)
    metadata.is_mutable = bool(tail.is_mutable)
    return metadata
