# Filename: models.py

from dataclasses import dataclass
from typing import List, Optional


@dataclass
class TokenInfo:
    """
    TokenInfo is the assembled view of one detected token creation.
    It is built once per event, rendered into a notification and dropped.
    """
    name: str                           # Never empty, see the assembler fallbacks
    symbol: str                         # Never empty
    total_supply: str                   # Raw mint supply as a decimal string
    creator: str                        # Fee payer of the creation transaction
    address: str                        # Token mint address
    tx_link: str
    creator_link: str
    social_links: Optional[str] = None  # "Label: url" lines


@dataclass
class Creator:
    address: str
    verified: bool
    share: int


@dataclass
class MetadataData:
    name: str
    symbol: str
    uri: str
    seller_fee_basis_points: int = 0
    creators: Optional[List[Creator]] = None


@dataclass
class DecodedMetadata:
    """Decoded Metaplex token-metadata account."""
    key: int
    update_authority: str
    mint: str
    data: MetadataData
    primary_sale_happened: bool = False
    is_mutable: bool = True


@dataclass
class PartialTokenMetadata:
    name: Optional[str] = None
    symbol: Optional[str] = None
    uri: Optional[str] = None
    social_links: Optional[str] = None

    def is_empty(self) -> bool:
        return self.name is None and self.symbol is None and self.social_links is None


@dataclass
class InlineAction:
    label: str
    action_id: str

