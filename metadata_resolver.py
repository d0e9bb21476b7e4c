# Filename: metadata_resolver.py

from typing import Any, Awaitable, Callable, Optional

import aiohttp
from loguru import logger
from solders.pubkey import Pubkey

import metadata_decoder
from errors import DecodeError
from models import PartialTokenMetadata

METADATA_PROGRAM_ID = Pubkey.from_string("metaqbxxUerdq28cj1RbAWkYQm3ybzjb6a8bt518x1s")
METADATA_SEED = b"metadata"

SOCIAL_FIELDS = (
    ("Website", "external_url"),
    ("Twitter", "twitter_url"),
    ("Telegram", "telegram_url"),
)


def derive_metadata_address(mint_address: str) -> Pubkey:
    mint = Pubkey.from_string(mint_address)
    pda, _bump = Pubkey.find_program_address(
        [METADATA_SEED, bytes(METADATA_PROGRAM_ID), bytes(mint)],
        METADATA_PROGRAM_ID,
    )
    return pda


def social_links_from_json(document: Any) -> Optional[str]:
    if not isinstance(document, dict):
        return None
    links = [
        f"{label}: {document[key]}"
        for label, key in SOCIAL_FIELDS
        if isinstance(document.get(key), str) and document[key]
    ]
    return "\n".join(links) or None


class MetadataResolver:
    """
    Looks up name, symbol and social links for a mint.

    resolve() never raises: a missing account, an undecodable record or a
    failing URI fetch all degrade to empty fields. One account read and at
    most one HTTP GET per call, no retries.
    """

    def __init__(
        self,
        chain,
        layout: str = metadata_decoder.METAPLEX,
        uri_timeout: float = 5,
        fetch_json: Optional[Callable[[str], Awaitable[Any]]] = None,
    ):
        self.chain = chain
        self.layout = layout
        self.uri_timeout = uri_timeout
        self.fetch_json = fetch_json or self._fetch_json

    async def _fetch_json(self, uri: str) -> Any:
        timeout = aiohttp.ClientTimeout(total=self.uri_timeout)
        async with aiohttp.ClientSession(timeout=timeout) as session:
            async with session.get(uri) as response:
                response.raise_for_status()
                return await response.json(content_type=None)

    async def resolve(self, mint_address: str) -> PartialTokenMetadata:
        try:
            metadata_address = derive_metadata_address(mint_address)
            account_data = await self.chain.get_account_info(str(metadata_address))
        except Exception as e:
            logger.error(f"[META] Metadata lookup failed for {mint_address}: {e}")
            return PartialTokenMetadata()

        if not account_data:
            logger.info(f"[META] No metadata found for token: {mint_address}")
            return PartialTokenMetadata()

        try:
            decoded = metadata_decoder.decode(account_data, layout=self.layout)
        except DecodeError as e:
            logger.warning(f"[META] Could not decode metadata for {mint_address}: {e}")
            return PartialTokenMetadata()

        result = PartialTokenMetadata(
            name=decoded.data.name.strip() or None,
            symbol=decoded.data.symbol.strip() or None,
            uri=decoded.data.uri.strip() or None,
        )

        if result.uri:
            try:
                document = await self.fetch_json(result.uri)
                result.social_links = social_links_from_json(document)
            except Exception as e:
                logger.warning(f"[META] Error fetching token URI metadata {result.uri}: {e}")

        return result
