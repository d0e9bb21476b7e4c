# Filename: token_assembler.py

import logging
from typing import Any, Dict, Iterable, Optional

from models import TokenInfo
from token_classifier import INITIALIZE_MINT, log_messages, parsed_type, top_level_instructions

logger = logging.getLogger("TokenAssembler")


def mint_address(tx: Dict[str, Any]) -> Optional[str]:
    balances = (tx.get("meta") or {}).get("postTokenBalances") or []
    if not balances:
        return None
    return balances[0].get("mint") or None


def first_account_key(tx: Dict[str, Any]) -> str:
    key = tx["transaction"]["message"]["accountKeys"][0]
    # jsonParsed gives {"pubkey": ...}, other encodings give the bare string
    return key["pubkey"] if isinstance(key, dict) else str(key)


def inner_instructions(tx: Dict[str, Any]) -> Iterable[Any]:
    for group in (tx.get("meta") or {}).get("innerInstructions") or []:
        for ix in group.get("instructions") or []:
            yield ix


def symbol_from_logs(tx: Dict[str, Any]) -> Optional[str]:
    """Text after the first colon of the first log line mentioning "symbol:"."""
    for line in log_messages(tx) or []:
        if "symbol:" in line.lower():
            return line.split(":", 1)[1].strip() or None
    return None


class TokenInfoAssembler:
    """
    Builds a TokenInfo for a creation transaction.

    Name and symbol precedence, lowest to highest: on-chain metadata account
    (and its URI), initializeMint instructions in inner instructions, then
    top-level instructions. Missing values fall back to the mint address and
    to "symbol:" log lines.
    """

    def __init__(self, chain, resolver, explorer_base_url: str = "https://solscan.io"):
        self.chain = chain
        self.resolver = resolver
        self.explorer_base_url = explorer_base_url.rstrip("/")

    async def assemble(self, tx: Dict[str, Any]) -> Optional[TokenInfo]:
        signature = None
        try:
            signature = (tx["transaction"].get("signatures") or [None])[0]

            token_address = mint_address(tx)
            if not token_address:
                logger.error(f"Could not find token address in transaction {signature}")
                return None

            supply = await self.chain.get_mint_supply(token_address)
            metadata = await self.resolver.resolve(token_address)
            if metadata.is_empty():
                logger.info(f"No metadata for {token_address}, using instruction and log fallbacks")

            name = metadata.name
            symbol = metadata.symbol
            creator = first_account_key(tx)

            for ix in list(inner_instructions(tx)) + list(top_level_instructions(tx)):
                if parsed_type(ix) != INITIALIZE_MINT:
                    continue
                info = ix["parsed"].get("info") or {}
                symbol = info.get("symbol") or symbol
                name = info.get("name") or name
        except Exception as e:
            logger.error(f"Error getting token info for {signature}: {e}")
            return None

        name = str(name or "").strip()
        symbol = str(symbol or "").strip()
        if not name:
            name = f"Token {token_address[:8]}"
        if not symbol:
            symbol = symbol_from_logs(tx) or name.split()[0]

        logger.info(f"Token data found: name={name} symbol={symbol} creator={creator}")

        return TokenInfo(
            name=name,
            symbol=symbol,
            total_supply=str(supply),
            creator=creator,
            address=token_address,
            tx_link=f"{self.explorer_base_url}/tx/{signature}",
            creator_link=f"{self.explorer_base_url}/account/{creator}",
            social_links=metadata.social_links,
        )
