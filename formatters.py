# Filename: formatters.py

from html import escape
from typing import Any, Dict

from models import TokenInfo


def format_token_message(token: TokenInfo, explorer_base_url: str = "https://solscan.io") -> str:
    """HTML alert for a newly created token."""
    base = explorer_base_url.rstrip("/")
    text = (
        "🆕 <b>New Token Created</b>\n\n"
        "📝 <b>Token Info:</b>\n"
        f"• Name: {escape(token.name)}\n"
        f"• Symbol: {escape(token.symbol)}\n"
        f"• Total Supply: {token.total_supply}\n"
        f"• Mint Address: <code>{token.address}</code>\n"
        f"• Creator: <code>{token.creator}</code>\n\n"
        "🔗 <b>Links:</b>\n"
        f"• <a href=\"{token.tx_link}\">View Transaction</a>\n"
        f"• <a href=\"{token.creator_link}\">Creator Profile</a>\n"
        f"• <a href=\"{base}/token/{token.address}\">View Token</a>\n"
    )

    if token.social_links:
        text += f"\n🌐 <b>Social Links:</b>\n{escape(token.social_links)}\n"

    return text


def format_transaction_message(tx: Dict[str, Any], explorer_base_url: str = "https://solscan.io") -> str:
    """HTML summary of a transaction forwarded by the deep monitor."""
    base = explorer_base_url.rstrip("/")
    logs = (tx.get("meta") or {}).get("logMessages") or []
    message = tx["transaction"]["message"]
    keys = [k["pubkey"] if isinstance(k, dict) else str(k) for k in message.get("accountKeys") or []]
    signature = (tx["transaction"].get("signatures") or ["?"])[0]

    sender = keys[0] if keys else "Unknown"
    receiver = keys[1] if len(keys) > 1 else "Unknown"
    kind = logs[0] if logs else "Unknown"

    return (
        "🔄 <b>New Transaction</b>\n\n"
        f"Type: {escape(kind)}\n"
        f"From: <code>{sender}</code>\n"
        f"To: <code>{receiver}</code>\n\n"
        f"🔍 <a href=\"{base}/tx/{signature}\">View on Solscan</a>\n"
    )
