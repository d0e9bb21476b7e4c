# Filename: telegram_alert.py

import asyncio
import logging
import os
from typing import Any, Dict, List, Optional

import requests

logger = logging.getLogger("TelegramNotifier")

API_BASE = "https://api.telegram.org"


class TelegramNotifier:
    def __init__(self, bot_token: str = None, chat_id: str = None, timeout: float = 10):
        self.bot_token = bot_token or os.getenv("TELEGRAM_BOT_TOKEN", "")
        self.chat_id = chat_id or os.getenv("TELEGRAM_CHAT_ID", "")
        self.timeout = timeout

        if not self.bot_token or not self.chat_id:
            logger.error("[Telegram] Missing bot token or chat ID!")

    def _url(self, method: str) -> str:
        return f"{API_BASE}/bot{self.bot_token}/{method}"

    def _post(self, method: str, payload: Dict[str, Any], timeout: float = None) -> Optional[Dict[str, Any]]:
        if not self.bot_token:
            return None

        try:
            response = requests.post(self._url(method), json=payload, timeout=timeout or self.timeout)
        except requests.RequestException as e:
            logger.error(f"[Telegram] {method} request exception: {e}")
            return None

        if response.status_code != 200:
            logger.error(f"[Telegram] {method} failed: {response.status_code} - {response.text}")
            return None
        return response.json()

    def send_message(self, text: str, parse_mode: str = "HTML", inline_actions: Optional[List] = None,
                     chat_id: str = None) -> bool:
        """
        Sends a message to the alert chat, optionally with one row of inline
        buttons. Each action is an InlineAction (label, action_id); the
        action_id comes back as the callback data when the button is pressed.
        """
        if not (chat_id or self.chat_id):
            return False

        payload = {
            "chat_id": chat_id or self.chat_id,
            "text": text,
            "disable_web_page_preview": True,
        }
        if parse_mode:
            payload["parse_mode"] = parse_mode
        if inline_actions:
            payload["reply_markup"] = {
                "inline_keyboard": [[
                    {"text": action.label, "callback_data": action.action_id}
                    for action in inline_actions
                ]]
            }

        if self._post("sendMessage", payload) is None:
            return False
        logger.info("[Telegram] ✅ Message sent successfully.")
        return True

    async def send(self, text: str, parse_mode: str = "HTML", inline_actions: Optional[List] = None) -> bool:
        return await asyncio.to_thread(self.send_message, text, parse_mode, inline_actions)

    async def reply(self, chat_id: str, text: str) -> bool:
        return await asyncio.to_thread(self.send_message, text, None, None, chat_id)

    async def answer_callback(self, callback_query_id: str, text: str):
        await asyncio.to_thread(
            self._post, "answerCallbackQuery", {"callback_query_id": callback_query_id, "text": text}
        )

    async def get_updates(self, offset: int = None, timeout: int = 30) -> List[Dict[str, Any]]:
        payload = {"timeout": timeout, "allowed_updates": ["message", "callback_query"]}
        if offset is not None:
            payload["offset"] = offset
        result = await asyncio.to_thread(self._post, "getUpdates", payload, timeout + 10)
        if not result or not result.get("ok"):
            return []
        return result.get("result", [])
