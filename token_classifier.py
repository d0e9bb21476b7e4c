# Filename: token_classifier.py

from typing import Any, Dict, Iterable, Optional

CREATION_PHRASES = (
    "initialize mint",
    "token program: initialize mint",
    "program log: create",
    "program log: instruction: initializemint",
    "create token",
    "token creation",
    "initialize a mint",
    "token mint initialized",
)

INITIALIZE_MINT = "initializeMint"


def parsed_type(instruction: Any) -> Optional[str]:
    if not isinstance(instruction, dict):
        return None
    parsed = instruction.get("parsed")
    if not isinstance(parsed, dict):
        return None
    return parsed.get("type")


def top_level_instructions(tx: Dict[str, Any]) -> Iterable[Any]:
    transaction = tx.get("transaction")
    if not isinstance(transaction, dict):
        return ()
    message = transaction.get("message")
    if not isinstance(message, dict):
        return ()
    instructions = message.get("instructions")
    return instructions if isinstance(instructions, list) else ()


def log_messages(tx: Dict[str, Any]) -> Optional[list]:
    meta = tx.get("meta")
    if not isinstance(meta, dict):
        return None
    logs = meta.get("logMessages")
    if not isinstance(logs, list):
        return None
    return [line for line in logs if isinstance(line, str)]


def is_token_creation(tx: Optional[Dict[str, Any]]) -> bool:
    """True when a jsonParsed transaction looks like a mint initialization."""
    if not isinstance(tx, dict):
        return False

    logs = log_messages(tx)
    if logs is None:
        return False

    for line in logs:
        lowered = line.lower()
        if any(phrase in lowered for phrase in CREATION_PHRASES):
            return True

    return any(parsed_type(ix) == INITIALIZE_MINT for ix in top_level_instructions(tx))
