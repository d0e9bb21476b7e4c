"""
Configuration du MintWatchBot
"""

import os
import json
import logging
from typing import Dict, Any

logger = logging.getLogger("config")

CONFIG_FILE = "config.json"

# Configuration par défaut
DEFAULT_CONFIG = {
    # RPC
    "RPC_HTTP_ENDPOINT": "https://api.mainnet-beta.solana.com",
    "RPC_WS_ENDPOINT": "wss://api.mainnet-beta.solana.com",
    "COMMITMENT": "confirmed",
    "WS_RECONNECT_DELAY_SECONDS": 5,

    # Detection pipeline
    "RATE_LIMIT_MS": 5000,
    "SETTLE_DELAY_MS": 1000,
    "URI_FETCH_TIMEOUT_SECONDS": 5,
    "METADATA_LAYOUT": "metaplex",
    "EXPLORER_BASE_URL": "https://solscan.io",

    # Deep monitor
    "MONITOR_TX_CAP": 10,

    # Notifier
    "TELEGRAM_BOT_TOKEN": "",
    "TELEGRAM_CHAT_ID": "",
    "TELEGRAM_POLL_TIMEOUT_SECONDS": 30,

    # Store
    "REDIS_URL": "redis://localhost:6379/0",
}


def coerce_value(key: str, value: Any, default: Any) -> Any:
    """
    Convertit une valeur (fichier ou variable d'env) vers le type de la valeur
    par défaut. Une valeur invalide est remplacée par le défaut.
    """
    if value is None:
        return default

    try:
        if isinstance(default, bool):
            return value if isinstance(value, bool) else str(value).lower() == "true"
        if isinstance(default, int):
            if isinstance(value, bool):
                raise ValueError(f"booléen inattendu: {value}")
            return int(value)
        if isinstance(default, float):
            return float(value)
        return str(value)
    except (TypeError, ValueError) as parse_err:
        logger.warning(f"Valeur invalide pour {key}: {parse_err}. Valeur par défaut utilisée.")
        return default


def merge_with_defaults(values: Dict[str, Any]) -> Dict[str, Any]:
    """Complète les clés manquantes et type chaque clé connue."""
    config = dict(values)
    for key, default_value in DEFAULT_CONFIG.items():
        config[key] = coerce_value(key, values.get(key), default_value)
    return config


def load_config(config_file: str = CONFIG_FILE) -> Dict[str, Any]:
    """
    Charge la configuration du bot.

    USE_ENV_CONFIG=true: lecture depuis les variables d'environnement.
    Sinon lecture de config.json, créé avec les valeurs par défaut s'il
    n'existe pas. Un fichier illisible ou qui n'est pas un objet JSON donne
    la configuration par défaut; un fichier partiel est complété.
    """
    if os.environ.get("USE_ENV_CONFIG", "").lower() == "true":
        logger.info("Chargement de la configuration depuis les variables d'environnement")
        return load_config_from_env()

    if not os.path.exists(config_file):
        with open(config_file, "w") as f:
            json.dump(DEFAULT_CONFIG, f, indent=2)
        logger.info(f"Fichier de configuration créé: {config_file}")
        return dict(DEFAULT_CONFIG)

    try:
        with open(config_file, "r") as f:
            values = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        logger.error(f"Configuration illisible ({config_file}): {e}. Valeurs par défaut utilisées.")
        return dict(DEFAULT_CONFIG)

    if not isinstance(values, dict):
        logger.error(f"{config_file} doit contenir un objet JSON. Valeurs par défaut utilisées.")
        return dict(DEFAULT_CONFIG)

    logger.info(f"Configuration chargée depuis: {config_file}")
    return merge_with_defaults(values)


def load_config_from_env() -> Dict[str, Any]:
    """Une variable d'env par clé de DEFAULT_CONFIG, même nom."""
    return merge_with_defaults(
        {key: os.environ[key] for key in DEFAULT_CONFIG if key in os.environ}
    )
