"""Configuration loading for the sticker pipeline.

Configuration Structure
-----------------------

config/
    config.yaml          # Limits, storage, Telegram, catalog and server settings

Main Functions
--------------

    - load_config(): Load configuration from YAML plus environment
    - IngestConfig: Explicit settings handed to each component

Usage Examples
--------------

    >>> from config import load_config
    >>> config = load_config()
    >>> config.bucket
    'telegram-stickers'

Configuration Priority
----------------------

1. Environment variables for secrets (SUPABASE_URL, SUPABASE_SERVICE_ROLE_KEY,
   SUPABASE_BUCKET, TELEGRAM_API_KEY)
2. Explicit overrides passed to load_config()
3. YAML configuration file
4. Dataclass defaults
"""

from config.config import (
    DEFAULT_CONFIG_FILE,
    IngestConfig,
    load_config,
)

__all__ = [
    "DEFAULT_CONFIG_FILE",
    "IngestConfig",
    "load_config",
]
