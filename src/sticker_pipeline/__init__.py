"""
Sticker Pipeline: Telegram sticker set discovery and ingestion.

Subpackages / modules:
    catalog       - Catalog scraper (listing page -> sticker set names)
    telegram      - Bot API client, pack resolver and file locator
    fetcher       - Asset fetcher (descriptor -> bytes)
    storage       - Object Store Gateway with Supabase and local backends
    orchestrator  - Concurrent per-collection ingestion
    schemas       - Run data models and wire schemas
    service       - Component wiring from IngestConfig
    server        - aiohttp HTTP entry point

Architecture:
    catalog page -> names -> TelegramPackResolver -> descriptors
        -> IngestionOrchestrator: fetch -> sniff -> StorageGateway -> outcome
        -> IngestionReport

Dependencies:
    - core.*: Errors, logging, HTTP download, format sniffing
    - aiohttp: Bot API, downloads, Supabase REST and the HTTP server
    - beautifulsoup4: Catalog HTML parsing
    - pydantic: Wire schemas
"""

from config.config import IngestConfig

__version__ = "0.1.0"
__all__ = ["IngestConfig"]
