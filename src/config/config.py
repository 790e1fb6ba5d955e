"""Sticker pipeline configuration from YAML file.

Loads from config/config.yaml with all settings in one place:
- Ingestion limits (object size, timeouts, concurrency)
- Object store connection and bucket
- Telegram Bot API connection
- Catalog listing sources
- HTTP entry point

Environment variables ARE supported using ${VAR_NAME} syntax in YAML files.
Secrets are additionally read from SUPABASE_URL, SUPABASE_SERVICE_ROLE_KEY,
SUPABASE_BUCKET and TELEGRAM_API_KEY, which take precedence over the file.
"""

import json
import logging
import os
import re
import sys
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

logger = logging.getLogger(__name__)

MIB = 1024 * 1024

DEFAULT_CATALOG_SOURCES: Dict[int, str] = {
    0: "https://tlgrm.eu/stickers",
    1: "https://combot.org/stickers",
}

DEFAULT_CATALOG_EXCLUDE = frozenset({"trending", "top30"})

STORAGE_BACKENDS = ("supabase", "local")


def load_yaml(path: Path) -> Dict[str, Any]:
    """Load YAML file and return dict."""
    if not path.exists():
        return {}
    with open(path, "r") as f:
        return yaml.safe_load(f) or {}


def _expand_env_vars(data: Any) -> Any:
    """Recursively expand ${VAR_NAME} and ${VAR_NAME:-default} environment variables in config data."""
    if isinstance(data, dict):
        return {key: _expand_env_vars(value) for key, value in data.items()}
    elif isinstance(data, list):
        return [_expand_env_vars(item) for item in data]
    elif isinstance(data, str):
        pattern = r"\$\{([^}:]+)(?::-(([^}]*))?)?\}"

        def replacer(match):
            var_name = match.group(1)
            default_value = match.group(2) if match.group(2) is not None else match.group(0)
            return os.getenv(var_name, default_value)

        return re.sub(pattern, replacer, data)
    else:
        return data


def _deep_merge(base: Dict[str, Any], overlay: Dict[str, Any]) -> Dict[str, Any]:
    """Deep merge overlay into base dict."""
    result = base.copy()
    for key, value in overlay.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value
    return result


# Default config file: config/config.yaml next to this module
DEFAULT_CONFIG_FILE = Path(__file__).parent / "config.yaml"


@dataclass
class IngestConfig:
    """Explicit configuration handed to the orchestrator, gateway and providers.

    Configuration structure (config.yaml):
        ingest:    {max_object_size_mb, fetch_timeout_seconds, concurrency_limit, run_timeout_seconds}
        storage:   {backend, url, service_key, bucket, local_path}
        telegram:  {api_url, token, timeout_seconds}
        catalog:   {sources: {0: url, 1: url}, exclude: [...], timeout_seconds}
        server:    {host, port}
    """

    # =========================================================================
    # INGESTION LIMITS
    # =========================================================================
    max_object_size: int = 50 * MIB
    fetch_timeout_seconds: float = 30.0
    concurrency_limit: int = 16
    run_timeout_seconds: Optional[float] = None  # None = no cap beyond per-asset timeout

    # =========================================================================
    # OBJECT STORE
    # =========================================================================
    storage_backend: str = "supabase"
    storage_url: str = ""
    storage_key: str = ""
    bucket: str = "telegram-stickers"
    local_storage_path: str = "stickers_store"

    # =========================================================================
    # TELEGRAM BOT API
    # =========================================================================
    telegram_api_url: str = "https://api.telegram.org"
    telegram_token: str = ""
    api_timeout_seconds: float = 30.0

    # =========================================================================
    # CATALOG SOURCES
    # =========================================================================
    catalog_sources: Dict[int, str] = field(default_factory=lambda: dict(DEFAULT_CATALOG_SOURCES))
    catalog_exclude: frozenset = DEFAULT_CATALOG_EXCLUDE
    catalog_timeout_seconds: float = 30.0

    # =========================================================================
    # HTTP ENTRY POINT
    # =========================================================================
    server_host: str = "0.0.0.0"
    server_port: int = 8080

    def validate(self) -> None:
        """Raise ValueError describing every invalid setting."""
        errors = []

        for name in ("max_object_size", "concurrency_limit", "server_port"):
            if getattr(self, name) <= 0:
                errors.append(f"{name} must be positive, got {getattr(self, name)}")

        for name in ("fetch_timeout_seconds", "api_timeout_seconds", "catalog_timeout_seconds"):
            if getattr(self, name) <= 0:
                errors.append(f"{name} must be positive, got {getattr(self, name)}")

        if self.run_timeout_seconds is not None and self.run_timeout_seconds <= 0:
            errors.append(f"run_timeout_seconds must be positive or null, got {self.run_timeout_seconds}")

        if self.storage_backend not in STORAGE_BACKENDS:
            errors.append(
                f"storage_backend must be one of {', '.join(STORAGE_BACKENDS)}, got {self.storage_backend!r}"
            )
        elif self.storage_backend == "supabase" and not (self.storage_url and self.storage_key):
            errors.append("supabase storage requires SUPABASE_URL and SUPABASE_SERVICE_ROLE_KEY")

        if not self.bucket:
            errors.append("bucket must not be empty")

        if not self.catalog_sources:
            errors.append("at least one catalog source is required")

        if errors:
            raise ValueError("Invalid configuration:\n  - " + "\n  - ".join(errors))


def _build_config(data: Dict[str, Any]) -> IngestConfig:
    ingest = data.get("ingest", {})
    storage = data.get("storage", {})
    telegram = data.get("telegram", {})
    catalog = data.get("catalog", {})
    server = data.get("server", {})

    max_size_mb = ingest.get("max_object_size_mb")
    run_timeout = ingest.get("run_timeout_seconds")

    sources = catalog.get("sources")
    catalog_sources = (
        {int(k): str(v) for k, v in sources.items()} if sources else dict(DEFAULT_CATALOG_SOURCES)
    )
    exclude = catalog.get("exclude")

    return IngestConfig(
        max_object_size=int(float(max_size_mb) * MIB) if max_size_mb is not None else 50 * MIB,
        fetch_timeout_seconds=float(ingest.get("fetch_timeout_seconds", 30)),
        concurrency_limit=int(ingest.get("concurrency_limit", 16)),
        run_timeout_seconds=float(run_timeout) if run_timeout not in (None, "") else None,
        storage_backend=storage.get("backend", "supabase"),
        storage_url=os.getenv("SUPABASE_URL") or storage.get("url", ""),
        storage_key=os.getenv("SUPABASE_SERVICE_ROLE_KEY") or storage.get("service_key", ""),
        bucket=os.getenv("SUPABASE_BUCKET") or storage.get("bucket", "telegram-stickers"),
        local_storage_path=storage.get("local_path", "stickers_store"),
        telegram_api_url=telegram.get("api_url", "https://api.telegram.org"),
        telegram_token=os.getenv("TELEGRAM_API_KEY") or telegram.get("token", ""),
        api_timeout_seconds=float(telegram.get("timeout_seconds", 30)),
        catalog_sources=catalog_sources,
        catalog_exclude=frozenset(exclude) if exclude is not None else DEFAULT_CATALOG_EXCLUDE,
        catalog_timeout_seconds=float(catalog.get("timeout_seconds", 30)),
        server_host=server.get("host", "0.0.0.0"),
        server_port=int(server.get("port", 8080)),
    )


def load_config(
    config_path: Optional[Path] = None,
    overrides: Optional[Dict[str, Any]] = None,
) -> IngestConfig:
    """Load configuration from config.yaml, apply overrides and environment, then validate.

    A missing file is not an error: defaults plus environment variables are used.
    """
    if config_path is None:
        config_path = DEFAULT_CONFIG_FILE

    if config_path.exists():
        logger.info(f"Loading configuration from file: {config_path}")
    else:
        logger.info(f"Configuration file not found, using defaults: {config_path}")

    yaml_data = _expand_env_vars(load_yaml(config_path))

    if overrides:
        logger.debug(f"Applying overrides: {list(overrides.keys())}")
        yaml_data = _deep_merge(yaml_data, overrides)

    config = _build_config(yaml_data)

    if not config.telegram_token:
        logger.warning("Telegram API token not configured")

    logger.debug("Configuration loaded successfully:")
    logger.debug(f"  - Storage backend: {config.storage_backend}")
    logger.debug(f"  - Bucket: {config.bucket}")
    logger.debug(f"  - Concurrency limit: {config.concurrency_limit}")

    config.validate()
    return config


def _redacted(config: IngestConfig) -> Dict[str, Any]:
    data = asdict(config)
    for secret in ("storage_key", "telegram_token"):
        if data.get(secret):
            data[secret] = "***"
    data["catalog_exclude"] = sorted(data["catalog_exclude"])
    return data


def _cli_main() -> int:
    """CLI entry point for config validation and debugging."""
    import argparse

    parser = argparse.ArgumentParser(description="Sticker Pipeline Configuration Tool")
    parser.add_argument("--config", type=Path, help="Path to config.yaml")
    parser.add_argument("--json", action="store_true", help="Output in JSON format")
    args = parser.parse_args()

    logging.basicConfig(level=logging.INFO, format="%(levelname)s: %(message)s")

    try:
        config = load_config(config_path=args.config)
    except ValueError as e:
        if args.json:
            print(json.dumps({"error": str(e)}))
        else:
            print(f"✗ Validation error: {e}", file=sys.stderr)
        return 1

    if args.json:
        print(json.dumps({"validation": {"passed": True}, "config": _redacted(config)}, indent=2))
    else:
        print("✓ Configuration validation passed")
        print(yaml.dump(_redacted(config), default_flow_style=False, sort_keys=False))
    return 0


if __name__ == "__main__":
    sys.exit(_cli_main())
