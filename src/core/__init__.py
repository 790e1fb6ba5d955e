"""
Core library: Reusable, infrastructure-agnostic components.

Modules:
    logging     - Structured JSON logging with run correlation IDs
    errors      - Error classification and exception hierarchy
    download    - Async HTTP download logic (decoupled from storage layer)
    media       - Magic-byte format sniffing for sticker payloads

Design Principles:
    - No dependencies on a specific object store or upstream API
    - All modules are independently testable
    - Async-first where applicable
"""

from .types import ErrorCategory

__version__ = "0.1.0"

__all__ = ["ErrorCategory"]
