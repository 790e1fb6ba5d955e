"""Context variables for structured logging."""

from contextvars import ContextVar
from typing import Dict, Optional

_run_id: ContextVar[str] = ContextVar("run_id", default="")
_stage_name: ContextVar[str] = ContextVar("stage_name", default="")
_collection_id: ContextVar[str] = ContextVar("collection_id", default="")


def set_log_context(
    run_id: Optional[str] = None,
    stage: Optional[str] = None,
    collection_id: Optional[str] = None,
) -> None:
    if run_id is not None:
        _run_id.set(run_id)
    if stage is not None:
        _stage_name.set(stage)
    if collection_id is not None:
        _collection_id.set(collection_id)


def get_log_context() -> Dict[str, str]:
    return {
        "run_id": _run_id.get(),
        "stage": _stage_name.get(),
        "collection_id": _collection_id.get(),
    }


def clear_log_context() -> None:
    _run_id.set("")
    _stage_name.set("")
    _collection_id.set("")
