"""File access for CLI commands: the local record store and JSON inputs."""

import json
from pathlib import Path
from typing import Any, Dict, Optional

from crm_engine.cli.error_handlers import InputFileError, StoreFileError
from crm_engine.config.settings import get_config
from crm_engine.services.record_store import InMemoryRecordStore

DEFAULT_STORE_FILE = "crm_store.json"


def resolve_store_path(store_file: Optional[str]) -> Path:
    """Store path from the option, the ``CRM_STORE_FILE`` setting, or the default."""
    return Path(store_file or get_config().store_file or DEFAULT_STORE_FILE)


def load_store(path: Path) -> InMemoryRecordStore:
    """Load the store; a missing file yields an empty store.

    Raises:
        StoreFileError: If the file exists but cannot be read
    """
    try:
        return InMemoryRecordStore.load(path)
    except (OSError, ValueError) as e:
        raise StoreFileError(
            f"Could not load record store from {path}: {e}",
            recovery_hint="Check that the file is a store written by crm-engine, or remove it",
        ) from e


def save_store(store: InMemoryRecordStore, path: Path) -> None:
    """Save the store.

    Raises:
        StoreFileError: If the file cannot be written
    """
    try:
        store.save(path)
    except (OSError, TypeError, ValueError) as e:
        raise StoreFileError(f"Could not save record store to {path}: {e}") from e


def read_json_object(path: str) -> Dict[str, Any]:
    """Read a JSON object from a file.

    Raises:
        InputFileError: If the file cannot be read or holds no JSON object
        json.JSONDecodeError: If the file is not valid JSON
    """
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except OSError as e:
        raise InputFileError(f"Could not read {path}: {e}") from e
    if not isinstance(data, dict):
        raise InputFileError(
            f"{path} must contain a JSON object",
            recovery_hint='Wrap the content in braces, e.g. {"action": "help"}',
        )
    return data
