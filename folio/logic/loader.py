import json
import logging
import os
from typing import Any, List, Optional, Tuple

import yaml

from folio.logic.auth import hash_password
from folio.logic.store import RecordStore
from folio.logic.validator import ValidationResult, validate
from folio.models.errors import FieldError
from folio.models.settings import Settings
from folio.utils.paths import get_workspace_paths

logger = logging.getLogger(__name__)

ENV_OVERRIDES = {
    "FOLIO_OLLAMA_URL": "ollama_url",
    "FOLIO_MODEL": "model_name",
    "FOLIO_LOG_LEVEL": "log_level",
    "FOLIO_EXPORT_DIR": "export_dir",
}


def read_data_file(path: str) -> Any:
    """Reads a .json or .yaml/.yml file into plain Python data."""
    with open(path, "r", encoding="utf-8") as f:
        if path.lower().endswith(".json"):
            return json.load(f)
        return yaml.safe_load(f)


def load_settings(path: Optional[str] = None) -> Settings:
    path = path or get_workspace_paths()["config_file"]
    data = {}
    if os.path.exists(path):
        data = read_data_file(path) or {}
        logger.debug("Loaded settings from %s", path)

    for env_name, key in ENV_OVERRIDES.items():
        if os.getenv(env_name):
            data[key] = os.getenv(env_name)
    # plain-text password in the environment wins over the stored hash
    if os.getenv("FOLIO_ADMIN_PASSWORD"):
        data["admin_password_hash"] = hash_password(os.getenv("FOLIO_ADMIN_PASSWORD"))

    return Settings(**data)


def load_record(path: str) -> ValidationResult:
    """Loads a record file (e.g. a bundle's data/portfolio.json) through the validator."""
    try:
        data = read_data_file(path)
    except (OSError, ValueError, yaml.YAMLError) as e:
        return ValidationResult(errors=[FieldError(path="", reason=f"could not read {path}: {e}")])
    return validate(data)


def load_messages(store: RecordStore, path: str) -> Tuple[int, List[FieldError]]:
    """
    Imports visitor messages (a list of {name, email, message, date}) into
    the store's inbox. Returns (imported count, errors for rejected entries).
    """
    data = read_data_file(path) or []
    if isinstance(data, dict):
        data = data.get("messages", [])

    imported, errors = 0, []
    for i, entry in enumerate(data):
        message, entry_errors = store.add_message(entry)
        if message is not None:
            imported += 1
        errors.extend(
            FieldError(path=f"{i}.{e.path}" if e.path else str(i), reason=e.reason)
            for e in entry_errors
        )
    return imported, errors
