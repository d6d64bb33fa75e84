from typing import Optional

from pydantic import BaseModel, Field

from folio.utils.paths import get_workspace_paths

_paths = get_workspace_paths()


class Settings(BaseModel):
    # Intake (local Ollama)
    ollama_url: str = "http://localhost:11434/api/generate"
    model_name: str = "llama3.2"
    timeout_seconds: int = 200

    # Export
    cooldown_seconds: float = Field(5.0, ge=0)
    export_dir: str = _paths["export_dir"]
    preview_dir: str = _paths["preview_dir"]

    # Admin: sha256 hex digest of the admin password
    admin_password_hash: Optional[str] = None

    log_level: str = "INFO"
