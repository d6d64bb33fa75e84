# folio/utils/paths.py
import os
import re

BASE_DIR = os.getcwd()


def get_workspace_paths(base_dir=None):
    """
    Returns a dictionary of the default locations used by the console.
    """
    base = base_dir or BASE_DIR
    return {
        # Configs
        "config_file": os.path.join(base, "config", "folio.yaml"),

        # Data
        "records_dir": os.path.join(base, "data", "records"),
        "preview_dir": os.path.join(base, "data", "preview"),
        "export_dir": os.path.join(base, "data", "exports"),
    }


def ensure_dirs(*dirs):
    """Creates necessary directories if they don't exist."""
    for d in dirs:
        os.makedirs(d, exist_ok=True)


def sanitize_filename(text):
    """
    Turns "Ada Lovelace (Analyst)" into "Ada_Lovelace_Analyst".
    Removes special chars and spaces.
    """
    if not text:
        return "portfolio"
    clean = re.sub(r'[^\w\-_]', '_', text)
    clean = re.sub(r'_+', '_', clean)
    return clean.strip('_') or "portfolio"
