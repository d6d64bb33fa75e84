import json
import logging
import os
from pathlib import Path
from typing import Dict

from jinja2 import Environment, FileSystemLoader, StrictUndefined, select_autoescape

from folio.export.context import build_context
from folio.logic.validator import validate
from folio.models.errors import CompilationError, FieldError
from folio.models.portfolio import PortfolioRecord

logger = logging.getLogger(__name__)

# -----------------------------------------------------------------------------
# JINJA SETUP
# -----------------------------------------------------------------------------

TEMPLATES_DIR = Path(__file__).resolve().parent / "templates"

env = Environment(
    loader=FileSystemLoader(str(TEMPLATES_DIR)),
    autoescape=select_autoescape(["html", "xml"]),
    trim_blocks=True,
    lstrip_blocks=True,
    keep_trailing_newline=True,
    undefined=StrictUndefined,
)

# bundle path -> template name
PAGES = {
    "index.html": "index.html",
    "assets/styles.css": "styles.css",
    "assets/script.js": "script.js",
    "README.md": "README.md",
}

RECORD_PATH = "data/portfolio.json"


def render_guide(username: str) -> str:
    return env.get_template("README.md").render(username=username)


def record_json(record: PortfolioRecord) -> str:
    return json.dumps(record.to_wire(), indent=2, sort_keys=True, ensure_ascii=False) + "\n"


# -----------------------------------------------------------------------------
# COMPILER
# -----------------------------------------------------------------------------

def compile_bundle(record: PortfolioRecord, exported: bool = True) -> Dict[str, bytes]:
    """
    Compiles a record into {relative path: file bytes} for a static site.

    Pure and deterministic: the same record always yields byte-identical
    output. `exported=False` renders the preview variant, which carries the
    admin and download controls the shipped site must not have.
    Raises CompilationError, never returns a partial mapping.
    """
    result = validate(record)
    if not result.ok:
        logger.error("Refusing to compile an invalid record (%d errors)", len(result.errors))
        raise CompilationError(result.errors)
    record = result.record

    try:
        context, media = build_context(record, exported=exported)
    except ValueError as e:
        raise CompilationError([FieldError(path="", reason=str(e))]) from e

    files: Dict[str, bytes] = {}
    for path, template_name in PAGES.items():
        if template_name == "README.md":
            text = render_guide(context["github_username"])
        else:
            text = env.get_template(template_name).render(**context)
        files[path] = text.encode("utf-8")

    files[RECORD_PATH] = record_json(record).encode("utf-8")
    files[".nojekyll"] = b""
    files.update(media)

    logger.debug("Compiled %d files (exported=%s)", len(files), exported)
    return dict(sorted(files.items()))


def write_preview(record: PortfolioRecord, directory: str) -> str:
    """Writes the preview variant to `directory`; returns the index.html path."""
    files = compile_bundle(record, exported=False)
    for rel_path, content in files.items():
        target = os.path.join(directory, rel_path)
        os.makedirs(os.path.dirname(target), exist_ok=True)
        with open(target, "wb") as f:
            f.write(content)
    return os.path.join(directory, "index.html")
