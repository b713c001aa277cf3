import os
from pathlib import Path

import yaml
from pydantic import ValidationError

from coursecore.rules.models import Rules

DEFAULT_RULES_PATH = Path(__file__).resolve().parent.parent.parent / "rules.yaml"
RULES_PATH_ENV = "COURSECORE_RULES_PATH"


def resolve_rules_path(path: str | Path | None = None) -> Path:
    """Explicit path, else $COURSECORE_RULES_PATH, else the bundled rules.yaml."""
    if path:
        return Path(path)
    return Path(os.environ.get(RULES_PATH_ENV) or DEFAULT_RULES_PATH)


def load_rules(path: Path) -> Rules:
    """
    Read rules.yaml and validate it against the Rules schema.

    FileNotFoundError if the file is missing; ValueError for broken YAML, a
    non-mapping document or a schema violation. Callers fail fast on either.
    """
    if not path.exists():
        raise FileNotFoundError(f"Rules file not found at: {path}")

    try:
        data = yaml.safe_load(path.read_text())
    except yaml.YAMLError as e:
        raise ValueError(f"Invalid YAML syntax in rules file: {e}") from e

    if not isinstance(data, dict):
        raise ValueError(f"Rules file {path} must contain a mapping at the top level")

    try:
        return Rules.model_validate(data)
    except ValidationError as e:
        raise ValueError(f"Rules validation failed:\n{e}") from e
