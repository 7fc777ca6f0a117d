"""Validation options and logging setup."""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path

from pydantic import BaseModel, Field

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


class ValidationOptions(BaseModel):
    """Knobs for template validation runs."""

    max_tags: int = 50
    warnings_as_errors: bool = False
    extra_service_tags: list[str] = Field(default_factory=list)


def load_options(path: str | Path | None = None) -> ValidationOptions:
    """Load options from a JSON file, ATAKORA_OPTIONS_PATH, or defaults."""
    opts_path = path or os.environ.get("ATAKORA_OPTIONS_PATH")
    if opts_path and Path(opts_path).exists():
        logger.debug("Loading validation options from %s", opts_path)
        return ValidationOptions.model_validate(json.loads(Path(opts_path).read_text()))
    return ValidationOptions()


def configure_logging() -> None:
    """Configure root logging for scripts; DEBUG when ATAKORA_DEV_MODE is set."""
    log_level = logging.DEBUG if os.environ.get("ATAKORA_DEV_MODE") else logging.INFO
    logging.basicConfig(level=log_level, format=LOG_FORMAT)
