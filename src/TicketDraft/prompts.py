from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Dict, List

import yaml
from pydantic import BaseModel, ConfigDict

logger = logging.getLogger(__name__)

DEFAULT_PROMPT_DIR = Path(__file__).parent / "templates"
SOURCE_TYPES = ("figma", "log", "prompt")
DECOMPOSITION = "decomposition"

_PLACEHOLDER_RE = re.compile(r"\{\{\s*(\w+)\s*\}\}")


class PromptTemplate(BaseModel):
    model_config = ConfigDict(extra="forbid")

    description: str = ""
    inputs: Dict[str, str] = {}
    template: str

    def render(self, **values: str) -> str:
        """Fill ``{{name}}`` placeholders. Declared inputs that are not given render empty."""

        def substitute(match: re.Match) -> str:
            key = match.group(1)
            if key in values:
                return str(values[key])
            if key in self.inputs:
                return ""
            return match.group(0)

        return _PLACEHOLDER_RE.sub(substitute, self.template).strip()


class PromptStyle(BaseModel):
    model_config = ConfigDict(extra="forbid")

    name: str
    description: str = ""
    templates: Dict[str, PromptTemplate]


class PromptLibrary:
    def __init__(self, directory: str | Path = DEFAULT_PROMPT_DIR) -> None:
        self._styles: Dict[str, PromptStyle] = {}
        self._load_all(Path(directory))
        logger.debug("Loaded %d prompt styles from %s", len(self._styles), directory)

    def styles(self) -> List[str]:
        return sorted(self._styles)

    def get(self, style: str, name: str) -> PromptTemplate:
        try:
            return self._styles[style].templates[name]
        except KeyError:
            raise KeyError(f"Prompt '{name}' for style '{style}' not found") from None

    def render(self, style: str, name: str, **values: str) -> str:
        return self.get(style, name).render(**values)

    def _load_all(self, directory: Path) -> None:
        for file_path in sorted(directory.glob("*.yaml")):
            with open(file_path, encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
            style = PromptStyle(**data)
            self._styles[style.name] = style
