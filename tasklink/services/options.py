from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Mapping

from pydantic import ValidationError

from tasklink.schemas.options import ExtensionOptions

logger = logging.getLogger(__name__)


class OptionsStore:
    """Extension preferences persisted as one JSON blob on disk."""

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path).expanduser()
        self._options: ExtensionOptions | None = None

    def load_options(self) -> ExtensionOptions:
        if self._options is None:
            self._options = self._read()
        return self._options.model_copy(deep=True)

    def save_options(self, options: ExtensionOptions | Mapping[str, Any]) -> ExtensionOptions:
        parsed = options if isinstance(options, ExtensionOptions) else ExtensionOptions.model_validate(options)
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(parsed.model_dump_json(indent=2), encoding="utf-8")
        self._options = parsed.model_copy(deep=True)
        return parsed

    def update_options(self, changes: Mapping[str, Any]) -> ExtensionOptions:
        merged = self.load_options().model_dump()
        merged.update({k: v for k, v in changes.items() if v is not None})
        return self.save_options(merged)

    def reset_options(self) -> ExtensionOptions:
        return self.save_options(ExtensionOptions())

    def _read(self) -> ExtensionOptions:
        if not self.path.exists():
            return ExtensionOptions()
        try:
            raw = json.loads(self.path.read_text(encoding="utf-8") or "{}")
            if not isinstance(raw, dict):
                raise ValueError("options file must hold a JSON object")
            return ExtensionOptions.model_validate(raw)
        except (OSError, ValueError, ValidationError):
            logger.warning("Ignoring unreadable options file %s", self.path, exc_info=True)
            return ExtensionOptions()
