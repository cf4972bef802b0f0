"""Per-run checker options and the JSON config-file loader.

The config file format::

    {
      "options": {"onsite_only": true, "no_toc": false},
      "source_file_includes": ["^lib/"],
      "source_file_omits": ["^js/", "Report"]
    }

Every key is optional.
"""

from __future__ import annotations

import json
import re
from pathlib import Path

from pydantic import BaseModel, Field, ValidationError, field_validator

from linkcheck.errors import ConfigError


# ---------------------------------------------------------------------------
# Schemas
# ---------------------------------------------------------------------------

class CheckOptions(BaseModel):
    onsite_only: bool = False
    no_toc: bool = False
    source_file_includes: list[str] = Field(default_factory=list)
    source_file_omits: list[str] = Field(default_factory=list)

    @field_validator("source_file_includes", "source_file_omits")
    @classmethod
    def _patterns_compile(cls, value: list[str]) -> list[str]:
        for pattern in value:
            try:
                re.compile(pattern)
            except re.error as exc:
                raise ValueError(f"invalid regular expression {pattern!r}: {exc}") from exc
        return value

    def merged(
        self,
        *,
        onsite_only: bool = False,
        no_toc: bool = False,
        includes: list[str] | None = None,
        omits: list[str] | None = None,
    ) -> CheckOptions:
        """Return a copy with command-line values layered on top.

        Boolean flags can only switch an option on; patterns are appended.
        """
        return CheckOptions(
            onsite_only=self.onsite_only or onsite_only,
            no_toc=self.no_toc or no_toc,
            source_file_includes=[*self.source_file_includes, *(includes or [])],
            source_file_omits=[*self.source_file_omits, *(omits or [])],
        )


class _ConfigFile(BaseModel):
    options: dict[str, bool] = Field(default_factory=dict)
    source_file_includes: list[str] = Field(default_factory=list)
    source_file_omits: list[str] = Field(default_factory=list)


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def load_options(path: str | Path) -> CheckOptions:
    """Read *path* (JSON) and return the :class:`CheckOptions` it describes.

    Raises:
        ConfigError: If the file cannot be read, is not valid JSON, or does
            not match the expected schema.
    """
    path = Path(path)
    try:
        raw = json.loads(path.read_text(encoding="utf-8"))
    except OSError as exc:
        raise ConfigError(f"Cannot read config file {str(path)!r}: {exc}") from exc
    except json.JSONDecodeError as exc:
        raise ConfigError(f"Config file {str(path)!r} is not valid JSON: {exc}") from exc

    try:
        config = _ConfigFile.model_validate(raw)
        return CheckOptions(
            onsite_only=config.options.get("onsite_only", False),
            no_toc=config.options.get("no_toc", False),
            source_file_includes=config.source_file_includes,
            source_file_omits=config.source_file_omits,
        )
    except ValidationError as exc:
        raise ConfigError(f"Config file {str(path)!r} is invalid: {exc}") from exc
