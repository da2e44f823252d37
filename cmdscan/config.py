# cmdscan: external command auditor for shell scripts
# Copyright (C) 2026 cmdscan Project Contributors
#
# This program is free software: you can redistribute it and/or modify
# it under the terms of the GNU Affero General Public License as published
# by the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.
#
# This program is distributed in the hope that it will be useful,
# but WITHOUT ANY WARRANTY; without even the implied warranty of
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE. See the
# GNU Affero General Public License for more details.
#
# You should have received a copy of the GNU Affero General Public License
# along with this program. If not, see <https://www.gnu.org/licenses/>.

"""User configuration.

Settings come from a YAML file, looked up in this order:

1. the path given explicitly (``cmdscan scan --config FILE``)
2. the path in the ``CMDSCAN_CONFIG`` environment variable
3. ``~/.cmdscan/config.yaml``

A missing file in (2) or (3) means defaults. Example::

    max_size: 100000
    platform: linux
    escape_mode: strict
    extra_names: [git, jq]
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Optional

import yaml
from pydantic import BaseModel, Field, ValidationError, model_validator

from cmdscan.errors import InputError
from cmdscan.scanner.lexer import EscapeMode, ScanOptions

logger = logging.getLogger(__name__)

CONFIG_DIR = Path.home() / ".cmdscan"
CONFIG_FILE = CONFIG_DIR / "config.yaml"
CONFIG_ENV_VAR = "CMDSCAN_CONFIG"

DEFAULT_MAX_SIZE = 50000


class ScanSettings(BaseModel):
    """Everything a scan can be configured with."""

    min_size: int = Field(default=1, ge=0)
    max_size: int = Field(default=DEFAULT_MAX_SIZE, ge=1)
    platform: str = "macos"
    escape_mode: EscapeMode = EscapeMode.LEGACY
    extra_names: list[str] = Field(default_factory=list)
    reference_sets: Optional[Path] = None

    @model_validator(mode="after")
    def _check_bounds(self) -> ScanSettings:
        if self.min_size > self.max_size:
            raise ValueError(f"min_size ({self.min_size}) exceeds max_size ({self.max_size})")
        return self

    def scan_options(self, **overrides: object) -> ScanOptions:
        """Build lexer options from these settings plus per-run overrides."""
        return ScanOptions(escape_mode=self.escape_mode, **overrides)


def default_config_path() -> Path:
    env_path = os.environ.get(CONFIG_ENV_VAR)
    if env_path:
        return Path(env_path).expanduser()
    return CONFIG_FILE


def load_settings(path: Optional[Path] = None) -> ScanSettings:
    """Load settings from YAML.

    Raises:
        InputError: an explicit ``path`` does not exist, or the file cannot
            be parsed or holds invalid values.
    """
    explicit = path is not None
    config_path = Path(path).expanduser() if path is not None else default_config_path()

    if not config_path.exists():
        if explicit:
            raise InputError("config file not found", config_path)
        logger.debug("No config at %s, using defaults", config_path)
        return ScanSettings()

    try:
        with open(config_path, encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError) as e:
        raise InputError(f"cannot read config: {e}", config_path) from e

    if not isinstance(data, dict):
        raise InputError("config must be a mapping", config_path)

    try:
        settings = ScanSettings(**data)
    except ValidationError as e:
        raise InputError(f"invalid config: {e}", config_path) from e

    if settings.reference_sets is not None and not settings.reference_sets.is_absolute():
        # Relative paths are relative to the config file, not the cwd.
        settings = settings.model_copy(
            update={"reference_sets": config_path.parent / settings.reference_sets}
        )
    logger.debug("Loaded config from %s", config_path)
    return settings
