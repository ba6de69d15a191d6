# src/allocheck/dataloader/config_loader.py
from __future__ import annotations

import logging
from collections.abc import Mapping
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError as PydanticValidationError

from allocheck.errors import ConfigError
from allocheck.schemas.models import Config

logger = logging.getLogger(__name__)

_YAML_SUFFIXES = {".yaml", ".yml"}


class ConfigLoader:
    """
    @brief
    Reads config.yaml into a validated `Config`.

    @details
    YAML is parsed with `yaml.safe_load`, checked to be a non-empty mapping,
    then validated by the pydantic `Config` model (unknown keys rejected).
    Relative `input_paths` are resolved against the directory holding the
    config file so that a config can travel together with its inputs.
    Every failure surfaces as `ConfigError`.
    """

    def load(self, path: Path | str) -> Config:
        """
        @brief
        Load, validate and post-process a configuration file.

        @params
            path : Path | str
                Location of a .yaml / .yml file.

        @returns
            Validated Config with defaults applied.

        @raises
            ConfigError
                Missing file, wrong extension, YAML syntax error, empty or
                non-mapping document, or schema violation.
        """
        path = Path(path)
        data = self._read_yaml(path)
        cfg = self._validate(data)
        cfg = self._resolve_inputs(cfg, path.parent)
        logger.info("Config loaded from %s (%d input path(s))", path, len(cfg.input_paths))
        return cfg

    def _read_yaml(self, path: Path) -> dict[str, Any]:
        # (1) Existence and extension
        if not path.is_file():
            raise ConfigError(
                message=f"Configuration file not found: {path}",
                source="ConfigLoader._read_yaml",
                suggested_action="Check the --config path.",
            )
        if path.suffix.lower() not in _YAML_SUFFIXES:
            raise ConfigError(
                message=f"Invalid configuration file extension: {path.suffix or '<none>'}",
                source="ConfigLoader._read_yaml",
                suggested_action="Rename the file to .yaml or .yml.",
            )

        # (2) Parse
        try:
            with path.open("r", encoding="utf-8") as f:
                data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigError(
                message=f"YAML parsing failed: {e}",
                source="ConfigLoader._read_yaml",
                suggested_action="Fix YAML syntax or indentation.",
            ) from e
        except OSError as e:
            raise ConfigError(
                message=f"Unable to read configuration file: {e}",
                source="ConfigLoader._read_yaml",
                suggested_action="Check file permissions.",
            ) from e

        # (3) Top-level shape
        if data is None:
            raise ConfigError(
                message="Configuration file is empty.",
                source="ConfigLoader._read_yaml",
                suggested_action="Add at least `output_dir` or `input_paths`.",
            )
        if not isinstance(data, Mapping):
            raise ConfigError(
                message=f"Configuration root must be a mapping, got {type(data).__name__}.",
                source="ConfigLoader._read_yaml",
                suggested_action="Use `key: value` pairs at the top level.",
            )
        return dict(data)

    def _validate(self, data: dict[str, Any]) -> Config:
        try:
            return Config.model_validate(data)
        except PydanticValidationError as e:
            raise ConfigError(
                message=f"Invalid configuration structure: {e}",
                source="ConfigLoader._validate",
                suggested_action=(
                    "Check field names, types and bounds. Unknown keys are not allowed."
                ),
            ) from e

    def _resolve_inputs(self, cfg: Config, base_dir: Path) -> Config:
        resolved = [
            p if Path(p).is_absolute() else str(base_dir / p) for p in cfg.input_paths
        ]
        return cfg.model_copy(update={"input_paths": resolved})


__all__ = ["ConfigLoader"]
