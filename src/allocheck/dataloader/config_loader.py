# src/allocheck/dataloader/config_loader.py
from __future__ import annotations

from collections.abc import Mapping
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from allocheck.errors import ConfigError
from allocheck.schemas.models import Config


class ConfigLoader:
    """
    @brief
    Loader responsible for reading and validating the engine configuration.

    @details
    Reads YAML from disk, validates it against the pydantic `Config` schema
    and resolves relative paths (`dataset_json`, `output_dir`) against the
    directory holding the config file. All failure modes surface as
    structured `ConfigError` instances.
    """

    def load(self, path: Path | None = None) -> Config:
        """
        @brief
        Load and validate configuration from a YAML file.

        @details
        Without a path the built-in defaults are returned, matching the
        behavior of the host application when no config is supplied.

        @params
            path : Path | None
                Filesystem path to configuration file (.yaml or .yml).

        @returns
            Validated Config instance.

        @raises
            ConfigError
                Raised if file is missing, malformed, or fails schema validation.
        """
        if path is None:
            return Config()

        # (1) Read and parse YAML configuration file
        data = self._read_yaml(path)

        # (2) Validate mapping against the schema, then anchor relative paths
        cfg = self._validate(data)
        return self._resolve_paths(cfg, path.parent)

    def _read_yaml(self, path: Path) -> dict[str, Any]:
        """
        @brief
        Read YAML file into a mapping with strict checks.

        @raises
            ConfigError
                Raised on invalid path type, missing file, wrong extension,
                I/O error, syntax error, empty file, or non-mapping structure.
        """
        if not isinstance(path, Path):
            raise ConfigError(
                message=f"Invalid path type: expected pathlib.Path, got {type(path).__name__}",
                source="ConfigLoader._read_yaml",
                suggested_action="Pass a pathlib.Path object pointing to config.yaml.",
            )

        if not path.exists():
            raise ConfigError(
                message=f"Configuration file not found: {path}",
                source="ConfigLoader._read_yaml",
                suggested_action="Ensure config.yaml exists or omit --config to use defaults.",
            )

        if path.suffix.lower() not in {".yaml", ".yml"}:
            raise ConfigError(
                message=f"Invalid configuration file extension: {path.suffix}",
                source="ConfigLoader._read_yaml",
                suggested_action="Use .yaml or .yml extension for configuration files.",
            )

        try:
            with path.open("r", encoding="utf-8") as f:
                data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigError(
                message=f"YAML parsing failed: {e}",
                source="ConfigLoader._read_yaml",
                suggested_action="Fix YAML syntax/indentation.",
            ) from e
        except OSError as e:
            raise ConfigError(
                message=f"Unable to read configuration file: {e}",
                source="ConfigLoader._read_yaml",
                suggested_action="Check file permissions and path accessibility.",
            ) from e

        if data is None:
            raise ConfigError(
                message="Configuration file is empty.",
                source="ConfigLoader._read_yaml",
                suggested_action="Populate config.yaml or omit --config to use defaults.",
            )

        if not isinstance(data, Mapping):
            raise ConfigError(
                message="Configuration root must be a mapping (key: value pairs).",
                source="ConfigLoader._read_yaml",
                suggested_action="Ensure top-level YAML structure uses key: value mappings.",
            )

        return dict(data)

    def _validate(self, data: dict[str, Any]) -> Config:
        """
        @brief
        Validate the parsed mapping via the pydantic schema.

        @details
        Pydantic errors are flattened into `location: message` pairs so the
        resulting ConfigError names every offending key at once.
        """
        try:
            return Config.model_validate(data)
        except ValidationError as e:
            problems = "; ".join(
                f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in e.errors()
            )
            raise ConfigError(
                message=f"Invalid configuration structure: {problems}",
                source="ConfigLoader._validate",
                suggested_action=(
                    "Check field names, types, and column names in config.yaml. "
                    "Remove unknown keys (extra fields are forbidden)."
                ),
            ) from e

    def _resolve_paths(self, cfg: Config, base: Path) -> Config:
        # paths written in config.yaml are relative to the file, defaults to the CWD
        updates: dict[str, str] = {}
        for name in ("dataset_json", "output_dir"):
            if name not in cfg.model_fields_set:
                continue
            value = getattr(cfg, name)
            if value and not Path(value).is_absolute():
                updates[name] = (base / value).as_posix()
        return cfg.model_copy(update=updates) if updates else cfg


__all__ = ["ConfigLoader"]
