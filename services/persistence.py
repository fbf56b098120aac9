# services/persistence.py
from __future__ import annotations

import json
import logging
import os
import shutil
import tempfile
import threading
from dataclasses import asdict, is_dataclass
from pathlib import Path
from typing import Any, Callable, Optional, Union

import jsonschema

from core.catalog import get_table
from core.errors import ConversionError, UnknownCategoryError, UnsupportedUnitError
from core.settings import ConverterSettings

log = logging.getLogger(__name__)

SETTINGS_FILE = "settings.json"

SETTINGS_SCHEMA: dict = {
    "type": "object",
    "required": ["version", "units"],
    "properties": {
        "version": {"type": "integer", "minimum": 0},
        "units": {
            "type": "object",
            "additionalProperties": {"type": "string", "minLength": 1},
        },
        "custom_units": {
            "type": "object",
            "additionalProperties": {
                "type": "object",
                "propertyNames": {"minLength": 1},
                "additionalProperties": {"type": "number", "exclusiveMinimum": 0},
            },
        },
    },
}


def _expand(path: Union[str, Path]) -> Path:
    return Path(os.path.expanduser(str(path))).resolve()


class ConfigError(RuntimeError):
    pass


class ConfigManager:
    """
    JSON persistence with:
    - Atomic writes (tempfile + os.replace)
    - Schema validation (jsonschema)
    - Versioning + simple migration hooks
    - Thread-safety across calls
    - Automatic backup (.bak) on write

    Typical use:
        cfg = ConfigManager()
        settings = cfg.load_settings()
        cfg.save_settings(settings)
    """

    def __init__(
        self,
        app_name: str = "unit_converter",
        base_dir: Optional[Union[str, Path]] = None,
    ):
        self._lock = threading.RLock()
        self.app_name = app_name
        self.base_dir = _expand(base_dir or Path.home() / f".{app_name}")
        self.base_dir.mkdir(parents=True, exist_ok=True)

    # ------------- public high-level helpers -------------

    def load_settings(self, *, on_corruption: str = "backup_then_reset") -> ConverterSettings:
        """
        Load settings.json. Besides the schema, every active unit and custom
        unit must resolve against the catalog; a file that does not is
        backed up (.invalid.bak) and reset, or raises ConfigError.
        """
        default = ConverterSettings().to_dict()
        data = self.load(
            SETTINGS_FILE,
            default=default,
            version=ConverterSettings.VERSION,
            schema=SETTINGS_SCHEMA,
            migrate=self._migrate_settings,
            on_corruption=on_corruption,
        )
        settings = ConverterSettings.from_dict(data)
        try:
            _check_units(settings)
        except (ConversionError, ValueError) as e:
            if on_corruption == "raise":
                raise ConfigError(f"Invalid units in {SETTINGS_FILE}: {e}") from e
            log.warning("ConfigManager: %s has invalid units (%s); resetting to defaults", SETTINGS_FILE, e)
            path = self._path(SETTINGS_FILE)
            with self._lock:
                self._backup_corrupt(path, suffix=".invalid.bak")
                self._atomic_write(path, default)
            return ConverterSettings.from_dict(default)
        return settings

    def save_settings(self, settings: Any) -> None:
        """
        Persist settings to settings.json.
        Accepts a ConverterSettings (with .to_dict), a dataclass, or a plain dict.
        """
        if hasattr(settings, "to_dict") and callable(getattr(settings, "to_dict")):
            payload = settings.to_dict()
        elif is_dataclass(settings):
            payload = asdict(settings)
        else:
            payload = settings

        if not isinstance(payload, dict):
            raise ConfigError("settings must be dict, dataclass, or model with to_dict().")

        payload = dict(payload)
        payload.setdefault("version", ConverterSettings.VERSION)
        payload.setdefault("custom_units", {})
        try:
            jsonschema.validate(instance=payload, schema=SETTINGS_SCHEMA)
        except jsonschema.ValidationError as e:
            raise ConfigError(f"Invalid settings: {e.message}") from e

        self.save(SETTINGS_FILE, payload)

    # ------------- generic API -------------

    def load(
        self,
        filename: str,
        *,
        default: Any,
        version: int,
        migrate: Optional[Callable[[dict, int, int], dict]] = None,
        schema: Optional[dict] = None,
        on_corruption: str = "backup_then_reset",  # or "raise"
    ) -> Any:
        """
        Load a JSON file with optional migration & schema validation.
        - default: returned if missing/corrupt (and written to disk)
        - version: current schema version
        - migrate: fn(old_data, old_version, new_version) -> new_data
        - schema: JSON schema the loaded data must satisfy
        - on_corruption: "backup_then_reset" | "raise"
        """
        path = self._path(filename)
        with self._lock:
            if not path.exists():
                self._atomic_write(path, default)
                return default

            try:
                data = self._read_json(path)
            except (OSError, ValueError) as e:
                if on_corruption == "raise":
                    raise ConfigError(f"Failed to read {path}: {e}") from e
                log.warning("ConfigManager: %s unreadable (%s); resetting to defaults", path, e)
                self._backup_corrupt(path)
                self._atomic_write(path, default)
                return default

            # Version / migration
            old_version = _version_of(data)
            if old_version != version:
                if migrate:
                    try:
                        data = migrate(data if isinstance(data, dict) else {}, old_version, version)
                    except Exception:
                        # If migration fails, reset to default to avoid bricking the app
                        log.exception("ConfigManager: migrating %s v%s -> v%s failed", filename, old_version, version)
                        self._backup_corrupt(path, suffix=".migrate.bak")
                        self._atomic_write(path, default)
                        return default
                else:
                    # No migration provided: assume breaking change → reset to default
                    self._backup_corrupt(path, suffix=f".v{old_version}.bak")
                    data = default
                # ensure target version is stamped
                if isinstance(data, dict):
                    data["version"] = version
                self._atomic_write(path, data)
                log.info("ConfigManager: %s upgraded v%s -> v%s", filename, old_version, version)

            if schema is not None:
                try:
                    jsonschema.validate(instance=data, schema=schema)
                except jsonschema.ValidationError as e:
                    if on_corruption == "raise":
                        raise ConfigError(f"Schema validation failed for {filename}: {e.message}") from e
                    log.warning("ConfigManager: schema validation failed for %s: %s", filename, e.message)
                    self._backup_corrupt(path, suffix=".invalid.bak")
                    self._atomic_write(path, default)
                    return default

            return data

    def save(self, filename: str, data: Any) -> None:
        """
        Save JSON with atomic replace and backup of previous file.
        Accepts dicts or dataclasses.
        """
        payload = asdict(data) if is_dataclass(data) else data
        if not isinstance(payload, (dict, list)):
            raise ConfigError("Only dict or list (or dataclass) can be saved as JSON.")
        path = self._path(filename)
        with self._lock:
            self._atomic_write(path, payload, make_backup=True)
        log.info("ConfigManager: saved %s", path)

    # ------------- internal utils -------------

    def _path(self, filename: str) -> Path:
        return self.base_dir / filename

    def _read_json(self, path: Path) -> Any:
        return json.loads(path.read_text(encoding="utf-8"))

    def _atomic_write(self, path: Path, data: Any, make_backup: bool = False) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        # Write to temp file first
        fd, tmp = tempfile.mkstemp(prefix=path.stem + ".", suffix=".tmp", dir=str(path.parent))
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(data, f, indent=2)
                f.flush()
                os.fsync(f.fileno())
            if path.exists() and make_backup:
                backup = path.with_suffix(path.suffix + ".bak")
                shutil.copy2(path, backup)
            os.replace(tmp, path)  # atomic on POSIX/NTFS
        finally:
            # If replace succeeded, tmp is gone.
            if os.path.exists(tmp):
                os.remove(tmp)

    def _backup_corrupt(self, path: Path, *, suffix: str = ".bak") -> None:
        target = path.with_suffix(path.suffix + suffix)
        try:
            shutil.copy2(path, target)
        except OSError as e:
            log.warning("ConfigManager: could not back up %s: %s", path, e)

    # ------------- migrations -------------

    def _migrate_settings(self, old: dict, old_v: int, new_v: int) -> dict:
        """
        v0/v1 stored one top-level "<category>_unit" key per category, with
        upper-case symbols ("FT", "KIPS"). v2 nests them under "units" using
        the catalog's own spelling.
        """
        data = dict(old) if isinstance(old, dict) else {}

        u = data.get("units")
        if not isinstance(u, dict):
            u = {}
        for key in [k for k in data if k.endswith("_unit")]:
            category = key[: -len("_unit")]
            u.setdefault(category, data.pop(key))

        units: dict = {}
        for category, symbol in u.items():
            try:
                table = get_table(str(category))
            except UnknownCategoryError:
                log.warning("ConfigManager: dropping unknown category '%s' during migration", category)
                continue
            units[table.name] = _catalog_spelling(str(symbol), table)
        data["units"] = units

        custom = data.get("custom_units")
        data["custom_units"] = custom if isinstance(custom, dict) else {}

        data["version"] = new_v
        return data


def _catalog_spelling(symbol: str, table) -> str:
    if symbol in table:
        return symbol
    matches = [k for k in table if k.lower() == symbol.lower()]
    # ambiguous or unknown symbols fall back to the common unit
    return matches[0] if len(matches) == 1 else table.common_unit


def _version_of(data: Any) -> int:
    # anything but a plain integer counts as pre-versioned (0)
    if not isinstance(data, dict):
        return 0
    v = data.get("version", 0)
    if isinstance(v, bool) or not isinstance(v, int):
        return 0
    return v


def _check_units(settings: ConverterSettings) -> None:
    """Raise if a custom unit, category or active unit does not resolve."""
    registry = settings.registry()
    for category, unit in settings.units.items():
        table = get_table(category, registry)
        if unit not in table:
            raise UnsupportedUnitError(unit, table.name)
