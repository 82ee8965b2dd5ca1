"""Typed, layered configuration loader with precedence handling."""
from __future__ import annotations

import os
import configparser
from dataclasses import dataclass, fields
from pathlib import Path
from threading import RLock
from typing import Any, Callable, Dict, List, Tuple

# --------------------------------------------------------------------------- #
#  Paths & default definitions
# --------------------------------------------------------------------------- #

def _find_project_root() -> Path:
    here = Path(__file__).resolve()
    for parent in here.parents:
        if (parent / "core").is_dir():
            return parent
    return here.parent

PROJECT_ROOT = _find_project_root()
CONFIG_DIR = PROJECT_ROOT / "core" / "config"
DEFAULTS_INI = CONFIG_DIR / "defaults.ini"
MACHINE_INI = CONFIG_DIR / "config.ini"

ENV_PREFIX = "SIGNDESK_"


_DEFAULTS: Dict[str, Dict[str, Any]] = {
    "Storage": {
        "backend": "sqlite",
        "db_path": (PROJECT_ROOT / "databases" / "templates.db").as_posix(),
    },
    "Signing": {
        "date_format": "%m/%d/%Y",
        "name_font_size": "12",
        "date_font_size": "10",
        "attestation_font_size": "6",
        "attestation_reason": "I agree to the terms of this document",
        "certificate_country": "US",
        "certificate_locality": "",
        "certificate_organization": "SignDesk",
    },
    "Links": {
        "base_url": "http://localhost:5173/",
    },
    "Fields": {
        "min_width": "0.05",
        "min_height": "0.03",
    },
    "General": {
        "app_name": "SignDesk",
        "version": "1.0.0",
        "log_level": "INFO",
    },
}


# --------------------------------------------------------------------------- #
#  Datamodels
# --------------------------------------------------------------------------- #

@dataclass
class StorageConfig:
    backend: str = "sqlite"
    db_path: Path = Path("databases/templates.db")


@dataclass
class SigningConfig:
    date_format: str = "%m/%d/%Y"
    name_font_size: int = 12
    date_font_size: int = 10
    attestation_font_size: int = 6
    attestation_reason: str = "I agree to the terms of this document"
    certificate_country: str = "US"
    certificate_locality: str = ""
    certificate_organization: str = "SignDesk"


@dataclass
class LinksConfig:
    base_url: str = "http://localhost:5173/"


@dataclass
class FieldsConfig:
    min_width: float = 0.05
    min_height: float = 0.03


@dataclass
class GeneralConfig:
    app_name: str = "SignDesk"
    version: str = "1.0.0"
    log_level: str = "INFO"


STORAGE_BACKENDS = ("memory", "sqlite")


class ConfigError(ValueError):
    """A merged configuration value is unusable."""


# --------------------------------------------------------------------------- #
#  Helpers
# --------------------------------------------------------------------------- #

Layer = Tuple[str, str, Dict[str, Dict[str, Any]]]


def _read_ini(path: Path) -> Dict[str, Dict[str, Any]]:
    cp = configparser.ConfigParser(interpolation=None)
    cp.read(path, encoding="utf-8")
    return {section: dict(cp.items(section)) for section in cp.sections()}


def _cast(value: Any, typ: Any) -> Any:
    # dataclass annotations are strings under postponed evaluation
    name = typ if isinstance(typ, str) else getattr(typ, "__name__", str(typ))
    if name == "Path":
        return Path(str(value)).expanduser()
    if name == "bool":
        if isinstance(value, bool):
            return value
        return str(value).strip().lower() in {"1", "true", "yes", "on"}
    if name in ("int", "float"):
        try:
            return int(value) if name == "int" else float(value)
        except ValueError as ex:
            raise ConfigError(f"Expected {name}, got {value!r}") from ex
    return str(value)


def _section(cls: type, data: Dict[str, Any]) -> Any:
    return cls(**{f.name: _cast(data.get(f.name, f.default), f.type) for f in fields(cls)})


def _env_overlay(environ: Dict[str, str]) -> Dict[str, Dict[str, Any]]:
    """``SIGNDESK_LINKS__BASE_URL=...`` -> ``{"Links": {"base_url": ...}}``."""
    result: Dict[str, Dict[str, Any]] = {}
    for env_key, value in environ.items():
        if not env_key.startswith(ENV_PREFIX):
            continue
        section, sep, key = env_key[len(ENV_PREFIX):].partition("__")
        if sep and section and key:
            result.setdefault(section.title(), {})[key.lower()] = value
    return result


def _user_config_path() -> Path:
    if os.name == "nt":
        appdata = os.environ.get("APPDATA") or (Path.home() / "AppData" / "Roaming")
        return Path(appdata) / "SignDesk" / "config.ini"
    return Path(os.environ.get("XDG_CONFIG_HOME", Path.home() / ".config")) / "signdesk" / "config.ini"


# --------------------------------------------------------------------------- #
#  ConfigService
# --------------------------------------------------------------------------- #


class ConfigService:
    """Facade merging layered configuration with type safety.

    Precedence (low to high): embedded defaults, defaults.ini, environment
    (``SIGNDESK_<SECTION>__<KEY>``), machine config.ini, user config (or the
    explicit ``extra_ini``).
    """

    def __init__(self, *, environ: Dict[str, str] | None = None,
                 extra_ini: Path | None = None) -> None:
        self._lock = RLock()
        self._environ = environ
        self._extra_ini = extra_ini
        self.reload()

    def _layers(self) -> List[Layer]:
        layers: List[Layer] = [("code", "embedded", _DEFAULTS)]
        if DEFAULTS_INI.exists():
            layers.append(("defaults.ini", str(DEFAULTS_INI), _read_ini(DEFAULTS_INI)))
        layers.append(("env", "os.environ", _env_overlay(os.environ if self._environ is None else self._environ)))
        if MACHINE_INI.exists():
            layers.append(("machine", str(MACHINE_INI), _read_ini(MACHINE_INI)))
        user_ini = self._extra_ini or _user_config_path()
        if user_ini.exists():
            layers.append(("user", str(user_ini), _read_ini(user_ini)))
        return layers

    # ------------------------------------------------------------------ #
    def reload(self) -> None:
        with self._lock:
            merged: Dict[str, Dict[str, Any]] = {}
            sources: Dict[Tuple[str, str], Dict[str, str]] = {}
            for layer, origin, data in self._layers():
                for section, items in data.items():
                    merged.setdefault(section, {}).update(items)
                    for key in items:
                        sources[(section, key)] = {"layer": layer, "source": origin}

            self._merged = merged
            self._sources = sources

            self.storage = _section(StorageConfig, merged.get("Storage", {}))
            self.signing = _section(SigningConfig, merged.get("Signing", {}))
            self.links = _section(LinksConfig, merged.get("Links", {}))
            self.fields = _section(FieldsConfig, merged.get("Fields", {}))
            self.general = _section(GeneralConfig, merged.get("General", {}))
            self._validate()

    def _validate(self) -> None:
        self.storage.backend = self.storage.backend.strip().lower()
        if self.storage.backend not in STORAGE_BACKENDS:
            raise ConfigError(f"Storage.backend must be one of {', '.join(STORAGE_BACKENDS)}, "
                              f"got {self.storage.backend!r}")
        for name in ("min_width", "min_height"):
            value = getattr(self.fields, name)
            if not 0 < value < 1:
                raise ConfigError(f"Fields.{name} must be a fraction between 0 and 1, got {value}")

    # ------------------------------------------------------------------ #
    def get(self, section: str, key: str, *, cast: Callable[[Any], Any] | type = str) -> Any:
        val = self._merged.get(section, {}).get(key)
        if val is None:
            return None
        if isinstance(cast, type):
            return _cast(val, cast)
        return cast(val)

    def meta_source(self, section: str, key: str) -> Dict[str, str] | None:
        return self._sources.get((section, key))


# Global singleton
config_service = ConfigService()
