from __future__ import annotations

from dataclasses import dataclass, replace
from pathlib import Path
from typing import Mapping
import os


DEFAULT_USE_EMULATOR = True
DEFAULT_EMULATOR_HOST = "127.0.0.1"
DEFAULT_EMULATOR_PORT = 8080
TARGETS = ("emulator", "remote")

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off"}


class SettingsError(ValueError):
    """Raised when settings values are invalid."""


@dataclass(frozen=True)
class FlameConfig:
    project: str
    use_emulator: bool = DEFAULT_USE_EMULATOR
    emulator_host: str = DEFAULT_EMULATOR_HOST
    emulator_port: int = DEFAULT_EMULATOR_PORT

    @property
    def target(self) -> str:
        return "emulator" if self.use_emulator else "remote"

    @property
    def emulator_address(self) -> str:
        return f"{self.emulator_host}:{self.emulator_port}"


def _read_dotenv(dotenv_path: Path) -> dict[str, str]:
    values: dict[str, str] = {}
    if not dotenv_path.exists():
        return values

    for raw_line in dotenv_path.read_text(encoding="utf-8").splitlines():
        line = raw_line.strip()
        if not line or line.startswith("#"):
            continue
        if "=" not in line:
            continue
        key, value = line.split("=", 1)
        key = key.strip()
        value = value.strip().strip("'").strip('"')
        if key:
            values[key] = value
    return values


def _get_project(values: Mapping[str, str]) -> str:
    for key in ("FLAME_PROJECT_ID", "GOOGLE_CLOUD_PROJECT"):
        value = values.get(key, "").strip()
        if value:
            return value
    raise SettingsError("FLAME_PROJECT_ID must not be empty.")


def _get_bool(values: Mapping[str, str], key: str, default: bool) -> bool:
    raw_value = values.get(key)
    if raw_value is None or raw_value.strip() == "":
        return default
    normalized = raw_value.strip().lower()
    if normalized in _TRUE_VALUES:
        return True
    if normalized in _FALSE_VALUES:
        return False
    raise SettingsError(f"{key} must be boolean: {raw_value}")


def _get_port(values: Mapping[str, str], key: str, default: int) -> int:
    raw_value = values.get(key)
    if raw_value is None or raw_value.strip() == "":
        return default
    try:
        value = int(raw_value)
    except ValueError as exc:
        raise SettingsError(f"{key} must be integer: {raw_value}") from exc
    if not 0 < value <= 65535:
        raise SettingsError(f"{key} must be within 1..65535: {value}")
    return value


def validate_config(config: FlameConfig) -> FlameConfig:
    if not config.project.strip():
        raise SettingsError("project must not be empty.")
    if config.use_emulator:
        if not config.emulator_host.strip():
            raise SettingsError("emulator host must not be empty when the emulator is used.")
        if config.emulator_port <= 0:
            raise SettingsError("emulator port must be > 0 when the emulator is used.")
    return config


def load_settings(
    *,
    env: Mapping[str, str] | None = None,
    dotenv_path: str | Path = ".env",
) -> FlameConfig:
    """Load flame config from .env and environment variables.

    Priority: OS environment > .env > default.
    """

    env_values = dict(env) if env is not None else dict(os.environ)
    dotenv_values = _read_dotenv(Path(dotenv_path))
    merged: dict[str, str] = {**dotenv_values, **env_values}

    return validate_config(
        FlameConfig(
            project=_get_project(merged),
            use_emulator=_get_bool(merged, "FLAME_USE_EMULATOR", DEFAULT_USE_EMULATOR),
            emulator_host=merged.get("FLAME_EMULATOR_HOST", DEFAULT_EMULATOR_HOST).strip(),
            emulator_port=_get_port(merged, "FLAME_EMULATOR_PORT", DEFAULT_EMULATOR_PORT),
        )
    )


def switch_target(config: FlameConfig, target: str) -> FlameConfig:
    normalized = target.strip().lower()
    if normalized not in TARGETS:
        raise SettingsError(f"target must be one of {', '.join(TARGETS)}: {target}")
    return validate_config(replace(config, use_emulator=normalized == "emulator"))


def describe_config(config: FlameConfig) -> list[str]:
    return [
        f"Firebase project: {config.project}",
        f"Using emulator? {'Yes' if config.use_emulator else 'No'}",
        f"Emulator host & port: {config.emulator_address}",
    ]
