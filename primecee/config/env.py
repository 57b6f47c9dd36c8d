from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from decouple import config

from primecee.domain.constants import DEFAULT_BONIFICATION


@dataclass(frozen=True)
class ValorisationConfig:
    default_bonification: float = DEFAULT_BONIFICATION
    lighting_default_led_watt: Optional[float] = None


@dataclass(frozen=True)
class SnapshotConfig:
    path: Path


def _parse_float(name: str, value: str | None) -> Optional[float]:
    if value is None:
        return None
    value = str(value).strip().replace(",", ".")
    if value == "":
        return None
    try:
        return float(value)
    except ValueError as exc:
        raise ValueError(f"{name} must be a number, got {value!r}") from exc


def load_valorisation_config() -> ValorisationConfig:
    bonification = _parse_float(
        "CEE_DEFAULT_BONIFICATION",
        config("CEE_DEFAULT_BONIFICATION", default=str(DEFAULT_BONIFICATION)),
    )
    if bonification is None or bonification <= 0:
        raise ValueError("CEE_DEFAULT_BONIFICATION must be > 0")

    led_watt = _parse_float(
        "CEE_LIGHTING_DEFAULT_LED_WATT",
        config("CEE_LIGHTING_DEFAULT_LED_WATT", default=""),
    )
    if led_watt is not None and led_watt <= 0:
        raise ValueError("CEE_LIGHTING_DEFAULT_LED_WATT must be > 0")

    return ValorisationConfig(
        default_bonification=bonification,
        lighting_default_led_watt=led_watt,
    )


def load_snapshot_config() -> SnapshotConfig:
    return SnapshotConfig(path=Path(config("CEE_SNAPSHOT_YAML", default="snapshots/project.yml")))
