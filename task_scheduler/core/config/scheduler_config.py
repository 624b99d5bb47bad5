from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from task_scheduler.core.model import ALLOWED_COMPLEXITIES, COMPLEXITY_DURATION


DEFAULT_BOTTLENECK_THRESHOLD = 3
DEFAULT_WORKERS = 4


class SchedulerConfigError(ValueError):
    pass


@dataclass(frozen=True)
class SchedulerConfig:
    durations: dict[str, int] = field(default_factory=lambda: dict(COMPLEXITY_DURATION))
    bottleneck_threshold: int = DEFAULT_BOTTLENECK_THRESHOLD
    default_workers: int = DEFAULT_WORKERS


def _positive_int(v: Any) -> bool:
    return isinstance(v, int) and not isinstance(v, bool) and v >= 1


def load_config_file(path: str | Path) -> dict[str, Any]:
    """Load scheduler overrides from a YAML file.

    Format:
      durations: {low: 1, medium: 2, high: 4}
      bottleneck_threshold: 3
      default_workers: 4

    Every key is optional. Returns the validated overrides only.
    """
    p = Path(path)
    raw = yaml.safe_load(p.read_text(encoding="utf-8"))
    if raw is None:
        return {}
    if not isinstance(raw, dict):
        raise SchedulerConfigError("config file must be a mapping")

    unknown = sorted(set(raw.keys()) - {"durations", "bottleneck_threshold", "default_workers"})
    if unknown:
        raise SchedulerConfigError(f"unknown config keys: {unknown}")

    out: dict[str, Any] = {}

    if "durations" in raw:
        durations = raw["durations"]
        if not isinstance(durations, dict):
            raise SchedulerConfigError("durations must be a mapping of complexity -> int")
        parsed: dict[str, int] = {}
        for k, v in durations.items():
            if k not in ALLOWED_COMPLEXITIES:
                raise SchedulerConfigError(
                    f"durations key must be one of {list(ALLOWED_COMPLEXITIES)}, got {k!r}"
                )
            if not _positive_int(v):
                raise SchedulerConfigError(f"duration for '{k}' must be a positive integer")
            parsed[k] = v
        out["durations"] = parsed

    for key in ("bottleneck_threshold", "default_workers"):
        if key in raw:
            if not _positive_int(raw[key]):
                raise SchedulerConfigError(f"{key} must be a positive integer")
            out[key] = raw[key]

    return out


def merged_config(overrides: dict[str, Any] | None = None) -> SchedulerConfig:
    """Return the default config with optional overrides applied.

    Duration overrides are merged per complexity; the other keys replace defaults.
    """
    if not overrides:
        return SchedulerConfig()
    durations = dict(COMPLEXITY_DURATION)
    durations.update(overrides.get("durations", {}))
    return SchedulerConfig(
        durations=durations,
        bottleneck_threshold=overrides.get("bottleneck_threshold", DEFAULT_BOTTLENECK_THRESHOLD),
        default_workers=overrides.get("default_workers", DEFAULT_WORKERS),
    )


def load_and_merge(config_file: str | None) -> SchedulerConfig:
    if not config_file:
        return merged_config()
    overrides = load_config_file(config_file)
    return merged_config(overrides)
