"""Value types returned by the resolver."""

from __future__ import annotations

import copy
import time
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Mapping

REDACTED = "***"


@dataclass(frozen=True)
class ResolutionWarning:
    """An absorbed best-effort failure."""
    source: str
    name: str
    error: str

    def __str__(self) -> str:
        return f"{self.source}:{self.name}: {self.error}"


def _freeze(value: Any) -> Any:
    if isinstance(value, Mapping):
        return MappingProxyType({k: _freeze(v) for k, v in value.items()})
    if isinstance(value, list):
        return tuple(_freeze(v) for v in value)
    return value


def _thaw(value: Any) -> Any:
    if isinstance(value, Mapping):
        return {k: _thaw(v) for k, v in value.items()}
    if isinstance(value, tuple):
        return [_thaw(v) for v in value]
    return value


@dataclass(frozen=True)
class AggregatedConfig:
    """
    Point-in-time view of parameters, secrets and feature configuration.

    All mappings are read-only and built from deep copies, so the value can
    be shared across threads without synchronization.
    """
    parameters: Mapping[str, str] = field(default_factory=dict)
    secrets: Mapping[str, Mapping[str, str]] = field(default_factory=dict)
    feature_config: Mapping[str, Any] = field(default_factory=dict)
    warnings: tuple[ResolutionWarning, ...] = ()
    resolved_at: float = field(default_factory=time.time)

    def __post_init__(self) -> None:
        object.__setattr__(self, "parameters", _freeze(dict(self.parameters)))
        object.__setattr__(self, "secrets", _freeze(copy.deepcopy(_thaw(self.secrets))))
        object.__setattr__(self, "feature_config", _freeze(copy.deepcopy(_thaw(self.feature_config))))
        object.__setattr__(self, "warnings", tuple(self.warnings))

    def as_dict(self, include_secrets: bool = False) -> dict[str, Any]:
        """Plain, JSON-serializable copy; secret values are masked unless asked for."""
        secrets = _thaw(self.secrets)
        if not include_secrets:
            secrets = {name: {k: REDACTED for k in bundle} for name, bundle in secrets.items()}
        return {
            "parameters": _thaw(self.parameters),
            "secrets": secrets,
            "feature_config": _thaw(self.feature_config),
            "warnings": [str(w) for w in self.warnings],
            "resolved_at": self.resolved_at,
        }
