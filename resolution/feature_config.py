"""
Feature-configuration adapter.

Best-effort by contract: feature flags ship with safe defaults in their
callers, so every failure here degrades to an empty snapshot plus a
warning log record.
"""

from __future__ import annotations

import json
import logging
import time
from typing import Any, Optional

from infrastructure.metrics.collector import MetricsCollector
from resolution.backends.base import FeatureConfigSource
from resolution.namespace import Namespace

logger = logging.getLogger("platform.resolution.feature_config")

SOURCE = "feature_config"
DEFAULT_PROFILE = "default"


class FeatureConfigAdapter:
    """Reads the deployed configuration for ``namespace.application_id``."""

    def __init__(
        self,
        namespace: Namespace,
        source: FeatureConfigSource,
        *,
        metrics: Optional[MetricsCollector] = None,
    ):
        self._namespace = namespace
        self._source = source
        self._metrics = metrics

    def get_configuration(self, profile: str = DEFAULT_PROFILE) -> dict[str, Any]:
        """Return the current snapshot, or ``{}`` on any failure. Never raises."""
        start = time.perf_counter()
        success = False
        try:
            snapshot = self._fetch(profile)
            success = True
            return snapshot
        except Exception as exc:
            logger.warning(
                "Failed to fetch feature configuration %s/%s/%s: %s",
                self._namespace.application_id,
                self._namespace.environment,
                profile,
                exc,
                extra={"namespace": str(self._namespace), "source": SOURCE, "profile": profile},
            )
            return {}
        finally:
            if self._metrics is not None:
                self._metrics.record_source_fetch(SOURCE, time.perf_counter() - start, success)

    def _fetch(self, profile: str) -> dict[str, Any]:
        content = self._source.get_configuration_content(
            self._namespace.application_id,
            self._namespace.environment,
            profile,
        )
        if not content:
            return {}

        snapshot = json.loads(content)
        if not isinstance(snapshot, dict):
            raise ValueError(f"configuration is {type(snapshot).__name__}, expected a JSON object")
        return snapshot
