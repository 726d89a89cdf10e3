"""
Aggregation coordinator.

Fans out to the three adapters on a thread pool and merges the results
into one ``AggregatedConfig``. Failure policy per source:

  parameters      → mandatory: any failure aborts the load
  feature config  → best-effort: absorbed inside the adapter
  secrets         → best-effort per name: failing names are omitted
"""

from __future__ import annotations

import logging
import time
from concurrent.futures import Future, ThreadPoolExecutor, wait
from typing import Any, Iterable, Optional

from infrastructure.audit.logger import AuditLogger
from infrastructure.metrics.collector import MetricsCollector
from infrastructure.resilience.retry import RetryConfig
from resolution.backends.base import FeatureConfigSource, ParameterSource, SecretSource
from resolution.errors import MandatorySourceFailedError, ResolutionTimeoutError
from resolution.feature_config import DEFAULT_PROFILE, FeatureConfigAdapter
from resolution.models import AggregatedConfig, ResolutionWarning
from resolution.namespace import Namespace
from resolution.parameters import ParameterStoreAdapter
from resolution.secrets import SecretStoreAdapter

logger = logging.getLogger("platform.resolution.resolver")

DEFAULT_SECRET_NAMES = ("api-keys",)


class ConfigResolver:
    """
    Produces one ``AggregatedConfig`` per ``load_all`` call.

    Usage:
        resolver = ConfigResolver(
            Namespace("acme", "prod"),
            parameter_source=SSMParameterSource("eu-west-1"),
            secret_source=SecretsManagerSource("eu-west-1"),
            feature_source=AppConfigSource("eu-west-1"),
        )
        config = resolver.load_all({"api-keys", "database"}, timeout=5)
    """

    def __init__(
        self,
        namespace: Namespace,
        parameter_source: ParameterSource,
        secret_source: SecretSource,
        feature_source: FeatureConfigSource,
        *,
        default_secret_names: Iterable[str] = DEFAULT_SECRET_NAMES,
        feature_profile: str = DEFAULT_PROFILE,
        decrypt_parameters: bool = False,
        timeout: Optional[float] = None,
        max_workers: int = 8,
        retry: Optional[RetryConfig] = None,
        audit: Optional[AuditLogger] = None,
        metrics: Optional[MetricsCollector] = None,
    ):
        self.namespace = namespace
        self.parameters = ParameterStoreAdapter(namespace, parameter_source, retry=retry, metrics=metrics)
        self.secrets = SecretStoreAdapter(namespace, secret_source, audit=audit, metrics=metrics)
        self.features = FeatureConfigAdapter(namespace, feature_source, metrics=metrics)

        self._default_secret_names = tuple(default_secret_names)
        self._feature_profile = feature_profile
        self._decrypt = decrypt_parameters
        self._timeout = timeout
        self._max_workers = max(1, max_workers)
        self._audit = audit
        self._metrics = metrics

    def load_all(
        self,
        secret_names: Optional[Iterable[str]] = None,
        timeout: Optional[float] = None,
    ) -> AggregatedConfig:
        """
        Resolve parameters, secrets and feature configuration concurrently.

        ``secret_names`` defaults to the resolver's configured names;
        ``timeout`` (seconds) bounds the whole call and defaults to the
        resolver's configured timeout.

        Raises MandatorySourceFailedError if the parameter listing fails,
        ResolutionTimeoutError if it does not finish before the deadline.
        """
        names = list(dict.fromkeys(
            self._default_secret_names if secret_names is None else secret_names
        ))
        timeout = self._timeout if timeout is None else timeout
        deadline = time.monotonic() + timeout if timeout is not None else None
        start = time.perf_counter()

        executor = ThreadPoolExecutor(
            max_workers=min(self._max_workers, 2 + len(names)),
            thread_name_prefix=f"resolve-{self.namespace.application_id}",
        )
        try:
            params_future = executor.submit(self.parameters.get_parameters_by_path, "", self._decrypt)
            feature_future = executor.submit(self.features.get_configuration, self._feature_profile)
            secret_futures = {name: executor.submit(self.secrets.get_secret, name) for name in names}
        finally:
            # In-flight best-effort work is left to finish on its own.
            executor.shutdown(wait=False)

        try:
            parameters = self._await_parameters(params_future, deadline, timeout)
        except Exception as exc:
            self._record(start, success=False, secret_names=names, error=str(exc))
            raise

        wait([feature_future, *secret_futures.values()], timeout=_remaining(deadline))

        warnings: list[ResolutionWarning] = []
        feature_config = self._collect_features(feature_future, warnings)
        secrets = self._collect_secrets(secret_futures, warnings)

        config = AggregatedConfig(
            parameters=parameters,
            secrets=secrets,
            feature_config=feature_config,
            warnings=tuple(warnings),
        )
        self._record(
            start,
            success=True,
            parameter_count=len(parameters),
            secret_names=sorted(secrets),
            feature_keys=len(feature_config),
            warnings=[str(w) for w in warnings],
        )
        return config

    # ── Per-source collection ───────────────────────────────────

    def _await_parameters(
        self,
        future: Future,
        deadline: Optional[float],
        timeout: Optional[float],
    ) -> dict[str, str]:
        done, _ = wait([future], timeout=_remaining(deadline))
        if not done:
            logger.error("Parameter load for %s exceeded %.2fs deadline", self.namespace, timeout)
            raise ResolutionTimeoutError(
                f"Parameters for {self.namespace} not loaded within {timeout}s",
                timeout=timeout,
            )

        exc = future.exception()
        if exc is not None:
            logger.error("Mandatory parameter load failed for %s: %s", self.namespace, exc)
            raise MandatorySourceFailedError(
                f"Parameters for {self.namespace} could not be loaded: {exc}",
                source="parameters",
            ) from exc
        return future.result()

    def _collect_features(self, future: Future, warnings: list[ResolutionWarning]) -> dict[str, Any]:
        if not future.done():
            future.cancel()
            warnings.append(ResolutionWarning("feature_config", self._feature_profile, "deadline exceeded"))
            logger.warning("Feature configuration for %s abandoned at deadline", self.namespace)
            return {}
        exc = future.exception()
        if exc is not None:
            warnings.append(ResolutionWarning("feature_config", self._feature_profile, str(exc)))
            logger.warning("Feature configuration for %s failed: %s", self.namespace, exc)
            return {}
        return future.result()

    def _collect_secrets(
        self,
        futures: dict[str, Future],
        warnings: list[ResolutionWarning],
    ) -> dict[str, dict[str, str]]:
        secrets: dict[str, dict[str, str]] = {}
        for name, future in futures.items():
            if not future.done():
                future.cancel()
                warnings.append(ResolutionWarning("secrets", name, "deadline exceeded"))
                logger.warning("Secret '%s' abandoned at deadline, omitting", name)
                continue
            exc = future.exception()
            if exc is not None:
                warnings.append(ResolutionWarning("secrets", name, f"{type(exc).__name__}: {exc}"))
                logger.warning(
                    "Secret '%s' unavailable, omitting: %s", name, exc,
                    extra={"namespace": str(self.namespace), "source": "secrets", "secret_name": name},
                )
                continue
            secrets[name] = future.result()
        return secrets

    def _record(
        self,
        start: float,
        *,
        success: bool,
        parameter_count: int = 0,
        secret_names: Optional[list[str]] = None,
        feature_keys: int = 0,
        warnings: Optional[list[str]] = None,
        error: Optional[str] = None,
    ) -> None:
        duration = time.perf_counter() - start
        if self._metrics is not None:
            self._metrics.record_resolution(duration, success)
        if self._audit is not None:
            self._audit.log_resolution(
                namespace=str(self.namespace),
                duration_ms=duration * 1000,
                success=success,
                parameter_count=parameter_count,
                secret_names=secret_names,
                feature_keys=feature_keys,
                warnings=warnings,
                error=error,
            )


def _remaining(deadline: Optional[float]) -> Optional[float]:
    if deadline is None:
        return None
    return max(0.0, deadline - time.monotonic())
