"""Builds a ``ConfigResolver`` from ``Settings``."""

from __future__ import annotations

from functools import lru_cache
from typing import Optional

from config.settings import Backend, Settings, get_settings
from infrastructure.audit.logger import get_audit_logger
from infrastructure.metrics.collector import get_metrics_collector
from infrastructure.resilience.retry import RetryConfig
from resolution.backends.memory import (
    InMemoryFeatureConfigSource,
    InMemoryParameterSource,
    InMemorySecretSource,
)
from resolution.namespace import Namespace
from resolution.resolver import ConfigResolver
from utils.logger import get_logger

logger = get_logger(__name__)


def build_resolver(settings: Settings, namespace: Optional[Namespace] = None) -> ConfigResolver:
    """Wire backends, retry policy, audit and metrics as configured."""
    namespace = namespace or Namespace(settings.project_name, settings.environment_name)

    if settings.backend == Backend.AWS:
        from resolution.backends.aws import AppConfigSource, SecretsManagerSource, SSMParameterSource

        client_kwargs = {
            "endpoint_url": settings.aws_endpoint_url,
            "connect_timeout": settings.aws_connect_timeout,
            "read_timeout": settings.aws_read_timeout,
        }
        parameter_source = SSMParameterSource(settings.aws_region, **client_kwargs)
        secret_source = SecretsManagerSource(settings.aws_region, **client_kwargs)
        feature_source = AppConfigSource(settings.aws_region, **client_kwargs)
    else:
        parameter_source = InMemoryParameterSource()
        secret_source = InMemorySecretSource()
        feature_source = InMemoryFeatureConfigSource()

    logger.info(
        "Config resolver | namespace=%s | backend=%s | region=%s | timeout=%s",
        namespace,
        settings.backend.value,
        settings.aws_region,
        settings.load_timeout_seconds,
    )

    return ConfigResolver(
        namespace,
        parameter_source,
        secret_source,
        feature_source,
        default_secret_names=settings.secret_names,
        feature_profile=settings.feature_config_profile,
        decrypt_parameters=settings.decrypt_parameters,
        timeout=settings.load_timeout_seconds,
        max_workers=settings.max_workers,
        retry=RetryConfig(
            max_attempts=settings.retry_max_attempts,
            base_delay=settings.retry_base_delay,
            max_delay=settings.retry_max_delay,
        ),
        audit=get_audit_logger(),
        metrics=get_metrics_collector(),
    )


@lru_cache(maxsize=1)
def get_config_resolver() -> ConfigResolver:
    return build_resolver(get_settings())
