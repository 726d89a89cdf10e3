"""
Shared fixtures: an ``acme/prod`` namespace, in-memory backends and a
resolver wired to them with fast retries.
"""

import pytest

from infrastructure.audit.logger import AuditLogger
from infrastructure.metrics.collector import MetricsCollector
from infrastructure.resilience.retry import RetryConfig
from resolution.backends.memory import (
    InMemoryFeatureConfigSource,
    InMemoryParameterSource,
    InMemorySecretSource,
)
from resolution.namespace import Namespace
from resolution.resolver import ConfigResolver


@pytest.fixture
def namespace():
    return Namespace("acme", "prod")


@pytest.fixture
def parameter_source():
    return InMemoryParameterSource(
        {
            "/acme/prod/db/host": "db.internal",
            "/acme/prod/db/port": "5432",
            "/acme/prod/log-level": "INFO",
            "/acme/staging/db/host": "db.staging",
        },
        page_size=2,
    )


@pytest.fixture
def secret_source():
    return InMemorySecretSource(
        {
            "acme/prod/api-keys": {"stripe": "sk_live", "sendgrid": "sg_key"},
            "acme/prod/database": {"username": "admin", "password": "x"},
        }
    )


@pytest.fixture
def feature_source():
    source = InMemoryFeatureConfigSource()
    source.put_configuration("acme-prod", "prod", "default", {"new_checkout": True, "max_items": 50})
    return source


@pytest.fixture
def fast_retry():
    return RetryConfig(max_attempts=3, base_delay=0.0, max_delay=0.0, jitter=False)


@pytest.fixture
def audit(tmp_path):
    return AuditLogger(log_file=str(tmp_path / "audit.jsonl"), also_log_to_python=False)


@pytest.fixture
def metrics():
    return MetricsCollector()


@pytest.fixture
def resolver(namespace, parameter_source, secret_source, feature_source, fast_retry, audit, metrics):
    return ConfigResolver(
        namespace,
        parameter_source,
        secret_source,
        feature_source,
        retry=fast_retry,
        audit=audit,
        metrics=metrics,
    )


@pytest.fixture(autouse=True)
def aws_test_credentials(monkeypatch):
    """Keep botocore from looking for real credentials or regions."""
    monkeypatch.setenv("AWS_ACCESS_KEY_ID", "testing")
    monkeypatch.setenv("AWS_SECRET_ACCESS_KEY", "testing")
    monkeypatch.setenv("AWS_DEFAULT_REGION", "us-east-1")
