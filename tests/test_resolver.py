import dataclasses
import json
import time
from types import MappingProxyType

import pytest

from resolution.backends.memory import (
    InMemoryFeatureConfigSource,
    InMemoryParameterSource,
    InMemorySecretSource,
)
from resolution.errors import (
    AccessDeniedError,
    BackendUnavailableError,
    MalformedSecretError,
    MandatorySourceFailedError,
    ResolutionTimeoutError,
)
from resolution.models import AggregatedConfig
from resolution.resolver import ConfigResolver


class TestLoadAll:
    def test_aggregates_all_sources(self, resolver):
        config = resolver.load_all({"api-keys", "database"})

        assert config.parameters == {
            "db/host": "db.internal",
            "db/port": "5432",
            "log-level": "INFO",
        }
        assert config.secrets["database"] == {"username": "admin", "password": "x"}
        assert config.secrets["api-keys"]["stripe"] == "sk_live"
        assert config.feature_config == {"new_checkout": True, "max_items": 50}
        assert config.warnings == ()

    def test_default_secret_names(self, resolver):
        config = resolver.load_all()

        assert set(config.secrets) == {"api-keys"}

    def test_explicit_empty_secret_names(self, resolver):
        assert resolver.load_all([]).secrets == {}

    def test_duplicate_secret_names_fetched_once(self, resolver, metrics):
        resolver.load_all(["database", "database"])

        assert metrics.get_source_summary()["secrets"]["total_calls"] == 1

    def test_malformed_secret_is_omitted_with_warning(self, resolver, secret_source, caplog):
        secret_source.put_secret("acme/prod/broken", "not-json")

        config = resolver.load_all(["api-keys", "broken", "database"])

        assert set(config.secrets) == {"api-keys", "database"}
        assert len(config.warnings) == 1
        warning = config.warnings[0]
        assert (warning.source, warning.name) == ("secrets", "broken")
        assert MalformedSecretError.__name__ in warning.error
        assert "Secret 'broken' unavailable" in caplog.text

    def test_missing_and_denied_secrets_do_not_fail_load(self, resolver, secret_source):
        secret_source.fail_on("acme/prod/database", AccessDeniedError("denied"))

        config = resolver.load_all(["api-keys", "database", "missing"])

        assert set(config.secrets) == {"api-keys"}
        assert {w.name for w in config.warnings} == {"database", "missing"}

    def test_feature_config_failure_is_absorbed(self, resolver, feature_source):
        feature_source.fail_on("default", BackendUnavailableError("down"))

        config = resolver.load_all()

        assert config.feature_config == {}
        assert config.parameters

    def test_empty_parameter_namespace_is_not_a_failure(
        self, namespace, secret_source, feature_source, fast_retry
    ):
        resolver = ConfigResolver(
            namespace, InMemoryParameterSource(), secret_source, feature_source, retry=fast_retry
        )

        assert resolver.load_all().parameters == {}

    def test_parameter_failure_is_mandatory(self, resolver, parameter_source):
        parameter_source.fail_on("/acme/prod", AccessDeniedError("denied"))

        with pytest.raises(MandatorySourceFailedError) as exc_info:
            resolver.load_all(["database"])

        assert isinstance(exc_info.value.__cause__, AccessDeniedError)
        assert exc_info.value.source == "parameters"

    def test_parameter_failure_returns_without_waiting_for_secrets(
        self, namespace, parameter_source, feature_source, fast_retry
    ):
        parameter_source.fail_on("/acme/prod", AccessDeniedError("denied"))
        slow_secrets = InMemorySecretSource({"acme/prod/api-keys": {"k": "v"}}, latency=1.0)
        resolver = ConfigResolver(
            namespace, parameter_source, slow_secrets, feature_source, retry=fast_retry
        )

        start = time.monotonic()
        with pytest.raises(MandatorySourceFailedError):
            resolver.load_all()
        assert time.monotonic() - start < 0.8

    def test_sources_run_concurrently(self, namespace, fast_retry):
        params = InMemoryParameterSource({"/acme/prod/a": "1"}, latency=0.3)
        secrets = InMemorySecretSource(
            {f"acme/prod/s{i}": {"k": str(i)} for i in range(3)}, latency=0.3
        )
        features = InMemoryFeatureConfigSource(latency=0.3)
        resolver = ConfigResolver(namespace, params, secrets, features, retry=fast_retry)

        start = time.monotonic()
        config = resolver.load_all(["s0", "s1", "s2"])
        elapsed = time.monotonic() - start

        assert len(config.secrets) == 3
        assert elapsed < 0.9

    def test_audit_and_metrics_recorded(self, resolver, metrics, tmp_path):
        resolver.load_all(["database"])

        assert metrics.get_resolution_summary()["total_calls"] == 1
        events = [json.loads(l) for l in (tmp_path / "audit.jsonl").read_text().splitlines()]
        resolution = [e for e in events if e["event_type"] == "config_resolution"]
        assert resolution[-1]["details"]["success"] is True
        assert resolution[-1]["details"]["parameter_count"] == 3

    def test_each_call_returns_fresh_config(self, resolver, parameter_source):
        first = resolver.load_all()
        parameter_source.put_parameter("/acme/prod/new", "value")
        second = resolver.load_all()

        assert "new" not in first.parameters
        assert second.parameters["new"] == "value"
        assert first is not second


class TestDeadline:
    def test_slow_parameters_time_out(self, namespace, secret_source, feature_source, fast_retry):
        slow = InMemoryParameterSource({"/acme/prod/a": "1"}, latency=1.0)
        resolver = ConfigResolver(namespace, slow, secret_source, feature_source, retry=fast_retry)

        start = time.monotonic()
        with pytest.raises(ResolutionTimeoutError) as exc_info:
            resolver.load_all(timeout=0.1)

        assert time.monotonic() - start < 0.8
        assert exc_info.value.timeout == 0.1
        assert isinstance(exc_info.value, TimeoutError)

    def test_slow_secret_is_abandoned(self, namespace, parameter_source, feature_source, fast_retry):
        slow = InMemorySecretSource({"acme/prod/api-keys": {"k": "v"}}, latency=1.0)
        resolver = ConfigResolver(namespace, parameter_source, slow, feature_source, retry=fast_retry)

        config = resolver.load_all(timeout=0.2)

        assert config.secrets == {}
        assert config.parameters
        assert [(w.source, w.name, w.error) for w in config.warnings] == [
            ("secrets", "api-keys", "deadline exceeded")
        ]

    def test_slow_feature_config_is_abandoned(
        self, namespace, parameter_source, secret_source, fast_retry
    ):
        slow = InMemoryFeatureConfigSource(latency=1.0)
        slow.put_configuration("acme-prod", "prod", "default", {"new_checkout": True})
        resolver = ConfigResolver(namespace, parameter_source, secret_source, slow, retry=fast_retry)

        config = resolver.load_all(["database"], timeout=0.2)

        assert config.feature_config == {}
        assert config.secrets["database"]["username"] == "admin"
        assert [(w.source, w.name, w.error) for w in config.warnings] == [
            ("feature_config", "default", "deadline exceeded")
        ]

    def test_resolver_default_timeout(self, namespace, secret_source, feature_source, fast_retry):
        slow = InMemoryParameterSource(latency=1.0)
        resolver = ConfigResolver(
            namespace, slow, secret_source, feature_source, retry=fast_retry, timeout=0.1
        )

        with pytest.raises(ResolutionTimeoutError):
            resolver.load_all()


class TestAggregatedConfig:
    def test_is_read_only(self, resolver):
        config = resolver.load_all(["database"])

        assert isinstance(config.parameters, MappingProxyType)
        with pytest.raises(TypeError):
            config.parameters["x"] = "y"
        with pytest.raises(TypeError):
            config.secrets["database"]["password"] = "y"

    def test_does_not_alias_inputs(self):
        feature = {"limits": {"max": 1}}
        config = AggregatedConfig(feature_config=feature)
        feature["limits"]["max"] = 2

        assert config.feature_config["limits"]["max"] == 1

    def test_replace_rebuilds_from_existing_config(self, resolver):
        config = resolver.load_all(["database"])

        rebuilt = dataclasses.replace(config, warnings=())

        assert rebuilt.secrets["database"] == {"username": "admin", "password": "x"}
        assert rebuilt.feature_config == config.feature_config
        assert rebuilt.parameters == config.parameters

    def test_replace_keeps_nested_values_read_only(self):
        config = dataclasses.replace(AggregatedConfig(feature_config={"limits": {"max": 1}, "tiers": [1, 2]}))

        assert config.feature_config["limits"]["max"] == 1
        assert config.feature_config["tiers"] == (1, 2)
        with pytest.raises(TypeError):
            config.feature_config["limits"]["max"] = 2

    def test_as_dict_redacts_secrets(self, resolver):
        snapshot = resolver.load_all(["database"]).as_dict()

        assert snapshot["secrets"] == {"database": {"username": "***", "password": "***"}}
        assert json.loads(json.dumps(snapshot))["parameters"]["db/host"] == "db.internal"

    def test_as_dict_with_secrets(self, resolver):
        snapshot = resolver.load_all(["database"]).as_dict(include_secrets=True)

        assert snapshot["secrets"]["database"]["password"] == "x"
