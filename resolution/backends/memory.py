"""
In-memory backends for local development and tests.

Each backend can be told to fail on a given name (``fail_on``) or to
sleep before answering (``latency``) so the resolver's failure and
deadline policies can be exercised without a network.
"""

from __future__ import annotations

import json
import threading
import time
from typing import Any, Optional, Union

from resolution.backends.base import (
    FeatureConfigSource,
    ParameterPage,
    ParameterSource,
    SecretSource,
)
from resolution.errors import NotFoundError


class _FailureInjection:
    """Shared failure/latency plumbing."""

    def __init__(self, latency: float = 0.0):
        self.latency = latency
        self._failures: dict[str, Exception] = {}
        self._lock = threading.Lock()

    def fail_on(self, name: str, exc: Exception) -> None:
        with self._lock:
            self._failures[name] = exc

    def _before_call(self, name: str) -> None:
        if self.latency:
            time.sleep(self.latency)
        with self._lock:
            exc = self._failures.get(name)
        if exc is not None:
            raise exc


class InMemoryParameterSource(_FailureInjection, ParameterSource):
    """Parameter store keyed by full path, e.g. ``/acme/prod/db/host``."""

    def __init__(
        self,
        parameters: Optional[dict[str, str]] = None,
        page_size: int = 10,
        latency: float = 0.0,
    ):
        super().__init__(latency=latency)
        self._params: dict[str, str] = dict(parameters or {})
        self._page_size = page_size
        self.page_requests = 0

    def put_parameter(self, name: str, value: str) -> None:
        with self._lock:
            self._params[name] = value

    def get_parameter(self, name: str, with_decryption: bool = False) -> str:
        self._before_call(name)
        with self._lock:
            if name not in self._params:
                raise NotFoundError(f"Parameter {name} not found", source="parameters", key=name)
            return self._params[name]

    def get_parameters_page(
        self,
        path: str,
        with_decryption: bool = False,
        next_token: Optional[str] = None,
    ) -> ParameterPage:
        self._before_call(path)
        prefix = path.rstrip("/") + "/"
        with self._lock:
            self.page_requests += 1
            names = sorted(n for n in self._params if n.startswith(prefix))
            start = int(next_token) if next_token else 0
            chunk = names[start:start + self._page_size]
            page = ParameterPage(parameters=[(n, self._params[n]) for n in chunk])
        end = start + self._page_size
        if end < len(names):
            page.next_token = str(end)
        return page


class InMemorySecretSource(_FailureInjection, SecretSource):
    """Secret store keyed by full secret id, e.g. ``acme/prod/api-keys``."""

    def __init__(
        self,
        secrets: Optional[dict[str, Union[str, dict[str, Any], None]]] = None,
        latency: float = 0.0,
    ):
        super().__init__(latency=latency)
        self._secrets: dict[str, Optional[str]] = {}
        for secret_id, payload in (secrets or {}).items():
            self.put_secret(secret_id, payload)

    def put_secret(self, secret_id: str, payload: Union[str, dict[str, Any], None]) -> None:
        """Store a payload; dicts are JSON-encoded, None means no string value."""
        if isinstance(payload, dict):
            payload = json.dumps(payload)
        with self._lock:
            self._secrets[secret_id] = payload

    def get_secret_string(self, secret_id: str) -> Optional[str]:
        self._before_call(secret_id)
        with self._lock:
            if secret_id not in self._secrets:
                raise NotFoundError(f"Secret {secret_id} not found", source="secrets", key=secret_id)
            return self._secrets[secret_id]


class InMemoryFeatureConfigSource(_FailureInjection, FeatureConfigSource):
    """Feature configuration keyed by (application, environment, profile)."""

    def __init__(self, latency: float = 0.0):
        super().__init__(latency=latency)
        self._content: dict[tuple[str, str, str], bytes] = {}

    def put_configuration(
        self,
        application: str,
        environment: str,
        profile: str,
        content: Union[bytes, str, dict[str, Any]],
    ) -> None:
        if isinstance(content, dict):
            content = json.dumps(content)
        if isinstance(content, str):
            content = content.encode("utf-8")
        with self._lock:
            self._content[(application, environment, profile)] = content

    def get_configuration_content(
        self,
        application: str,
        environment: str,
        profile: str,
    ) -> Optional[bytes]:
        self._before_call(profile)
        with self._lock:
            key = (application, environment, profile)
            if key not in self._content:
                raise NotFoundError(
                    f"No configuration for {application}/{environment}/{profile}",
                    source="feature_config",
                    key=profile,
                )
            return self._content[key]
