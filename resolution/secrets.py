"""
Secret store adapter.

Secrets are JSON objects of string fields. A secret that exists without a
string payload is an empty bundle; a payload that is not a JSON object is
an error, never an empty bundle. Access is audit-logged without values.
"""

from __future__ import annotations

import json
import logging
import time
from typing import Optional

from infrastructure.audit.logger import AuditLogger
from infrastructure.metrics.collector import MetricsCollector
from resolution.backends.base import SecretSource
from resolution.errors import MalformedSecretError, NotFoundError, SourceError
from resolution.namespace import Namespace

logger = logging.getLogger("platform.resolution.secrets")

SOURCE = "secrets"


class SecretStoreAdapter:
    """Namespace-scoped reads from a ``SecretSource``."""

    def __init__(
        self,
        namespace: Namespace,
        source: SecretSource,
        *,
        audit: Optional[AuditLogger] = None,
        metrics: Optional[MetricsCollector] = None,
    ):
        self._namespace = namespace
        self._source = source
        self._audit = audit
        self._metrics = metrics

    def secret_id(self, name: str) -> str:
        return f"{self._namespace.secret_prefix}/{name.strip('/')}"

    def get_secret(self, name: str) -> dict[str, str]:
        """
        Fetch and decode the bundle stored at ``<secret_prefix>/<name>``.

        Raises NotFoundError, AccessDeniedError, BackendUnavailableError,
        or MalformedSecretError if the payload is not a JSON object.
        """
        secret_id = self.secret_id(name)
        start = time.perf_counter()
        outcome = "error"
        error: Optional[str] = None
        try:
            payload = self._source.get_secret_string(secret_id)
            bundle = self._decode(secret_id, payload)
            outcome = "found"
            return bundle
        except NotFoundError as exc:
            outcome = "not_found"
            error = str(exc)
            raise
        except SourceError as exc:
            outcome = "malformed" if isinstance(exc, MalformedSecretError) else "error"
            error = str(exc)
            raise
        finally:
            if self._metrics is not None:
                self._metrics.record_source_fetch(SOURCE, time.perf_counter() - start, outcome == "found")
            if self._audit is not None:
                self._audit.log_secret_access(
                    secret_name=name,
                    outcome=outcome,
                    namespace=str(self._namespace),
                    error=error,
                )

    @staticmethod
    def _decode(secret_id: str, payload: Optional[str]) -> dict[str, str]:
        if payload is None or not payload.strip():
            logger.debug("Secret '%s' has no payload, returning empty bundle", secret_id)
            return {}

        try:
            decoded = json.loads(payload)
        except ValueError as exc:
            raise MalformedSecretError(
                f"Secret {secret_id} is not valid JSON: {exc.__class__.__name__}",
                source=SOURCE,
                key=secret_id,
            ) from None

        if not isinstance(decoded, dict):
            raise MalformedSecretError(
                f"Secret {secret_id} is JSON but not an object ({type(decoded).__name__})",
                source=SOURCE,
                key=secret_id,
            )

        return {
            str(field): value if isinstance(value, str) else json.dumps(value)
            for field, value in decoded.items()
        }
