"""
Parameter store adapter.

Exposes keys relative to the namespace prefix and hides pagination:
a path listing either returns every page or fails as a whole.
"""

from __future__ import annotations

import dataclasses
import logging
import time
from typing import Optional

from infrastructure.metrics.collector import MetricsCollector
from infrastructure.resilience.retry import RetryConfig, retry_with_backoff
from resolution.backends.base import ParameterSource
from resolution.errors import BackendUnavailableError
from resolution.namespace import Namespace

logger = logging.getLogger("platform.resolution.parameters")

SOURCE = "parameters"


class ParameterStoreAdapter:
    """Namespace-scoped reads from a ``ParameterSource``."""

    def __init__(
        self,
        namespace: Namespace,
        source: ParameterSource,
        *,
        retry: Optional[RetryConfig] = None,
        metrics: Optional[MetricsCollector] = None,
    ):
        self._namespace = namespace
        self._source = source
        self._retry = dataclasses.replace(
            retry or RetryConfig(),
            retryable_exceptions=(BackendUnavailableError,),
        )
        self._metrics = metrics

    @property
    def namespace(self) -> Namespace:
        return self._namespace

    def _full_path(self, subpath: str) -> str:
        subpath = subpath.strip("/")
        prefix = self._namespace.parameter_prefix
        return f"{prefix}/{subpath}" if subpath else prefix

    def get_parameter(self, key: str, decrypt: bool = False) -> str:
        """
        Fetch a single value at ``<prefix>/<key>``.

        Raises NotFoundError, AccessDeniedError or BackendUnavailableError.
        """
        name = self._full_path(key)
        fetch = retry_with_backoff(self._retry)(self._source.get_parameter)
        start = time.perf_counter()
        success = False
        try:
            value = fetch(name, decrypt)
            success = True
            return value
        finally:
            self._record(start, success)

    def get_parameters_by_path(self, subpath: str = "", decrypt: bool = False) -> dict[str, str]:
        """
        Recursively list every parameter under ``<prefix>/<subpath>``.

        Keys are relative to that path; an empty listing is ``{}``.
        """
        full_path = self._full_path(subpath)
        strip = full_path + "/"
        fetch_page = retry_with_backoff(self._retry)(self._source.get_parameters_page)

        params: dict[str, str] = {}
        pages = 0
        next_token: Optional[str] = None
        seen_tokens: set[str] = set()
        start = time.perf_counter()
        success = False
        try:
            while True:
                page = fetch_page(full_path, decrypt, next_token)
                pages += 1
                for name, value in page.parameters:
                    if not name.startswith(strip):
                        logger.debug("Ignoring %s outside %s", name, full_path)
                        continue
                    key = name[len(strip):]
                    if key:
                        params[key] = value
                next_token = page.next_token
                if not next_token:
                    break
                if next_token in seen_tokens:
                    raise BackendUnavailableError(
                        f"Pagination token repeated while listing {full_path}",
                        source=SOURCE,
                        key=full_path,
                    )
                seen_tokens.add(next_token)
            success = True
        finally:
            self._record(start, success)

        logger.debug("Loaded %d parameters under %s (%d pages)", len(params), full_path, pages)
        return params

    def _record(self, start: float, success: bool) -> None:
        if self._metrics is not None:
            self._metrics.record_source_fetch(SOURCE, time.perf_counter() - start, success)
