"""
Structured audit logging — JSON Lines (JSONL) format.

Provides an append-only audit trail for:
  - Secret access (name and outcome only, never values)
  - Configuration resolution passes
"""

from __future__ import annotations

import json
import logging
import threading
import uuid
from datetime import datetime, timezone
from functools import lru_cache
from pathlib import Path
from typing import Any, Optional


class AuditLogger:
    """
    Append-only structured audit logger.

    Writes JSON Lines to a file and optionally to Python logging.
    Each log entry is a self-contained JSON object with:
      - event_id, timestamp, event_type, severity, source, namespace, details
    """

    def __init__(
        self,
        log_file: str = "logs/audit.jsonl",
        enabled: bool = True,
        also_log_to_python: bool = True,
    ):
        self._enabled = enabled
        self._also_log = also_log_to_python
        self._lock = threading.Lock()
        self._logger = logging.getLogger("platform.audit")

        if enabled:
            path = Path(log_file)
            path.parent.mkdir(parents=True, exist_ok=True)
            self._file_path: Optional[Path] = path
        else:
            self._file_path = None

    def log_event(
        self,
        event_type: str,
        *,
        details: Optional[dict[str, Any]] = None,
        namespace: str = "",
        severity: str = "info",
        source: str = "",
    ) -> dict[str, Any]:
        """
        Write a structured audit event.

        Returns the event dict (useful for testing).
        """
        event = {
            "event_id": str(uuid.uuid4()),
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "event_type": event_type,
            "severity": severity,
            "source": source,
            "namespace": namespace,
            "details": details or {},
        }

        if not self._enabled:
            return event

        line = json.dumps(event, default=str, separators=(",", ":"))

        with self._lock:
            if self._file_path:
                with open(self._file_path, "a", encoding="utf-8") as f:
                    f.write(line + "\n")

        if self._also_log:
            log_level = getattr(logging, severity.upper(), logging.INFO)
            self._logger.log(log_level, "[AUDIT:%s] %s", event_type, json.dumps(details or {}, default=str))

        return event

    def log_secret_access(
        self,
        *,
        secret_name: str,
        outcome: str,
        namespace: str = "",
        error: Optional[str] = None,
    ) -> dict[str, Any]:
        return self.log_event(
            "secret_access",
            details={"secret_name": secret_name, "outcome": outcome, "error": error},
            namespace=namespace,
            severity="info" if outcome == "found" else "warning",
            source="security",
        )

    def log_resolution(
        self,
        *,
        namespace: str,
        duration_ms: float,
        success: bool,
        parameter_count: int = 0,
        secret_names: Optional[list[str]] = None,
        feature_keys: int = 0,
        warnings: Optional[list[str]] = None,
        error: Optional[str] = None,
    ) -> dict[str, Any]:
        return self.log_event(
            "config_resolution",
            details={
                "duration_ms": round(duration_ms, 2),
                "success": success,
                "parameter_count": parameter_count,
                "secret_names": secret_names or [],
                "feature_keys": feature_keys,
                "warnings": warnings or [],
                "error": error,
            },
            namespace=namespace,
            severity="error" if error else "info",
            source="resolver",
        )


@lru_cache(maxsize=1)
def get_audit_logger() -> AuditLogger:
    from config.settings import get_settings
    settings = get_settings()
    return AuditLogger(
        log_file=settings.audit_log_file,
        enabled=settings.audit_log_enabled,
    )
