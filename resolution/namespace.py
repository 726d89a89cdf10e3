"""(project, environment) identity shared by all three backing stores."""

from __future__ import annotations

from dataclasses import dataclass

from resolution.errors import InvalidNamespaceError


@dataclass(frozen=True)
class Namespace:
    """
    Scopes every store to one logical deployment.

    Usage:
        ns = Namespace("acme", "prod")
        ns.parameter_prefix   # "/acme/prod"
        ns.secret_prefix      # "acme/prod"
        ns.application_id     # "acme-prod"
    """
    project: str
    environment: str

    def __post_init__(self) -> None:
        for field_name in ("project", "environment"):
            value = getattr(self, field_name)
            if not isinstance(value, str) or not value.strip():
                raise InvalidNamespaceError(
                    f"Namespace {field_name} must be a non-empty string, got {value!r}"
                )

    @property
    def parameter_prefix(self) -> str:
        return f"/{self.project}/{self.environment}"

    @property
    def secret_prefix(self) -> str:
        return f"{self.project}/{self.environment}"

    @property
    def application_id(self) -> str:
        return f"{self.project}-{self.environment}"

    def __str__(self) -> str:
        return self.secret_prefix
