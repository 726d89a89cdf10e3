"""
Narrow capability interfaces for the three backing stores.

Concrete backends translate their own failure modes into the
``resolution.errors`` taxonomy so adapters never see vendor exceptions.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Optional


@dataclass
class ParameterPage:
    """One page of a recursive path listing."""
    parameters: list[tuple[str, str]] = field(default_factory=list)
    next_token: Optional[str] = None


class ParameterSource(ABC):
    """Plain key/value store with recursive, paginated path listing."""

    @abstractmethod
    def get_parameter(self, name: str, with_decryption: bool = False) -> str:
        ...

    @abstractmethod
    def get_parameters_page(
        self,
        path: str,
        with_decryption: bool = False,
        next_token: Optional[str] = None,
    ) -> ParameterPage:
        """Return every descendant of ``path`` (all depths), one page at a time."""
        ...


class SecretSource(ABC):
    """Encrypted secret store."""

    @abstractmethod
    def get_secret_string(self, secret_id: str) -> Optional[str]:
        """Return the string payload, or None if the secret carries none."""
        ...


class FeatureConfigSource(ABC):
    """Versioned feature-configuration distribution service."""

    @abstractmethod
    def get_configuration_content(
        self,
        application: str,
        environment: str,
        profile: str,
    ) -> Optional[bytes]:
        ...
