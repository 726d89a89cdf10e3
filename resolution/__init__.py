"""
Hierarchical configuration resolution.

Aggregates parameters, secrets and feature configuration for one
(project, environment) namespace.
"""

from resolution.errors import (
    AccessDeniedError,
    BackendUnavailableError,
    ConfigResolutionError,
    InvalidNamespaceError,
    MalformedSecretError,
    MandatorySourceFailedError,
    NotFoundError,
    ResolutionTimeoutError,
    SourceError,
)
from resolution.feature_config import FeatureConfigAdapter
from resolution.models import AggregatedConfig, ResolutionWarning
from resolution.namespace import Namespace
from resolution.parameters import ParameterStoreAdapter
from resolution.resolver import ConfigResolver
from resolution.secrets import SecretStoreAdapter

__all__ = [
    "AccessDeniedError",
    "AggregatedConfig",
    "BackendUnavailableError",
    "ConfigResolutionError",
    "ConfigResolver",
    "FeatureConfigAdapter",
    "InvalidNamespaceError",
    "MalformedSecretError",
    "MandatorySourceFailedError",
    "Namespace",
    "NotFoundError",
    "ParameterStoreAdapter",
    "ResolutionTimeoutError",
    "ResolutionWarning",
    "SecretStoreAdapter",
    "SourceError",
]
