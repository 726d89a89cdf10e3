from resolution.backends.base import (
    FeatureConfigSource,
    ParameterPage,
    ParameterSource,
    SecretSource,
)
from resolution.backends.memory import (
    InMemoryFeatureConfigSource,
    InMemoryParameterSource,
    InMemorySecretSource,
)

__all__ = [
    "FeatureConfigSource",
    "ParameterPage",
    "ParameterSource",
    "SecretSource",
    "InMemoryFeatureConfigSource",
    "InMemoryParameterSource",
    "InMemorySecretSource",
]
