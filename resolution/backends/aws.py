"""
AWS-backed sources.

  - SSMParameterSource:        Systems Manager Parameter Store
  - SecretsManagerSource:      Secrets Manager
  - AppConfigSource:           AppConfig (appconfigdata session API)

Region and endpoint are explicit constructor arguments; credentials come
from boto3's default chain. botocore errors are translated into the
``resolution.errors`` taxonomy.
"""

from __future__ import annotations

import logging
from typing import Any, Optional

import boto3
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError

from resolution.backends.base import (
    FeatureConfigSource,
    ParameterPage,
    ParameterSource,
    SecretSource,
)
from resolution.errors import (
    AccessDeniedError,
    BackendUnavailableError,
    NotFoundError,
    SourceError,
)

logger = logging.getLogger("platform.resolution.aws")

DEFAULT_REGION = "us-east-1"

_NOT_FOUND_CODES = {
    "ParameterNotFound",
    "ParameterVersionNotFound",
    "ResourceNotFoundException",
}

_ACCESS_DENIED_CODES = {
    "AccessDenied",
    "AccessDeniedException",
    "UnrecognizedClientException",
    "ExpiredTokenException",
    "DecryptionFailure",
    "InvalidKeyId",
}


def _translate(exc: Exception, *, source: str, key: str) -> SourceError:
    """Map a botocore exception onto the resolution error taxonomy."""
    if isinstance(exc, ClientError):
        code = exc.response.get("Error", {}).get("Code", "")
        message = f"{source} {key}: {code or exc}"
        if code in _NOT_FOUND_CODES:
            return NotFoundError(message, source=source, key=key)
        if code in _ACCESS_DENIED_CODES:
            return AccessDeniedError(message, source=source, key=key)
        return BackendUnavailableError(message, source=source, key=key)
    return BackendUnavailableError(f"{source} {key}: {exc}", source=source, key=key)


def _make_client(
    service: str,
    region: str,
    endpoint_url: Optional[str],
    connect_timeout: float,
    read_timeout: float,
) -> Any:
    return boto3.client(
        service,
        region_name=region,
        endpoint_url=endpoint_url,
        config=Config(
            connect_timeout=connect_timeout,
            read_timeout=read_timeout,
            retries={"mode": "standard"},
        ),
    )


class SSMParameterSource(ParameterSource):
    """AWS Systems Manager Parameter Store."""

    def __init__(
        self,
        region: str = DEFAULT_REGION,
        *,
        endpoint_url: Optional[str] = None,
        client: Any = None,
        connect_timeout: float = 5.0,
        read_timeout: float = 10.0,
    ):
        self._client = client or _make_client("ssm", region, endpoint_url, connect_timeout, read_timeout)

    def get_parameter(self, name: str, with_decryption: bool = False) -> str:
        try:
            response = self._client.get_parameter(Name=name, WithDecryption=with_decryption)
        except (ClientError, BotoCoreError) as exc:
            raise _translate(exc, source="parameters", key=name) from exc
        return response["Parameter"].get("Value", "")

    def get_parameters_page(
        self,
        path: str,
        with_decryption: bool = False,
        next_token: Optional[str] = None,
    ) -> ParameterPage:
        kwargs: dict[str, Any] = {
            "Path": path,
            "Recursive": True,
            "WithDecryption": with_decryption,
        }
        if next_token:
            kwargs["NextToken"] = next_token
        try:
            response = self._client.get_parameters_by_path(**kwargs)
        except (ClientError, BotoCoreError) as exc:
            raise _translate(exc, source="parameters", key=path) from exc

        return ParameterPage(
            parameters=[
                (param["Name"], param.get("Value", ""))
                for param in response.get("Parameters", [])
                if "Name" in param
            ],
            next_token=response.get("NextToken") or None,
        )


class SecretsManagerSource(SecretSource):
    """AWS Secrets Manager."""

    def __init__(
        self,
        region: str = DEFAULT_REGION,
        *,
        endpoint_url: Optional[str] = None,
        client: Any = None,
        connect_timeout: float = 5.0,
        read_timeout: float = 10.0,
    ):
        self._client = client or _make_client(
            "secretsmanager", region, endpoint_url, connect_timeout, read_timeout
        )

    def get_secret_string(self, secret_id: str) -> Optional[str]:
        try:
            response = self._client.get_secret_value(SecretId=secret_id)
        except (ClientError, BotoCoreError) as exc:
            raise _translate(exc, source="secrets", key=secret_id) from exc

        if "SecretString" not in response:
            logger.debug("Secret '%s' has no string payload", secret_id)
            return None
        return response["SecretString"]


class AppConfigSource(FeatureConfigSource):
    """
    AWS AppConfig via the appconfigdata session API.

    Each call opens a fresh session and reads the latest deployed content,
    so no poll token survives between resolution passes.
    """

    def __init__(
        self,
        region: str = DEFAULT_REGION,
        *,
        endpoint_url: Optional[str] = None,
        client: Any = None,
        connect_timeout: float = 5.0,
        read_timeout: float = 10.0,
    ):
        self._client = client or _make_client(
            "appconfigdata", region, endpoint_url, connect_timeout, read_timeout
        )

    def get_configuration_content(
        self,
        application: str,
        environment: str,
        profile: str,
    ) -> Optional[bytes]:
        key = f"{application}/{environment}/{profile}"
        try:
            session = self._client.start_configuration_session(
                ApplicationIdentifier=application,
                EnvironmentIdentifier=environment,
                ConfigurationProfileIdentifier=profile,
            )
            response = self._client.get_latest_configuration(
                ConfigurationToken=session["InitialConfigurationToken"],
            )
            body = response.get("Configuration")
            content = body.read() if body is not None else None
        except (ClientError, BotoCoreError) as exc:
            raise _translate(exc, source="feature_config", key=key) from exc

        return content or None
