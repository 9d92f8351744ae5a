"""Vault transport for the PKI issue endpoint."""

import logging
from collections.abc import Mapping
from typing import Protocol, cast

import hvac
import requests
from hvac import exceptions as hvac_exceptions

from ._types import VaultSecretResponse
from .config import VaultConnectionConfig
from .errors import ConfigurationError, IssuanceTransportError

logger = logging.getLogger(__name__)

_RETRYABLE_VAULT_ERRORS = (
    hvac_exceptions.RateLimitExceeded,
    hvac_exceptions.InternalServerError,
    hvac_exceptions.BadGateway,
    hvac_exceptions.VaultDown,
)


class IssuanceTransport(Protocol):
    """Executes one write call and returns the raw response body."""

    def write(self, path: str, data: Mapping[str, str]) -> VaultSecretResponse | None: ...


class VaultTransport:
    """hvac-backed transport. Single attempt per call, no retries."""

    def __init__(self, config: VaultConnectionConfig) -> None:
        """Initialize hvac client.

        Args:
            config: Vault address, token, TLS verification and timeout

        Raises:
            ConfigurationError: If the client cannot be constructed
        """
        config.validate()
        self.config = config
        try:
            self.client = hvac.Client(
                url=config.address,
                token=config.token,
                verify=config.verify,
                timeout=config.timeout,
                namespace=config.namespace,
            )
        except (TypeError, ValueError) as e:
            raise ConfigurationError(f"failed to construct Vault client: {e}") from e

    @property
    def address(self) -> str:
        return self.config.address

    def write(self, path: str, data: Mapping[str, str]) -> VaultSecretResponse | None:
        """POST data to a Vault logical path.

        Args:
            path: Logical path, e.g. 'pki/issue/web'
            data: Request body

        Returns:
            Parsed JSON body, or None when Vault replied without one (HTTP 204)

        Raises:
            IssuanceTransportError: On connection failure or a Vault error status
        """
        try:
            response = self.client.write_data(path, data=dict(data))
        except requests.exceptions.RequestException as e:
            raise IssuanceTransportError(
                f"failed to reach Vault at {self.config.address}: {e}", retryable=True
            ) from e
        except hvac_exceptions.VaultError as e:
            raise IssuanceTransportError(
                f"Vault rejected write to {path}: {e}",
                retryable=isinstance(e, _RETRYABLE_VAULT_ERRORS),
                errors=list(e.errors) if isinstance(e.errors, list) else [str(e)],
            ) from e

        if not isinstance(response, dict):
            logger.debug("Vault write to %s returned no JSON body", path)
            return None
        return cast(VaultSecretResponse, response)
