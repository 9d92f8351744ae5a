"""Issuance client: requests a certificate from Vault PKI and assembles it."""

import logging
from collections.abc import Mapping

from .assembler import CredentialAssembler
from .config import IssuanceRequest, VaultConnectionConfig
from .errors import IssuanceEmptyResponseError, MalformedResponseError
from .models import IssuanceResult, TLSCredential
from .vault_client import IssuanceTransport, VaultTransport

logger = logging.getLogger(__name__)


class IssuanceClient:
    """Issues leaf certificates for one mount/role/common name.

    Each call is a single attempt; retry and backoff are the caller's
    decision.
    """

    def __init__(
        self,
        mount: str,
        role: str,
        common_name: str,
        ttl: str | int,
        connection: VaultConnectionConfig | None = None,
        transport: IssuanceTransport | None = None,
        assembler: CredentialAssembler | None = None,
    ) -> None:
        """Initialize issuance client.

        Args:
            mount: PKI secrets engine mount path (e.g., 'pki' or 'pki/int')
            role: PKI role name
            common_name: Subject CN to request
            ttl: Requested validity ('3600', '1h' or 3600)
            connection: Vault connection settings (ignored if transport given)
            transport: Pre-built transport, e.g. a fake in tests
            assembler: Credential assembler (default: verifies issuer)

        Raises:
            ConfigurationError: If parameters are invalid or the Vault client
                cannot be constructed
        """
        self.request = IssuanceRequest(mount=mount, role=role, common_name=common_name, ttl=ttl)
        self.transport: IssuanceTransport = transport or VaultTransport(
            connection or VaultConnectionConfig()
        )
        self.assembler = assembler or CredentialAssembler()

    @classmethod
    def from_env(
        cls,
        mount: str,
        role: str,
        common_name: str,
        ttl: str | int,
        environ: Mapping[str, str] | None = None,
    ) -> "IssuanceClient":
        """Build a client using VAULT_* environment configuration."""
        return cls(
            mount,
            role,
            common_name,
            ttl,
            connection=VaultConnectionConfig.from_env(environ),
        )

    @property
    def path(self) -> str:
        return self.request.path

    def issue_certificate(self) -> IssuanceResult:
        """Issue a new certificate and return the raw result.

        Returns:
            IssuanceResult wrapping the response `data` member

        Raises:
            IssuanceTransportError: If Vault is unreachable or returns an error
            IssuanceEmptyResponseError: If the response is not an object or
                carries no certificate payload
            MalformedResponseError: If `data` is present but not an object
        """
        response = self.transport.write(self.request.path, self.request.to_payload())
        if not isinstance(response, Mapping) or not response:
            raise IssuanceEmptyResponseError(
                f"failed to issue new certificate from Vault: empty response from {self.request.path}"
            )

        data = response.get("data")
        if data is None or data == {}:
            raise IssuanceEmptyResponseError(
                f"failed to issue new certificate from Vault: no data in response from {self.request.path}"
            )
        if not isinstance(data, Mapping):
            raise MalformedResponseError(
                f"issuance response 'data' must be an object, got {type(data).__name__}"
            )

        raw_warnings = response.get("warnings")
        warnings = tuple(str(w) for w in raw_warnings) if isinstance(raw_warnings, list) else ()
        for warning in warnings:
            logger.warning("Vault warning for %s: %s", self.request.path, warning)

        result = IssuanceResult(
            data=data,
            request_id=response.get("request_id"),
            lease_id=response.get("lease_id"),
            warnings=warnings,
        )
        logger.info(
            "Issued certificate for %s via %s (serial=%s)",
            self.request.common_name,
            self.request.path,
            result.serial_number,
        )
        return result

    def refresh_credential(self) -> TLSCredential:
        """Issue a certificate and assemble it into a TLS credential.

        Raises:
            The first error from issue_certificate() or the assembler,
            unchanged.
        """
        result = self.issue_certificate()
        return self.assembler.assemble(result)
