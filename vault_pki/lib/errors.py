"""Error taxonomy for certificate issuance and credential assembly."""


class VaultPKIError(Exception):
    """Base class for every error raised by vault_pki."""


class ConfigurationError(VaultPKIError, ValueError):
    """Invalid construction-time parameters. Not retryable."""


class IssuanceTransportError(VaultPKIError, ConnectionError):
    """Network or API failure while talking to Vault.

    Attributes:
        retryable: True when the failure is plausibly transient
            (connectivity, rate limiting, 5xx, sealed Vault)
        errors: Error strings reported by Vault, if any
    """

    def __init__(self, message: str, retryable: bool = True, errors: list[str] | None = None) -> None:
        super().__init__(message)
        self.retryable = retryable
        self.errors = errors or []


class IssuanceEmptyResponseError(VaultPKIError):
    """Vault was reachable but returned no certificate payload."""


class MalformedResponseError(VaultPKIError, ValueError):
    """Issuance payload is missing expected fields or has wrong field types."""


class ChainValidationError(MalformedResponseError):
    """Leaf certificate was not issued by the returned issuing CA."""


class KeyPairMismatchError(VaultPKIError, ValueError):
    """Private key does not match the leaf certificate, or PEM failed to parse."""
