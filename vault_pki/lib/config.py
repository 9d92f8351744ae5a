"""Issuance request and Vault connection configuration dataclasses."""

import os
from collections.abc import Mapping
from dataclasses import dataclass, field
from urllib.parse import urlparse

from ._types import IssuePayload
from .errors import ConfigurationError

DEFAULT_VAULT_ADDRESS = "https://127.0.0.1:8200"
DEFAULT_TIMEOUT_SECONDS = 60

_TRUTHY = {"1", "true", "yes"}


@dataclass(frozen=True)
class IssuanceRequest:
    """Static issuance parameters, captured once at client construction."""

    mount: str
    role: str
    common_name: str
    ttl: str | int

    def __post_init__(self) -> None:
        mount = self.mount.strip("/") if isinstance(self.mount, str) else ""
        role = self.role.strip("/") if isinstance(self.role, str) else ""
        if not mount:
            raise ConfigurationError("mount path must be non-empty")
        if not role:
            raise ConfigurationError("role name must be non-empty")
        if not isinstance(self.common_name, str) or not self.common_name.strip():
            raise ConfigurationError("common name must be non-empty")

        object.__setattr__(self, "mount", mount)
        object.__setattr__(self, "role", role)
        object.__setattr__(self, "ttl", _normalize_ttl(self.ttl))

    @property
    def path(self) -> str:
        """Vault API path of the issue endpoint: <mount>/issue/<role>."""
        return f"{self.mount}/issue/{self.role}"

    def to_payload(self) -> IssuePayload:
        """Build a fresh request body for one issue call."""
        return IssuePayload(common_name=self.common_name, ttl=str(self.ttl))


def _normalize_ttl(ttl: object) -> str:
    # bool is an int subclass; True is not a TTL
    if isinstance(ttl, bool):
        raise ConfigurationError("ttl must be a string or integer")
    if isinstance(ttl, int):
        if ttl <= 0:
            raise ConfigurationError(f"ttl must be positive, got {ttl}")
        return str(ttl)
    if isinstance(ttl, str) and ttl.strip():
        return ttl.strip()
    raise ConfigurationError("ttl must be non-empty")


@dataclass
class VaultConnectionConfig:
    """Connection settings for reaching Vault itself.

    `verify` controls TLS verification of the Vault endpoint (not of the
    issued certificate): True, False, or a path to a CA bundle.
    """

    address: str = DEFAULT_VAULT_ADDRESS
    token: str | None = field(default=None, repr=False)
    verify: bool | str = True
    timeout: int = DEFAULT_TIMEOUT_SECONDS
    namespace: str | None = None

    def validate(self) -> None:
        """Raise ConfigurationError if the settings cannot produce a client."""
        parsed = urlparse(self.address or "")
        if parsed.scheme not in ("http", "https") or not parsed.netloc:
            raise ConfigurationError(f"invalid Vault address: {self.address!r}")
        if self.timeout <= 0:
            raise ConfigurationError(f"timeout must be positive, got {self.timeout}")

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "VaultConnectionConfig":
        """Build configuration from VAULT_* variables.

        Args:
            environ: Mapping to read from (default: os.environ)

        Returns:
            VaultConnectionConfig populated from the mapping

        Raises:
            ConfigurationError: If VAULT_CLIENT_TIMEOUT is not an integer
        """
        env = os.environ if environ is None else environ

        verify: bool | str = True
        if env.get("VAULT_CACERT"):
            verify = env["VAULT_CACERT"]
        if env.get("VAULT_SKIP_VERIFY", "").strip().lower() in _TRUTHY:
            verify = False

        raw_timeout = env.get("VAULT_CLIENT_TIMEOUT")
        timeout = DEFAULT_TIMEOUT_SECONDS
        if raw_timeout:
            try:
                timeout = int(raw_timeout)
            except ValueError as e:
                raise ConfigurationError(
                    f"VAULT_CLIENT_TIMEOUT must be an integer, got {raw_timeout!r}"
                ) from e

        return cls(
            address=env.get("VAULT_ADDR") or DEFAULT_VAULT_ADDRESS,
            token=env.get("VAULT_TOKEN") or None,
            verify=verify,
            timeout=timeout,
            namespace=env.get("VAULT_NAMESPACE") or None,
        )
