"""Result models for certificate issuance and credential assembly."""

from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta
from types import MappingProxyType
from typing import Any

from cryptography import x509
from cryptography.hazmat.primitives.asymmetric.types import PrivateKeyTypes

from .cert_utils import (
    extract_certificate_metadata,
    get_certificate_serial_hex,
    get_common_name,
    split_pem_certificates,
)


@dataclass(frozen=True)
class IssuanceResult:
    """Raw output of one issue call.

    `data` is the untyped `data` member of the Vault response; the assembler
    performs the typed extraction. Consumed once, never cached.
    """

    data: Mapping[str, Any]
    request_id: str | None = None
    lease_id: str | None = None
    warnings: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "data", MappingProxyType(dict(self.data)))

    @property
    def serial_number(self) -> str | None:
        value = self.data.get("serial_number")
        return value if isinstance(value, str) else None

    @property
    def expiration(self) -> int | None:
        value = self.data.get("expiration")
        return value if isinstance(value, int) and not isinstance(value, bool) else None

    @property
    def private_key_type(self) -> str | None:
        value = self.data.get("private_key_type")
        return value if isinstance(value, str) else None

    @property
    def ca_chain(self) -> tuple[str, ...]:
        value = self.data.get("ca_chain")
        if not isinstance(value, list):
            return ()
        return tuple(item for item in value if isinstance(item, str))


@dataclass(frozen=True)
class PemFields:
    """The three PEM blobs required to build a credential."""

    certificate: str
    issuing_ca: str
    private_key: str = field(repr=False)


@dataclass(frozen=True)
class TLSCredential:
    """Validated certificate chain (leaf first) and its private key.

    Immutable snapshot; rotation replaces the whole object.
    """

    chain: tuple[x509.Certificate, ...]
    private_key: PrivateKeyTypes = field(repr=False)
    chain_pem: bytes = field(repr=False)
    key_pem: bytes = field(repr=False)

    @property
    def leaf(self) -> x509.Certificate:
        return self.chain[0]

    @property
    def issuing_ca(self) -> x509.Certificate:
        return self.chain[1]

    @property
    def common_name(self) -> str | None:
        return get_common_name(self.leaf)

    @property
    def serial_number(self) -> str:
        return get_certificate_serial_hex(self.leaf)

    @property
    def not_valid_after(self) -> datetime:
        return self.leaf.not_valid_after_utc

    def expires_within(self, delta: timedelta, now: datetime | None = None) -> bool:
        """Return True if the leaf expires within `delta` from `now`."""
        now = now or datetime.now(UTC)
        return self.not_valid_after - now <= delta

    def pem_blocks(self) -> list[str]:
        """Decompose chain_pem back into its certificate blocks, leaf first."""
        return split_pem_certificates(self.chain_pem.decode("utf-8"))

    def metadata(self) -> dict[str, str | None]:
        return extract_certificate_metadata(self.leaf)
