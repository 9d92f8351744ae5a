"""Type definitions for the Vault PKI issue endpoint wire format."""

from typing import NotRequired, TypedDict


class IssuePayload(TypedDict):
    """Request body for POST /v1/<mount>/issue/<role>."""

    common_name: str
    ttl: str


class IssuedCertificateData(TypedDict, total=False):
    """`data` member of a successful issue response."""

    certificate: str
    issuing_ca: str
    ca_chain: list[str]
    private_key: str
    private_key_type: str
    serial_number: str
    expiration: int


class VaultSecretResponse(TypedDict):
    """Top-level Vault logical response."""

    request_id: str
    lease_id: str
    renewable: bool
    lease_duration: int
    data: IssuedCertificateData | None
    warnings: NotRequired[list[str] | None]
