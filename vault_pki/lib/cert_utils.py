"""Certificate utility functions for PEM parsing, key matching, and metadata extraction."""

from cryptography import x509
from cryptography.exceptions import InvalidSignature, UnsupportedAlgorithm
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric.types import (
    CertificatePublicKeyTypes,
    PrivateKeyTypes,
)

from .errors import ChainValidationError, KeyPairMismatchError

PEM_CERTIFICATE_FOOTER = "-----END CERTIFICATE-----"


def load_certificates(pem_data: bytes) -> list[x509.Certificate]:
    """Parse every certificate in a PEM bundle, preserving order.

    Raises:
        KeyPairMismatchError: If the bundle holds no parseable certificate
    """
    try:
        certs = x509.load_pem_x509_certificates(pem_data)
    except ValueError as e:
        raise KeyPairMismatchError(f"failed to parse certificate PEM: {e}") from e
    if not certs:
        raise KeyPairMismatchError("no certificate found in PEM data")
    return certs


def load_private_key(pem_data: bytes) -> PrivateKeyTypes:
    """Parse an unencrypted PEM private key of any supported type."""
    try:
        return serialization.load_pem_private_key(pem_data, password=None)
    except (ValueError, TypeError, UnsupportedAlgorithm) as e:
        raise KeyPairMismatchError(f"failed to parse private key PEM: {e}") from e


def public_key_der(key: CertificatePublicKeyTypes) -> bytes:
    """Return DER SubjectPublicKeyInfo bytes for comparison."""
    return key.public_bytes(
        encoding=serialization.Encoding.DER,
        format=serialization.PublicFormat.SubjectPublicKeyInfo,
    )


def private_key_matches_certificate(key: PrivateKeyTypes, cert: x509.Certificate) -> bool:
    """Check that the key's public half is the certificate's public key."""
    try:
        return public_key_der(key.public_key()) == public_key_der(cert.public_key())
    except (ValueError, UnsupportedAlgorithm):
        return False


def verify_issued_by(leaf: x509.Certificate, issuer: x509.Certificate) -> None:
    """Verify the leaf is directly signed by issuer.

    Raises:
        ChainValidationError: If the issuer name or signature does not match
    """
    try:
        leaf.verify_directly_issued_by(issuer)
    except (ValueError, TypeError, InvalidSignature) as e:
        raise ChainValidationError(
            f"leaf certificate is not issued by {get_common_name(issuer) or 'issuing CA'}: {e}"
        ) from e


def split_pem_certificates(pem_text: str) -> list[str]:
    """Split a PEM bundle into its certificate blocks, in order."""
    blocks = []
    for chunk in pem_text.split(PEM_CERTIFICATE_FOOTER):
        start = chunk.find("-----BEGIN CERTIFICATE-----")
        if start == -1:
            continue
        blocks.append(chunk[start:] + PEM_CERTIFICATE_FOOTER)
    return blocks


def get_common_name(cert: x509.Certificate) -> str | None:
    """Return the subject CN of a certificate, if present."""
    attrs = cert.subject.get_attributes_for_oid(x509.NameOID.COMMON_NAME)
    if not attrs:
        return None
    value = attrs[0].value
    return value if isinstance(value, str) else value.decode("utf-8")


def get_certificate_serial_hex(cert: x509.Certificate) -> str:
    """Return certificate serial number as hex with colons (e.g., 3a:f2:b1:...).

    Lowercase to match the serial_number field Vault returns.
    """
    serial_hex = f"{cert.serial_number:x}"
    if len(serial_hex) % 2 != 0:
        serial_hex = "0" + serial_hex
    return ":".join(serial_hex[i : i + 2] for i in range(0, len(serial_hex), 2))


def extract_certificate_metadata(cert: x509.Certificate) -> dict[str, str | None]:
    """Extract loggable certificate metadata (never key material)."""
    return {
        "serialNumber": get_certificate_serial_hex(cert),
        "commonName": get_common_name(cert),
        "issuer": cert.issuer.rfc4514_string(),
        "notBefore": cert.not_valid_before_utc.isoformat(),
        "expiry": cert.not_valid_after_utc.isoformat(),
    }
