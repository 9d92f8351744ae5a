"""Credential assembler: turns an issuance result into a TLS credential."""

from .cert_utils import (
    load_certificates,
    load_private_key,
    private_key_matches_certificate,
    verify_issued_by,
)
from .errors import KeyPairMismatchError, MalformedResponseError
from .models import IssuanceResult, PemFields, TLSCredential

REQUIRED_FIELDS = ("certificate", "issuing_ca", "private_key")


def extract_pem_fields(result: IssuanceResult) -> PemFields:
    """Pull the three PEM strings out of the untyped response data.

    Raises:
        MalformedResponseError: If a field is missing, not a string, or blank
    """
    values: dict[str, str] = {}
    for name in REQUIRED_FIELDS:
        if name not in result.data:
            raise MalformedResponseError(f"issuance response is missing '{name}'")
        value = result.data[name]
        if not isinstance(value, str):
            raise MalformedResponseError(
                f"issuance response field '{name}' must be a string, got {type(value).__name__}"
            )
        if not value.strip():
            raise MalformedResponseError(f"issuance response field '{name}' is empty")
        values[name] = value
    return PemFields(**values)


def build_chain_pem(fields: PemFields) -> bytes:
    """Concatenate leaf then issuing CA. The order is significant."""
    return (fields.certificate + "\n" + fields.issuing_ca).encode("utf-8")


class CredentialAssembler:
    """Validates issuance results and builds TLSCredential snapshots.

    Stateless aside from its options; safe to share between threads.
    """

    def __init__(self, verify_issuer: bool = True) -> None:
        """Initialize assembler.

        Args:
            verify_issuer: Require the leaf to be signed by the issuing CA
        """
        self.verify_issuer = verify_issuer

    def assemble(self, result: IssuanceResult) -> TLSCredential:
        """Validate one issuance result and build a credential from it.

        Args:
            result: Raw issuance output

        Returns:
            TLSCredential with chain [leaf, issuing CA...] and matching key

        Raises:
            MalformedResponseError: If a PEM field is missing or mistyped
            KeyPairMismatchError: If PEM fails to parse or the key does not match
            ChainValidationError: If verify_issuer is set and the leaf was not
                signed by the issuing CA
        """
        fields = extract_pem_fields(result)

        leaf_certs = load_certificates(fields.certificate.encode("utf-8"))
        if len(leaf_certs) != 1:
            raise MalformedResponseError(
                f"'certificate' must hold exactly one certificate, found {len(leaf_certs)}"
            )

        chain_pem = build_chain_pem(fields)
        chain = load_certificates(chain_pem)
        if len(chain) < 2:
            raise KeyPairMismatchError("issuing CA PEM holds no certificate")

        key_pem = fields.private_key.encode("utf-8")
        private_key = load_private_key(key_pem)
        if not private_key_matches_certificate(private_key, chain[0]):
            raise KeyPairMismatchError("private key does not match leaf certificate public key")

        if self.verify_issuer:
            verify_issued_by(chain[0], chain[1])

        return TLSCredential(
            chain=tuple(chain),
            private_key=private_key,
            chain_pem=chain_pem,
            key_pem=key_pem,
        )


_DEFAULT_ASSEMBLER = CredentialAssembler()


def assemble_credential(result: IssuanceResult) -> TLSCredential:
    """Assemble with default options."""
    return _DEFAULT_ASSEMBLER.assemble(result)
