"""Build server-side ssl.SSLContext objects from assembled credentials."""

import os
import ssl
import tempfile
from pathlib import Path

from .errors import KeyPairMismatchError
from .models import TLSCredential


def _write_private(path: Path, content: bytes) -> None:
    fd = os.open(path, os.O_WRONLY | os.O_CREAT | os.O_EXCL, 0o600)
    with os.fdopen(fd, "wb") as f:
        f.write(content)


def build_server_ssl_context(
    credential: TLSCredential,
    minimum_version: ssl.TLSVersion = ssl.TLSVersion.TLSv1_2,
) -> ssl.SSLContext:
    """Create a server SSLContext serving the credential's chain and key.

    ssl can only load certificate chains from files, so the PEM is written to
    a private temporary directory that is removed once loaded.

    Args:
        credential: Assembled credential (chain leaf first)
        minimum_version: Lowest TLS version to accept

    Returns:
        SSLContext ready to wrap server sockets

    Raises:
        KeyPairMismatchError: If OpenSSL rejects the chain or key
    """
    context = ssl.SSLContext(ssl.PROTOCOL_TLS_SERVER)
    context.minimum_version = minimum_version

    with tempfile.TemporaryDirectory(prefix="vault-pki-") as tmp:
        chain_path = Path(tmp) / "chain.pem"
        key_path = Path(tmp) / "key.pem"
        _write_private(chain_path, credential.chain_pem)
        _write_private(key_path, credential.key_pem)
        try:
            context.load_cert_chain(certfile=chain_path, keyfile=key_path)
        except ssl.SSLError as e:
            raise KeyPairMismatchError(f"TLS stack rejected credential: {e}") from e

    return context
