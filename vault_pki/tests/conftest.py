"""Test fixtures for vault_pki tests."""

from typing import Any

import pytest
from cryptography import x509
from cryptography.hazmat.primitives.asymmetric import ec, rsa

from vault_pki.lib.models import IssuanceResult
from vault_pki.tests.pki_helpers import build_leaf, build_root_ca, cert_pem, key_pem, make_rsa_key


@pytest.fixture(scope="session")
def root_key() -> rsa.RSAPrivateKey:
    return make_rsa_key()


@pytest.fixture(scope="session")
def root_cert(root_key: rsa.RSAPrivateKey) -> x509.Certificate:
    return build_root_ca(root_key)


@pytest.fixture(scope="session")
def leaf_key() -> rsa.RSAPrivateKey:
    return make_rsa_key()


@pytest.fixture(scope="session")
def other_key() -> rsa.RSAPrivateKey:
    """Key unrelated to any certificate."""
    return make_rsa_key()


@pytest.fixture(scope="session")
def leaf_cert(
    leaf_key: rsa.RSAPrivateKey, root_cert: x509.Certificate, root_key: rsa.RSAPrivateKey
) -> x509.Certificate:
    return build_leaf(leaf_key.public_key(), root_cert, root_key)


@pytest.fixture
def issued_data(
    leaf_cert: x509.Certificate, root_cert: x509.Certificate, leaf_key: rsa.RSAPrivateKey
) -> dict[str, Any]:
    """`data` member of a successful Vault issue response."""
    return {
        "certificate": cert_pem(leaf_cert),
        "issuing_ca": cert_pem(root_cert),
        "ca_chain": [cert_pem(root_cert)],
        "private_key": key_pem(leaf_key),
        "private_key_type": "rsa",
        "serial_number": f"{leaf_cert.serial_number:x}",
        "expiration": int(leaf_cert.not_valid_after_utc.timestamp()),
    }


@pytest.fixture
def vault_response(issued_data: dict[str, Any]) -> dict[str, Any]:
    return {
        "request_id": "8f2a3c1e-0000-4000-8000-000000000001",
        "lease_id": "",
        "renewable": False,
        "lease_duration": 0,
        "data": issued_data,
        "warnings": None,
    }


@pytest.fixture
def issuance_result(issued_data: dict[str, Any]) -> IssuanceResult:
    return IssuanceResult(data=issued_data, request_id="req-1")


@pytest.fixture(scope="session")
def ec_root_key() -> ec.EllipticCurvePrivateKey:
    return ec.generate_private_key(ec.SECP256R1())


@pytest.fixture(scope="session")
def ec_leaf_key() -> ec.EllipticCurvePrivateKey:
    return ec.generate_private_key(ec.SECP256R1())


@pytest.fixture
def ec_issued_data(
    ec_root_key: ec.EllipticCurvePrivateKey, ec_leaf_key: ec.EllipticCurvePrivateKey
) -> dict[str, Any]:
    root = build_root_ca(ec_root_key, common_name="Test EC Root CA")
    leaf = build_leaf(ec_leaf_key.public_key(), root, ec_root_key)
    return {
        "certificate": cert_pem(leaf),
        "issuing_ca": cert_pem(root),
        "private_key": key_pem(ec_leaf_key),
        "private_key_type": "ec",
    }
