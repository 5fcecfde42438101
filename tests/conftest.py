"""Shared test fixtures."""

import pytest
from cryptography.hazmat.primitives.asymmetric import ec

from micropkcs10.csr import Pkcs10
from micropkcs10.oids import HashAlgorithm


@pytest.fixture()
def key_pair():
    """A fixed P-256 key pair as ``(private_key, public_key)``."""
    private_key = ec.derive_private_key(
        0x6C3E2F1A5B4D8E7F90A1B2C3D4E5F60718293A4B5C6D7E8F9012345678ABCDEF,
        ec.SECP256R1(),
    )
    return private_key, private_key.public_key()


@pytest.fixture()
def p384_key_pair():
    """A fixed P-384 key pair as ``(private_key, public_key)``."""
    private_key = ec.derive_private_key(
        0x1F2E3D4C5B6A79880706F5E4D3C2B1A0FFEEDDCCBBAA99887766554433221100112233445566778899AABB,
        ec.SECP384R1(),
    )
    return private_key, private_key.public_key()


@pytest.fixture()
def signed_csr(key_pair):
    return Pkcs10.create_certificate_signing_request(key_pair, "CN=Test,O=TestOrg,C=US")


@pytest.fixture()
def signed_der(signed_csr):
    return signed_csr.encoded


@pytest.fixture()
def p384_csr(p384_key_pair):
    private_key, public_key = p384_key_pair
    csr = Pkcs10(subject="CN=P384 Device", public_key=public_key)
    csr.sign(private_key, HashAlgorithm.SHA384_WITH_ECDSA)
    return csr


@pytest.fixture()
def passphrase_file(tmp_path):
    """Create a temporary passphrase file and return its path."""
    pf = tmp_path / "passphrase.txt"
    pf.write_bytes(b"TestPassphrase123!\n")
    return str(pf)


@pytest.fixture()
def tmp_out_dir(tmp_path):
    """Return a temporary output directory for generated files."""
    return str(tmp_path / "pki")
