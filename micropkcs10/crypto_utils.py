"""Cryptographic utility functions: EC keys, key PEM I/O, ECDSA."""

from __future__ import annotations

import os
import platform

from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import ec

from .oids import X9ObjectIdentifier


_ECC_CURVES: dict[int, type[ec.EllipticCurve]] = {
    256: ec.SECP256R1,
    384: ec.SECP384R1,
}

_CURVE_OIDS: dict[str, X9ObjectIdentifier] = {
    ec.SECP256R1.name: X9ObjectIdentifier.PRIME256V1,
    ec.SECP384R1.name: X9ObjectIdentifier.SECP384R1,
}

_CURVES_BY_OID: dict[str, type[ec.EllipticCurve]] = {
    X9ObjectIdentifier.PRIME256V1.value: ec.SECP256R1,
    X9ObjectIdentifier.SECP384R1.value: ec.SECP384R1,
}

# Uncompressed point length (0x04 || X || Y) -> curve.
_CURVES_BY_POINT_SIZE: dict[int, type[ec.EllipticCurve]] = {
    65: ec.SECP256R1,
    97: ec.SECP384R1,
}


def generate_key(key_size: int = 256) -> ec.EllipticCurvePrivateKey:
    """Generate an EC private key on P-256 or P-384.

    Args:
        key_size: Curve size in bits, ``256`` or ``384``.
    """
    curve = _ECC_CURVES.get(key_size)
    if curve is None:
        raise ValueError(f"Unsupported ECC curve size: {key_size}")
    return ec.generate_private_key(curve())


def serialize_private_key(key: ec.EllipticCurvePrivateKey, passphrase: bytes) -> bytes:
    """Serialize a private key to encrypted PEM (PKCS#8)."""
    return key.private_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PrivateFormat.PKCS8,
        encryption_algorithm=serialization.BestAvailableEncryption(passphrase),
    )


def serialize_private_key_unencrypted(key: ec.EllipticCurvePrivateKey) -> bytes:
    """Serialize a private key to unencrypted PEM (PKCS#8)."""
    return key.private_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PrivateFormat.PKCS8,
        encryption_algorithm=serialization.NoEncryption(),
    )


def load_private_key(pem_data: bytes, passphrase: bytes | None = None) -> ec.EllipticCurvePrivateKey:
    """Load a PEM private key and check that it is an EC key."""
    key = serialization.load_pem_private_key(pem_data, password=passphrase)
    if not isinstance(key, ec.EllipticCurvePrivateKey):
        raise ValueError(f"Unsupported key type: {type(key).__name__}")
    return key


def save_private_key(pem_data: bytes, path: str) -> None:
    """Write PEM data to *path* with restricted permissions (0o600)."""
    parent = os.path.dirname(path)
    if parent:
        os.makedirs(parent, exist_ok=True)

    with open(path, "wb") as f:
        f.write(pem_data)

    if platform.system() != "Windows":
        os.chmod(path, 0o600)


def curve_oid(public_key: ec.EllipticCurvePublicKey) -> X9ObjectIdentifier | None:
    """Return the named-curve identifier of *public_key*, if supported."""
    return _CURVE_OIDS.get(public_key.curve.name)


def curve_for_oid(oid: str) -> ec.EllipticCurve | None:
    """Return the curve named by a dotted *oid*, or ``None`` if unsupported."""
    curve_cls = _CURVES_BY_OID.get(oid)
    return curve_cls() if curve_cls is not None else None


def public_key_to_raw_bytes(public_key: ec.EllipticCurvePublicKey) -> bytes:
    """Return the uncompressed X9.62 point of *public_key*."""
    return public_key.public_bytes(
        serialization.Encoding.X962,
        serialization.PublicFormat.UncompressedPoint,
    )


def public_key_from_raw_bytes(
    raw: bytes, curve: ec.EllipticCurve | None = None
) -> ec.EllipticCurvePublicKey:
    """Build a public key from an X9.62 point.

    Without *curve*, the curve is inferred from the uncompressed point size.

    Raises:
        ValueError: If the curve cannot be inferred or the point is invalid.
    """
    if curve is None:
        curve_cls = _CURVES_BY_POINT_SIZE.get(len(raw))
        if curve_cls is None:
            raise ValueError(f"Cannot infer curve from {len(raw)}-byte public key")
        curve = curve_cls()
    return ec.EllipticCurvePublicKey.from_encoded_point(curve, raw)


def ecdsa_sign(
    private_key: ec.EllipticCurvePrivateKey,
    data: bytes,
    algorithm: hashes.HashAlgorithm,
) -> bytes:
    """Sign *data* and return a DER ``Ecdsa-Sig-Value``."""
    return private_key.sign(data, ec.ECDSA(algorithm))


def ecdsa_verify(
    public_key: ec.EllipticCurvePublicKey,
    signature: bytes,
    data: bytes,
    algorithm: hashes.HashAlgorithm,
) -> bool:
    """Return ``True`` if *signature* is valid for *data*."""
    try:
        public_key.verify(signature, data, ec.ECDSA(algorithm))
    except InvalidSignature:
        return False
    return True
