"""Object identifier tables for public-key and signature algorithms.

Each table is an :class:`enum.Enum` whose values are dotted OID strings.
Public-key algorithms live in two namespaces (PKCS and X9.62); an EC key
is usually tagged with the X9.62 ``id-ecPublicKey`` identifier, so the
decoder resolves through an ordered list of tables.
"""

from __future__ import annotations

import enum
from typing import Callable, Iterable, Optional

from cryptography.hazmat.primitives import hashes


class _OidEnum(enum.Enum):
    @classmethod
    def from_string(cls, oid: str):
        """Return the member for *oid*, or ``None`` if the table lacks it."""
        try:
            return cls(str(oid))
        except ValueError:
            return None

    def __str__(self) -> str:
        return self.name


class PkcsObjectIdentifier(_OidEnum):
    RSA_ENCRYPTION = "1.2.840.113549.1.1.1"
    RSASSA_PSS = "1.2.840.113549.1.1.10"
    ID_DSA = "1.2.840.10040.4.1"
    DH_PUBLIC_NUMBER = "1.2.840.10046.2.1"
    X25519 = "1.3.101.110"
    X448 = "1.3.101.111"
    ED25519 = "1.3.101.112"
    ED448 = "1.3.101.113"


class X9ObjectIdentifier(_OidEnum):
    ID_EC_PUBLIC_KEY = "1.2.840.10045.2.1"
    PRIME256V1 = "1.2.840.10045.3.1.7"
    SECP384R1 = "1.3.132.0.34"
    ECDSA_WITH_SHA256 = "1.2.840.10045.4.3.2"
    ECDSA_WITH_SHA384 = "1.2.840.10045.4.3.3"


class HashAlgorithm(_OidEnum):
    """Signature schemes as they appear in ``signatureAlgorithm``."""

    SHA1_WITH_RSA = "1.2.840.113549.1.1.5"
    SHA256_WITH_RSA = "1.2.840.113549.1.1.11"
    SHA384_WITH_RSA = "1.2.840.113549.1.1.12"
    SHA512_WITH_RSA = "1.2.840.113549.1.1.13"
    SHA256_WITH_ECDSA = "1.2.840.10045.4.3.2"
    SHA384_WITH_ECDSA = "1.2.840.10045.4.3.3"
    SHA512_WITH_ECDSA = "1.2.840.10045.4.3.4"

    @property
    def hash(self) -> hashes.HashAlgorithm:
        return _DIGESTS[self]()


_DIGESTS = {
    HashAlgorithm.SHA1_WITH_RSA: hashes.SHA1,
    HashAlgorithm.SHA256_WITH_RSA: hashes.SHA256,
    HashAlgorithm.SHA384_WITH_RSA: hashes.SHA384,
    HashAlgorithm.SHA512_WITH_RSA: hashes.SHA512,
    HashAlgorithm.SHA256_WITH_ECDSA: hashes.SHA256,
    HashAlgorithm.SHA384_WITH_ECDSA: hashes.SHA384,
    HashAlgorithm.SHA512_WITH_ECDSA: hashes.SHA512,
}

# Signature schemes a CSR may be signed or verified with.
SUPPORTED_SIGNATURE_ALGORITHMS = frozenset({
    HashAlgorithm.SHA256_WITH_ECDSA,
    HashAlgorithm.SHA384_WITH_ECDSA,
})

# Tried in order when resolving subjectPublicKeyInfo.algorithm.
PUBLIC_KEY_RESOLVERS: tuple[Callable[[str], Optional[_OidEnum]], ...] = (
    PkcsObjectIdentifier.from_string,
    X9ObjectIdentifier.from_string,
)


def resolve_oid(
    oid: str,
    resolvers: Iterable[Callable[[str], Optional[_OidEnum]]] = PUBLIC_KEY_RESOLVERS,
) -> Optional[_OidEnum]:
    """Return the first non-``None`` resolution of *oid*, or ``None``."""
    for resolver in resolvers:
        member = resolver(oid)
        if member is not None:
            return member
    return None
