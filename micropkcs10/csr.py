"""PKCS#10 Certificate Signing Request model.

A :class:`Pkcs10` is created either empty (to be populated and signed) or
by decoding DER/PEM input, which verifies the self-signature in the same
step. Fields are exposed read-only.

See https://tools.ietf.org/html/rfc2986
"""

from __future__ import annotations

import enum

from cryptography.hazmat.primitives.asymmetric import ec

from .asn1 import Asn1Blob
from .crypto_utils import public_key_to_raw_bytes
from .oids import HashAlgorithm, X9ObjectIdentifier


class CertificateVersion(enum.IntEnum):
    V1 = 0

    def __str__(self) -> str:
        return self.name


class Pkcs10:
    """PKCS#10 Certification Signing Request.

    Args:
        subject: Distinguished Name string, e.g. ``CN=Device,O=Org``.
        public_key: EC public key to certify.
        attributes: Opaque ``[0] Attributes`` value to carry unchanged.
    """

    def __init__(
        self,
        subject: str | None = None,
        public_key: ec.EllipticCurvePublicKey | None = None,
        attributes: Asn1Blob | None = None,
    ) -> None:
        self._version = CertificateVersion.V1
        self._subject = subject
        self._algorithm = X9ObjectIdentifier.ID_EC_PUBLIC_KEY
        self._public_key = public_key
        self._signature_algorithm: HashAlgorithm | None = None
        self._signature_parameters: Asn1Blob | None = None
        self._signature: bytes | None = None
        self._attributes = attributes
        self._signed_payload: bytes | None = None

    @classmethod
    def _restore(cls, **fields) -> Pkcs10:
        csr = cls.__new__(cls)
        for name, value in fields.items():
            setattr(csr, "_" + name, value)
        return csr

    @property
    def version(self) -> CertificateVersion:
        return self._version

    @property
    def subject(self) -> str | None:
        return self._subject

    @property
    def algorithm(self):
        """Public-key algorithm, a PKCS or X9 object identifier member."""
        return self._algorithm

    @property
    def public_key(self) -> ec.EllipticCurvePublicKey | None:
        return self._public_key

    @property
    def signature_algorithm(self) -> HashAlgorithm | None:
        return self._signature_algorithm

    @property
    def signature_parameters(self) -> Asn1Blob | None:
        return self._signature_parameters

    @property
    def signature(self) -> bytes | None:
        return self._signature

    @property
    def attributes(self) -> Asn1Blob | None:
        return self._attributes

    @property
    def signed_payload(self) -> bytes | None:
        """DER of the request info the decoded signature was checked over.

        Set only on decoded requests that have not been signed again.
        """
        return self._signed_payload

    # --- construction ---

    @classmethod
    def from_der(cls, data: bytes) -> Pkcs10:
        """Decode DER bytes and verify the self-signature."""
        from .decoder import decode_and_verify

        return decode_and_verify(data)

    @classmethod
    def from_pem(cls, text: str) -> Pkcs10:
        """Decode a PEM ``CERTIFICATE REQUEST`` and verify it."""
        from .pem import pem_to_der

        return cls.from_der(pem_to_der(text))

    @classmethod
    def load(cls, path: str) -> Pkcs10:
        """Load a PEM-encoded CSR from disk."""
        from .pem import load

        return load(path)

    @classmethod
    def create_certificate_signing_request(cls, key_pair, subject: str) -> Pkcs10:
        """Create a CSR for ``(private_key, public_key)`` signed with SHA-256."""
        from .encoder import create_certificate_signing_request

        return create_certificate_signing_request(key_pair, subject)

    # --- signing and output ---

    def sign(
        self,
        private_key: ec.EllipticCurvePrivateKey,
        hash_algorithm: HashAlgorithm = HashAlgorithm.SHA256_WITH_ECDSA,
    ) -> None:
        """Sign the request info and store the signature on this object.

        The request info is rebuilt from the fields, so a decoded subject
        is written back from its string form: one attribute per RDN, and
        each value in the string type its key maps to.
        """
        from .encoder import sign_payload

        signature = sign_payload(self, private_key, hash_algorithm)
        self._signature_algorithm = hash_algorithm
        self._signature_parameters = None
        self._signature = signature
        self._signed_payload = None

    @property
    def encoded(self) -> bytes:
        """The signed request as DER bytes.

        A decoded request that was not signed again is written with its
        original request info bytes.
        """
        from .encoder import encode

        return encode(self)

    def to_der(self) -> str:
        """The signed request as base64 text of its DER encoding."""
        from .pem import to_der

        return to_der(self)

    def to_pem(self) -> str:
        from .pem import to_pem

        return to_pem(self)

    def save(self, path: str) -> None:
        from .pem import save

        save(self, path)

    # --- comparison and display ---

    def _key_fields(self) -> tuple:
        key = None
        if self._public_key is not None:
            key = (self._public_key.curve.name, public_key_to_raw_bytes(self._public_key))
        return (
            self._version,
            self._subject,
            self._algorithm,
            key,
            self._signature_algorithm,
            self._signature_parameters,
            self._signature,
            self._attributes,
        )

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Pkcs10):
            return NotImplemented
        return self._key_fields() == other._key_fields()

    __hash__ = None

    def __repr__(self) -> str:
        return f"<Pkcs10 subject={self._subject!r} signed={self._signature is not None}>"

    def __str__(self) -> str:
        lines = ["PKCS #10 certificate request:"]
        lines.append(f"Version: {self._version}")
        lines.append(f"Subject: {self._subject or ''}")
        lines.append(f"Algorithm: {self._algorithm or ''}")
        public_key = ""
        if self._public_key is not None:
            raw = public_key_to_raw_bytes(self._public_key)
            public_key = f"{self._public_key.curve.name} {raw.hex().upper()}"
        lines.append(f"Public Key: {public_key}")
        lines.append(f"Signature algorithm: {self._signature_algorithm or ''}")
        lines.append(f"Signature parameters: {self._signature_parameters or ''}")
        lines.append(f"Signature: {(self._signature or b'').hex().upper()}")
        return "\n".join(lines) + "\n"
