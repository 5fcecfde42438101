"""Build the DER encoding of a CSR and drive the signing step."""

from __future__ import annotations

import logging

from cryptography.hazmat.primitives.asymmetric import ec
from pyasn1.type import univ
from pyasn1_modules import rfc5280

from . import asn1
from .crypto_utils import curve_oid, ecdsa_sign, public_key_to_raw_bytes
from .csr import Pkcs10
from .errors import CertificateError, Pkcs10StateError
from .names import encode_subject
from .oids import SUPPORTED_SIGNATURE_ALGORITHMS, HashAlgorithm, X9ObjectIdentifier

logger = logging.getLogger(__name__)


def build_signable_payload(csr: Pkcs10) -> asn1.CertificationRequestInfo:
    """Build ``CertificationRequestInfo`` from the fields of *csr*.

    The same structure is signed and embedded in the final encoding.
    """
    if csr.subject is None:
        raise Pkcs10StateError("Subject is not set.")
    if csr.public_key is None:
        raise Pkcs10StateError("Public key is not set.")

    named_curve = curve_oid(csr.public_key)
    if named_curve is None:
        raise CertificateError(f"Unsupported elliptic curve: {csr.public_key.curve.name}")

    try:
        subject = encode_subject(csr.subject)
    except ValueError as exc:
        raise Pkcs10StateError(f"Invalid subject {csr.subject!r}: {exc}") from exc

    req_info = asn1.CertificationRequestInfo()
    req_info["version"] = int(csr.version)
    req_info["subject"] = subject

    spki = req_info["subjectPKInfo"]
    spki["algorithm"]["algorithm"] = X9ObjectIdentifier.ID_EC_PUBLIC_KEY.value
    spki["algorithm"]["parameters"] = asn1.encode(univ.ObjectIdentifier(named_curve.value))
    spki["subjectPublicKey"] = univ.BitString.fromOctetString(
        public_key_to_raw_bytes(csr.public_key)
    )

    attributes = csr.attributes.der if csr.attributes is not None else asn1.EMPTY_ATTRIBUTES
    req_info["attributes"] = asn1.decode(attributes, asn1.attributes_spec())
    return req_info


def sign_payload(
    csr: Pkcs10,
    private_key: ec.EllipticCurvePrivateKey,
    hash_algorithm: HashAlgorithm,
) -> bytes:
    """Return the ECDSA signature of the DER payload of *csr*."""
    if hash_algorithm not in SUPPORTED_SIGNATURE_ALGORITHMS:
        raise CertificateError(f"Invalid signature algorithm. {hash_algorithm}")
    if csr.public_key is not None and (
        public_key_to_raw_bytes(private_key.public_key())
        != public_key_to_raw_bytes(csr.public_key)
    ):
        raise Pkcs10StateError("Private key does not match the request public key.")

    data = asn1.encode(build_signable_payload(csr))
    signature = ecdsa_sign(private_key, data, hash_algorithm.hash)
    logger.debug("Signed CSR for %r with %s", csr.subject, hash_algorithm)
    return signature


def encode(csr: Pkcs10) -> bytes:
    """Return the DER encoding of a signed *csr*.

    Raises:
        Pkcs10StateError: If *csr* has not been signed.
    """
    if csr.signature is None:
        raise Pkcs10StateError("Sign first.")

    payload = csr.signed_payload
    if payload is None:
        payload = asn1.encode(build_signable_payload(csr))

    algorithm = rfc5280.AlgorithmIdentifier()
    algorithm["algorithm"] = csr.signature_algorithm.value
    if csr.signature_parameters is not None:
        algorithm["parameters"] = csr.signature_parameters.der

    signature = univ.BitString.fromOctetString(csr.signature)
    return asn1.sequence(payload, asn1.encode(algorithm), asn1.encode(signature))


def create_certificate_signing_request(key_pair, subject: str) -> Pkcs10:
    """Create a CSR for *subject* signed with ECDSA/SHA-256.

    Args:
        key_pair: ``(private_key, public_key)`` tuple.
        subject: Distinguished Name string.
    """
    private_key, public_key = key_pair
    csr = Pkcs10(subject=subject, public_key=public_key)
    csr.sign(private_key, HashAlgorithm.SHA256_WITH_ECDSA)
    logger.info("Created certificate signing request for %s", subject)
    return csr
