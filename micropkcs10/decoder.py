"""Decode a DER CSR and verify its self-signature in one step.

The signature is checked over the DER re-encoding of the decoded
``CertificationRequestInfo`` node. Nothing is returned unless every step
succeeds.
"""

from __future__ import annotations

import logging

from . import asn1
from .crypto_utils import curve_for_oid, ecdsa_verify, public_key_from_raw_bytes
from .csr import CertificateVersion, Pkcs10
from .errors import CertificateError, InvalidSignatureError, Pkcs10FormatError
from .names import subject_to_string
from .oids import (
    PUBLIC_KEY_RESOLVERS,
    SUPPORTED_SIGNATURE_ALGORITHMS,
    HashAlgorithm,
    X9ObjectIdentifier,
    resolve_oid,
)

logger = logging.getLogger(__name__)


def decode_and_verify(data: bytes) -> Pkcs10:
    """Decode *data* as a PKCS#10 request and verify its signature.

    Raises:
        Pkcs10FormatError: If the input is not a well-formed CSR.
        CertificateError: If an algorithm is not supported.
        InvalidSignatureError: If the self-signature does not verify.
    """
    data = bytes(data)
    if len(data) > asn1.MAX_CSR_SIZE:
        raise Pkcs10FormatError(
            f"CSR is {len(data)} bytes, larger than the {asn1.MAX_CSR_SIZE}-byte limit."
        )

    if _check_shape(data) == 3:
        request = asn1.decode(data, asn1.ThreeComponentRequest())
    else:
        request = asn1.decode(data, asn1.CertificationRequest())

    # CertificationRequestInfo ::= SEQUENCE {
    #   version       INTEGER { v1(0) },
    #   subject       Name,
    #   subjectPKInfo SubjectPublicKeyInfo,
    #   attributes    [0] Attributes }
    # A request info without the [0] is read and re-encoded without it.
    req_info = request["certificationRequestInfo"]
    version = _decode_version(req_info["version"])
    subject = subject_to_string(req_info["subject"])

    attributes = None
    attributes_node = _optional(req_info, "attributes")
    if attributes_node is not None:
        encoded = asn1.encode(attributes_node)
        if encoded != asn1.EMPTY_ATTRIBUTES:
            attributes = asn1.Asn1Blob(encoded)

    spki = req_info["subjectPKInfo"]
    algorithm = _resolve_public_key_algorithm(str(spki["algorithm"]["algorithm"]))
    public_key = _decode_public_key(spki)

    signature_algorithm = _decode_signature_algorithm(request["signatureAlgorithm"])
    signature_parameters = None
    parameters = _optional(request["signatureAlgorithm"], "parameters")
    if parameters is not None:
        signature_parameters = asn1.Asn1Blob(parameters.asOctets())

    signature = asn1.bit_string_octets(request["signature"], "Signature")

    signed_bytes = asn1.encode(req_info)
    if not ecdsa_verify(public_key, signature, signed_bytes, signature_algorithm.hash):
        logger.warning("Signature check failed for CSR subject %r", subject)
        raise InvalidSignatureError("Invalid Signature.")

    logger.debug("Decoded and verified CSR for %r (%s)", subject, signature_algorithm)
    return Pkcs10._restore(
        version=version,
        subject=subject,
        algorithm=algorithm,
        public_key=public_key,
        signature_algorithm=signature_algorithm,
        signature_parameters=signature_parameters,
        signature=signature,
        attributes=attributes,
        signed_payload=signed_bytes,
    )


def _check_shape(data: bytes) -> int:
    """Require at least three components at the top level and in reqInfo.

    Returns the number of reqInfo components.
    """
    top = asn1.decode(data, asn1.Elements())
    if len(top) < 3:
        raise Pkcs10FormatError("Wrong number of elements in sequence.")
    info_count = asn1.count_elements(top[0].asOctets())
    if info_count < 3:
        raise Pkcs10FormatError("Wrong number of elements in sequence.")
    return info_count


def _optional(sequence, name):
    if name not in sequence.componentType:
        return None
    component = sequence.getComponentByName(name, default=None, instantiate=False)
    if component is None or not component.isValue:
        return None
    return component


def _decode_version(value) -> CertificateVersion:
    try:
        return CertificateVersion(int(value))
    except ValueError as exc:
        raise Pkcs10FormatError(f"Unknown CSR version: {int(value)}") from exc


def _resolve_public_key_algorithm(oid: str):
    algorithm = resolve_oid(oid, PUBLIC_KEY_RESOLVERS)
    if algorithm is None:
        raise CertificateError(f"Unknown public key algorithm. {oid}")
    if algorithm is not X9ObjectIdentifier.ID_EC_PUBLIC_KEY:
        raise CertificateError(f"Unsupported public key algorithm. {algorithm}")
    return algorithm


def _decode_public_key(spki):
    curve = None
    parameters = _optional(spki["algorithm"], "parameters")
    if parameters is not None:
        curve_oid = asn1.object_identifier(parameters.asOctets())
        curve = curve_for_oid(curve_oid)
        if curve is None:
            raise CertificateError(f"Unsupported elliptic curve. {curve_oid}")

    raw = asn1.bit_string_octets(spki["subjectPublicKey"], "Public key")
    try:
        return public_key_from_raw_bytes(raw, curve)
    except ValueError as exc:
        raise Pkcs10FormatError(f"Invalid public key: {exc}") from exc


def _decode_signature_algorithm(algorithm_identifier) -> HashAlgorithm:
    oid = str(algorithm_identifier["algorithm"])
    signature_algorithm = HashAlgorithm.from_string(oid)
    if signature_algorithm not in SUPPORTED_SIGNATURE_ALGORITHMS:
        logger.warning("Rejected CSR signature algorithm %s", oid)
        raise CertificateError(f"Invalid signature algorithm. {oid}")
    return signature_algorithm
