"""DER codec boundary: CSR schemas, decode/encode helpers, opaque values.

Requests are built with the RFC 2986 schema from ``pyasn1_modules``, where
``attributes`` is mandatory and an empty set encodes as ``A0 00``. Input
whose ``CertificationRequestInfo`` has only three components is read with
:class:`ThreeComponentRequest`, which re-encodes without the ``[0]``.
"""

from __future__ import annotations

from dataclasses import dataclass

from pyasn1.codec.der import decoder, encoder
from pyasn1.error import PyAsn1Error
from pyasn1.type import namedtype, univ
from pyasn1_modules import rfc2986, rfc5280

from .errors import Pkcs10FormatError

# Upper bound on DER input accepted by the decoder.
MAX_CSR_SIZE = 64 * 1024

# [0] IMPLICIT SET OF Attribute with no members.
EMPTY_ATTRIBUTES = b"\xa0\x00"

CertificationRequestInfo = rfc2986.CertificationRequestInfo
CertificationRequest = rfc2986.CertificationRequest


def attributes_spec() -> univ.SetOf:
    """Return the ``[0] IMPLICIT Attributes`` type used in requests."""
    named_types = CertificationRequestInfo.componentType
    return named_types.getTypeByPosition(named_types.getPositionByName("attributes"))


class ThreeComponentRequestInfo(univ.Sequence):
    componentType = namedtype.NamedTypes(
        namedtype.NamedType("version", univ.Integer()),
        namedtype.NamedType("subject", rfc5280.Name()),
        namedtype.NamedType("subjectPKInfo", rfc5280.SubjectPublicKeyInfo()),
    )


class ThreeComponentRequest(univ.Sequence):
    componentType = namedtype.NamedTypes(
        namedtype.NamedType("certificationRequestInfo", ThreeComponentRequestInfo()),
        namedtype.NamedType("signatureAlgorithm", rfc5280.AlgorithmIdentifier()),
        namedtype.NamedType("signature", univ.BitString()),
    )


class Elements(univ.SequenceOf):
    """A SEQUENCE read as a list of undecoded TLVs, for shape checks."""

    componentType = univ.Any()


@dataclass(frozen=True)
class Asn1Blob:
    """An ASN.1 value kept as its DER encoding and never interpreted."""

    der: bytes

    def __str__(self) -> str:
        return self.der.hex().upper()


def decode(data: bytes, spec):
    """Decode exactly one DER value of type *spec* from *data*.

    Raises:
        Pkcs10FormatError: On codec failure or trailing bytes.
    """
    if not data:
        raise Pkcs10FormatError("Empty DER input.")
    try:
        value, rest = decoder.decode(bytes(data), asn1Spec=spec)
    except (PyAsn1Error, ValueError, RecursionError) as exc:
        raise Pkcs10FormatError(f"Invalid DER encoding: {exc}") from exc
    if rest:
        raise Pkcs10FormatError(f"{len(rest)} trailing bytes after DER value.")
    return value


def encode(value) -> bytes:
    """Encode a pyasn1 value to DER."""
    try:
        return encoder.encode(value)
    except (PyAsn1Error, ValueError) as exc:
        raise Pkcs10FormatError(f"Cannot DER-encode {type(value).__name__}: {exc}") from exc


def sequence(*parts: bytes) -> bytes:
    """Wrap already-encoded TLVs in a DER SEQUENCE."""
    elements = Elements()
    for part in parts:
        elements.append(univ.Any(part))
    return encode(elements)


def count_elements(data: bytes) -> int:
    """Return how many components the DER SEQUENCE in *data* holds."""
    return len(decode(data, Elements()))


def bit_string_octets(value: univ.BitString, what: str) -> bytes:
    """Return the octets of a BIT STRING that has no unused bits."""
    if len(value) % 8:
        raise Pkcs10FormatError(f"{what} is not a whole number of octets.")
    return value.asOctets()


def object_identifier(data: bytes) -> str:
    """Decode a DER OBJECT IDENTIFIER and return its dotted form."""
    return str(decode(data, univ.ObjectIdentifier()))
