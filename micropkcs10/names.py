"""Subject Distinguished Name codec: ``CN=...,O=...`` <-> ASN.1 ``Name``."""

from __future__ import annotations

import re

from cryptography.x509.oid import NameOID
from pyasn1.type import char
from pyasn1_modules import rfc5280

from . import asn1
from .errors import Pkcs10FormatError

_OID_MAP = {
    "CN": NameOID.COMMON_NAME,
    "O": NameOID.ORGANIZATION_NAME,
    "OU": NameOID.ORGANIZATIONAL_UNIT_NAME,
    "C": NameOID.COUNTRY_NAME,
    "ST": NameOID.STATE_OR_PROVINCE_NAME,
    "L": NameOID.LOCALITY_NAME,
    "EMAIL": NameOID.EMAIL_ADDRESS,
    "SERIALNUMBER": NameOID.SERIAL_NUMBER,
    "DC": NameOID.DOMAIN_COMPONENT,
    "UID": NameOID.USER_ID,
}

_ALIASES = {
    "EMAILADDRESS": "EMAIL",
}

_KEY_BY_OID = {oid.dotted_string: key for key, oid in _OID_MAP.items()}

_DOTTED_OID = re.compile(r"[0-2](\.(0|[1-9][0-9]*))+")

# Attribute types that RFC 5280 restricts to PrintableString or IA5String.
_STRING_TYPES = {
    "C": char.PrintableString,
    "SERIALNUMBER": char.PrintableString,
    "EMAIL": char.IA5String,
    "DC": char.IA5String,
}


def parse_subject_dn(dn_string: str) -> list[tuple[str, str]]:
    """Parse a Distinguished Name string into ``(key, value)`` pairs.

    Supports slash notation (``/CN=.../O=...``) and comma-separated
    (``CN=...,O=...``). Order and repeated keys are preserved.
    """
    dn_string = dn_string.strip()
    if not dn_string:
        return []

    if dn_string.startswith("/"):
        parts = dn_string.lstrip("/").split("/")
    else:
        parts = [p.strip() for p in dn_string.split(",")]

    result: list[tuple[str, str]] = []
    for part in parts:
        if "=" not in part:
            raise ValueError(f"Invalid DN component (missing '='): '{part}'")
        key, value = part.split("=", 1)
        key = key.strip().upper()
        key = _ALIASES.get(key, key)
        value = value.strip()
        if not value:
            raise ValueError(f"Empty value for DN attribute '{key}'")
        result.append((key, value))

    return result


def encode_subject(subject: str) -> rfc5280.Name:
    """Build an ASN.1 ``Name`` with one RDN per component of *subject*.

    Keys are the short names in ``_OID_MAP`` or a dotted OID, which gets a
    UTF8String value.
    """
    rdn_sequence = rfc5280.RDNSequence()
    rdn_sequence.clear()
    for key, value in parse_subject_dn(subject):
        string_type = _STRING_TYPES.get(key, char.UTF8String)

        atv = rfc5280.AttributeTypeAndValue()
        atv["type"] = _attribute_type(key)
        atv["value"] = asn1.encode(string_type(value))

        rdn = rfc5280.RelativeDistinguishedName()
        rdn.append(atv)
        rdn_sequence.append(rdn)

    name = rfc5280.Name()
    name["rdnSequence"] = rdn_sequence
    return name


def _attribute_type(key: str) -> str:
    oid = _OID_MAP.get(key)
    if oid is not None:
        return oid.dotted_string
    if _DOTTED_OID.fullmatch(key):
        return key
    raise ValueError(f"Unsupported DN attribute: {key}")


def subject_to_string(name: rfc5280.Name) -> str:
    """Render a decoded ``Name`` as ``KEY=value`` pairs joined by commas."""
    parts = []
    for rdn in name["rdnSequence"]:
        for atv in rdn:
            oid = str(atv["type"])
            key = _KEY_BY_OID.get(oid, oid)
            value = asn1.decode(atv["value"].asOctets(), None)
            try:
                text = str(value)
            except UnicodeError as exc:
                raise Pkcs10FormatError(f"Undecodable value for {key}: {exc}") from exc
            parts.append(f"{key}={text}")
    return ",".join(parts)
