"""PEM wrapping of CSRs and file load/save."""

from __future__ import annotations

import base64
import binascii
import os
import textwrap

from .csr import Pkcs10
from .errors import Pkcs10FormatError

PEM_HEADER = "-----BEGIN CERTIFICATE REQUEST-----"
PEM_FOOTER = "-----END CERTIFICATE REQUEST-----"
PEM_LINE_WIDTH = 64

_HEADER_TAIL = "CERTIFICATE REQUEST-----\n"


def pem_to_der(text: str) -> bytes:
    """Extract the DER bytes from PEM *text*.

    The header is located first, then the footer in the text after it.

    Raises:
        Pkcs10FormatError: If a marker is missing or the body is not base64.
    """
    text = text.replace("\r\n", "\n")
    start = text.find(_HEADER_TAIL)
    if start == -1:
        raise Pkcs10FormatError("Invalid PEM file.")
    text = text[start + len(_HEADER_TAIL):]
    end = text.find(PEM_FOOTER)
    if end == -1:
        raise Pkcs10FormatError("Invalid PEM file.")
    try:
        return base64.b64decode(text[:end])
    except binascii.Error as exc:
        raise Pkcs10FormatError(f"Invalid PEM body: {exc}") from exc


def to_der(csr: Pkcs10) -> str:
    """Return the base64 text of the DER-encoded *csr*."""
    return base64.b64encode(csr.encoded).decode("ascii")


def to_pem(csr: Pkcs10) -> str:
    """Return *csr* as a PEM ``CERTIFICATE REQUEST`` block."""
    body = "\n".join(textwrap.wrap(to_der(csr), PEM_LINE_WIDTH))
    return f"{PEM_HEADER}\n{body}\n{PEM_FOOTER}\n"


def load(path: str) -> Pkcs10:
    """Load a PEM-encoded CSR from disk."""
    with open(path, "r", encoding="utf-8") as f:
        return Pkcs10.from_pem(f.read())


def save(csr: Pkcs10, path: str) -> None:
    """Write *csr* as PEM to *path*, creating parent dirs as needed."""
    pem = to_pem(csr)
    parent = os.path.dirname(path)
    if parent:
        os.makedirs(parent, exist_ok=True)
    with open(path, "w", encoding="utf-8", newline="\n") as f:
        f.write(pem)
