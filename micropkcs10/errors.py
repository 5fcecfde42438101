"""Exception hierarchy for PKCS#10 decoding, verification and signing."""


class Pkcs10Error(Exception):
    """Base class for every error raised by micropkcs10."""


class Pkcs10FormatError(Pkcs10Error, ValueError):
    """Raised when input does not have the structure of a CSR.

    Covers DER codec failures, wrong element counts, bad BIT STRINGs and
    missing PEM markers.
    """


class CertificateError(Pkcs10Error):
    """Raised when a well-formed request uses an unsupported algorithm."""


class InvalidSignatureError(Pkcs10Error):
    """Raised when the self-signature does not verify."""


class Pkcs10StateError(Pkcs10Error, RuntimeError):
    """Raised when an operation is called before its preconditions hold."""
