"""Unit tests for the algorithm tables and OID resolution."""

from cryptography.hazmat.primitives import hashes

from micropkcs10.oids import (
    PUBLIC_KEY_RESOLVERS,
    HashAlgorithm,
    PkcsObjectIdentifier,
    X9ObjectIdentifier,
    resolve_oid,
)


class TestTables:
    def test_from_string(self):
        assert X9ObjectIdentifier.from_string("1.2.840.10045.2.1") is X9ObjectIdentifier.ID_EC_PUBLIC_KEY
        assert HashAlgorithm.from_string("1.2.840.10045.4.3.3") is HashAlgorithm.SHA384_WITH_ECDSA

    def test_from_string_unknown(self):
        assert PkcsObjectIdentifier.from_string("1.2.840.10045.2.1") is None
        assert HashAlgorithm.from_string("not an oid") is None

    def test_hash_of_signature_scheme(self):
        assert isinstance(HashAlgorithm.SHA256_WITH_ECDSA.hash, hashes.SHA256)
        assert isinstance(HashAlgorithm.SHA384_WITH_ECDSA.hash, hashes.SHA384)

    def test_str_is_member_name(self):
        assert str(HashAlgorithm.SHA256_WITH_ECDSA) == "SHA256_WITH_ECDSA"


class TestResolution:
    def test_pkcs_table_first(self):
        assert resolve_oid("1.2.840.113549.1.1.1") is PkcsObjectIdentifier.RSA_ENCRYPTION

    def test_falls_back_to_x9(self):
        assert resolve_oid("1.2.840.10045.2.1") is X9ObjectIdentifier.ID_EC_PUBLIC_KEY

    def test_unresolved(self):
        assert resolve_oid("1.2.3.4") is None

    def test_order_decides(self):
        calls = []

        def first(oid):
            calls.append("first")
            return None

        def second(oid):
            calls.append("second")
            return X9ObjectIdentifier.PRIME256V1

        def third(oid):
            calls.append("third")
            return X9ObjectIdentifier.SECP384R1

        assert resolve_oid("1.2.3", (first, second, third)) is X9ObjectIdentifier.PRIME256V1
        assert calls == ["first", "second"]

    def test_default_resolvers(self):
        assert PUBLIC_KEY_RESOLVERS == (
            PkcsObjectIdentifier.from_string,
            X9ObjectIdentifier.from_string,
        )
