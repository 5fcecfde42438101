"""Tests for the CLI parser and edge cases."""

import base64
import os

import pytest

from micropkcs10.cli import main
from micropkcs10.csr import Pkcs10
from micropkcs10.crypto_utils import generate_key, save_private_key, serialize_private_key
from micropkcs10.oids import HashAlgorithm


def _paths(out_dir):
    return (
        os.path.join(out_dir, "private", "csr.key.pem"),
        os.path.join(out_dir, "csrs", "csr.pem"),
    )


class TestCLIValidation:
    def test_missing_subject(self, tmp_out_dir):
        with pytest.raises(SystemExit) as exc_info:
            main(["csr", "create", "--out-dir", tmp_out_dir])
        assert exc_info.value.code != 0

    def test_invalid_subject(self, tmp_out_dir):
        exit_code = main(["csr", "create", "--subject", "CN=OK,BROKEN", "--out-dir", tmp_out_dir])
        assert exit_code != 0

    def test_unsupported_subject_attribute(self, tmp_out_dir):
        exit_code = main(["csr", "create", "--subject", "XYZ=1", "--out-dir", tmp_out_dir])
        assert exit_code != 0

    def test_unsupported_curve(self, tmp_out_dir):
        with pytest.raises(SystemExit):
            main(["csr", "create", "--subject", "CN=Test", "--curve", "521", "--out-dir", tmp_out_dir])

    def test_nonexistent_key_file(self, tmp_out_dir):
        exit_code = main([
            "csr", "create",
            "--subject", "CN=Test",
            "--key", "/nonexistent/path/key.pem",
            "--out-dir", tmp_out_dir,
        ])
        assert exit_code != 0

    def test_no_command_shows_help(self):
        assert main([]) != 0


class TestCreate:
    def test_create_generates_key_and_csr(self, tmp_out_dir):
        exit_code = main(["csr", "create", "--subject", "CN=CLI Device,O=Test", "--out-dir", tmp_out_dir])
        assert exit_code == 0
        key_path, csr_path = _paths(tmp_out_dir)
        assert os.path.isfile(key_path)
        csr = Pkcs10.load(csr_path)
        assert csr.subject == "CN=CLI Device,O=Test"
        assert csr.signature_algorithm is HashAlgorithm.SHA256_WITH_ECDSA

    def test_create_p384_sha384_encrypted_key(self, tmp_out_dir, passphrase_file):
        exit_code = main([
            "csr", "create",
            "--subject", "CN=P384",
            "--curve", "384",
            "--hash", "sha384",
            "--pass-file", passphrase_file,
            "--out-dir", tmp_out_dir,
        ])
        assert exit_code == 0
        key_path, csr_path = _paths(tmp_out_dir)
        with open(key_path, "rb") as f:
            assert b"BEGIN ENCRYPTED PRIVATE KEY" in f.read()
        csr = Pkcs10.load(csr_path)
        assert csr.public_key.curve.name == "secp384r1"
        assert csr.signature_algorithm is HashAlgorithm.SHA384_WITH_ECDSA

    def test_create_with_existing_key(self, tmp_path, tmp_out_dir, passphrase_file):
        key = generate_key(256)
        key_file = str(tmp_path / "existing.key.pem")
        save_private_key(serialize_private_key(key, b"TestPassphrase123!"), key_file)

        exit_code = main([
            "csr", "create",
            "--subject", "CN=Existing Key",
            "--key", key_file,
            "--pass-file", passphrase_file,
            "--out-dir", tmp_out_dir,
        ])
        assert exit_code == 0
        key_path, csr_path = _paths(tmp_out_dir)
        assert not os.path.exists(key_path)
        csr = Pkcs10.load(csr_path)
        assert csr.public_key.public_numbers() == key.public_key().public_numbers()

    def test_wrong_passphrase(self, tmp_path, tmp_out_dir):
        key_file = str(tmp_path / "existing.key.pem")
        save_private_key(serialize_private_key(generate_key(), b"right"), key_file)
        pass_file = tmp_path / "wrong.txt"
        pass_file.write_bytes(b"wrong\n")

        exit_code = main([
            "csr", "create",
            "--subject", "CN=Wrong",
            "--key", key_file,
            "--pass-file", str(pass_file),
            "--out-dir", tmp_out_dir,
        ])
        assert exit_code != 0

    def test_no_force_refuses_overwrite(self, tmp_out_dir):
        args = ["csr", "create", "--subject", "CN=Once", "--out-dir", tmp_out_dir]
        assert main(args) == 0
        assert main(args) != 0
        assert main(args + ["--force"]) == 0

    def test_log_file_created(self, tmp_out_dir, tmp_path, passphrase_file):
        log_file = str(tmp_path / "logs" / "csr.log")
        exit_code = main([
            "csr", "create",
            "--subject", "CN=Log Device",
            "--pass-file", passphrase_file,
            "--out-dir", tmp_out_dir,
            "--log-file", log_file,
        ])
        assert exit_code == 0
        with open(log_file, encoding="utf-8") as f:
            content = f.read()
        assert "Key generation completed" in content
        assert "CSR signing completed" in content
        assert "TestPassphrase" not in content


class TestShowAndVerify:
    def test_verify_passes(self, signed_csr, tmp_path, capsys):
        path = str(tmp_path / "device.csr.pem")
        signed_csr.save(path)
        assert main(["csr", "verify", "--csr", path]) == 0
        assert "PASSED" in capsys.readouterr().out

    def test_verify_tampered(self, signed_csr, tmp_path, capsys):
        path = tmp_path / "tampered.csr.pem"
        der = bytearray(signed_csr.encoded)
        der[-1] ^= 0x01
        path.write_text(
            "-----BEGIN CERTIFICATE REQUEST-----\n"
            + base64.b64encode(bytes(der)).decode("ascii")
            + "\n-----END CERTIFICATE REQUEST-----\n",
            encoding="utf-8",
        )
        assert main(["csr", "verify", "--csr", str(path)]) != 0
        assert "FAIL" in capsys.readouterr().err

    def test_verbose_logs_decode_details(self, signed_csr, tmp_path):
        path = str(tmp_path / "device.csr.pem")
        log_file = str(tmp_path / "verify.log")
        signed_csr.save(path)
        assert main(["csr", "verify", "--csr", path, "--log-file", log_file]) == 0
        with open(log_file, encoding="utf-8") as f:
            assert "Decoded and verified CSR" not in f.read()

        assert main([
            "csr", "verify", "--csr", path, "--log-file", log_file, "--verbose",
        ]) == 0
        with open(log_file, encoding="utf-8") as f:
            content = f.read()
        assert "[DEBUG] micropkcs10.decoder: Decoded and verified CSR" in content
        assert "PASSED" in content

    def test_verify_missing_file(self, tmp_path):
        assert main(["csr", "verify", "--csr", str(tmp_path / "missing.pem")]) != 0

    def test_show_prints_fields(self, signed_csr, tmp_path, capsys):
        path = str(tmp_path / "device.csr.pem")
        signed_csr.save(path)
        assert main(["csr", "show", "--csr", path]) == 0
        out = capsys.readouterr().out
        assert out == str(signed_csr)
        assert "Subject: CN=Test,O=TestOrg,C=US" in out
