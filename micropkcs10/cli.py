"""CLI argument parser for micropkcs10.

Provides the ``micropkcs10`` entry point with subcommands:
- ``csr create`` — generate (or load) an EC key and write a signed CSR
- ``csr show``   — print the fields of a CSR
- ``csr verify`` — decode a CSR and check its self-signature
"""

from __future__ import annotations

import argparse
import os
import sys

_HASHES = {
    "sha256": "SHA256_WITH_ECDSA",
    "sha384": "SHA384_WITH_ECDSA",
}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="micropkcs10",
        description="micropkcs10 — create and verify PKCS#10 certificate signing requests.",
    )
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    csr_parser = subparsers.add_parser("csr", help="Certificate signing request operations")
    csr_sub = csr_parser.add_subparsers(dest="csr_action", help="CSR actions")

    # --- csr create ---
    create_parser = csr_sub.add_parser("create", help="Create and sign a new CSR")
    create_parser.add_argument(
        "--subject", required=True,
        help="Distinguished Name (e.g., 'CN=Meter 42,O=Demo,C=US')",
    )
    create_parser.add_argument(
        "--key", default=None,
        help="Existing EC private key (PEM). If omitted, a new key is generated",
    )
    create_parser.add_argument(
        "--pass-file", default=None,
        help="Passphrase file for the private key (encrypts a generated key)",
    )
    create_parser.add_argument(
        "--curve", type=int, choices=[256, 384], default=256,
        help="Curve size for a generated key (default: 256)",
    )
    create_parser.add_argument(
        "--hash", choices=sorted(_HASHES), default="sha256",
        help="Signature hash (default: sha256)",
    )
    create_parser.add_argument(
        "--out-dir", default="./pki",
        help="Output directory (default: ./pki)",
    )
    create_parser.add_argument(
        "--force", action="store_true",
        help="Overwrite existing files without confirmation",
    )
    create_parser.add_argument(
        "--log-file", default=None,
        help="Path to a log file. If omitted, logs go to stderr",
    )
    create_parser.add_argument("--verbose", action="store_true", help="Log at DEBUG level")

    # --- csr show ---
    show_parser = csr_sub.add_parser("show", help="Print the fields of a CSR")
    show_parser.add_argument("--csr", required=True, help="CSR file (PEM)")
    show_parser.add_argument("--log-file", default=None, help="Log file path")
    show_parser.add_argument("--verbose", action="store_true", help="Log at DEBUG level")

    # --- csr verify ---
    verify_parser = csr_sub.add_parser("verify", help="Verify the self-signature of a CSR")
    verify_parser.add_argument("--csr", required=True, help="CSR file (PEM)")
    verify_parser.add_argument("--log-file", default=None, help="Log file path")
    verify_parser.add_argument("--verbose", action="store_true", help="Log at DEBUG level")

    return parser


def validate_create_args(args: argparse.Namespace) -> list[str]:
    """Validate arguments for ``csr create``. Returns a list of error messages."""
    errors: list[str] = []

    if not args.subject or not args.subject.strip():
        errors.append("--subject must be a non-empty string.")
    else:
        from .names import encode_subject

        try:
            encode_subject(args.subject)
        except ValueError as exc:
            errors.append(f"--subject is invalid: {exc}")

    for attr, label in [("key", "--key"), ("pass_file", "--pass-file")]:
        path = getattr(args, attr, None)
        if path and not os.path.isfile(path):
            errors.append(f"{label} file does not exist: {path}")

    return errors


def read_passphrase(path: str) -> bytes:
    """Read passphrase from file, stripping trailing newline."""
    with open(path, "rb") as f:
        data = f.read()
    return data.rstrip(b"\n").rstrip(b"\r\n")


def main(argv: list[str] | None = None) -> int:
    """Entry point for the ``micropkcs10`` CLI."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 1

    if args.command == "csr":
        if not hasattr(args, "csr_action") or args.csr_action is None:
            parser.parse_args(["csr", "--help"])
            return 1

        if args.csr_action == "create":
            return _handle_create(args)
        elif args.csr_action == "show":
            return _handle_show(args)
        elif args.csr_action == "verify":
            return _handle_verify(args)

    return 0


def _handle_create(args: argparse.Namespace) -> int:
    from .logger import setup_logging
    from .crypto_utils import (
        generate_key,
        load_private_key,
        save_private_key,
        serialize_private_key,
        serialize_private_key_unencrypted,
    )
    from .csr import Pkcs10
    from .errors import Pkcs10Error
    from .oids import HashAlgorithm

    logger = setup_logging(args.log_file, args.verbose)

    errors = validate_create_args(args)
    if errors:
        for err in errors:
            logger.error(err)
            print(f"Error: {err}", file=sys.stderr)
        return 1

    out_dir = args.out_dir
    key_path = os.path.join(out_dir, "private", "csr.key.pem")
    csr_path = os.path.join(out_dir, "csrs", "csr.pem")

    targets = [csr_path] if args.key else [key_path, csr_path]
    if not args.force:
        for path in targets:
            if os.path.exists(path):
                print(
                    f"Error: {path} already exists. Use --force to overwrite.",
                    file=sys.stderr,
                )
                logger.error("File already exists: %s. Use --force to overwrite.", path)
                return 1

    passphrase = read_passphrase(args.pass_file) if args.pass_file else None

    try:
        if args.key:
            with open(args.key, "rb") as f:
                private_key = load_private_key(f.read(), passphrase)
            logger.info("Loaded private key from %s", os.path.abspath(args.key))
        else:
            logger.info("Starting key generation (EC P-%d)...", args.curve)
            private_key = generate_key(args.curve)
            logger.info("Key generation completed successfully.")
            if passphrase:
                key_pem = serialize_private_key(private_key, passphrase)
            else:
                key_pem = serialize_private_key_unencrypted(private_key)
            save_private_key(key_pem, key_path)
            logger.info("Private key saved to %s", os.path.abspath(key_path))

        logger.info("Starting CSR signing...")
        csr = Pkcs10(subject=args.subject, public_key=private_key.public_key())
        csr.sign(private_key, HashAlgorithm[_HASHES[args.hash]])
        logger.info("CSR signing completed successfully.")

        csr.save(csr_path)
        logger.info("CSR saved to %s", os.path.abspath(csr_path))
    except (Pkcs10Error, OSError, ValueError, TypeError) as exc:
        logger.error("CSR creation failed: %s", exc)
        print(f"Error: CSR creation failed: {exc}", file=sys.stderr)
        return 1

    return 0


def _load_csr(args: argparse.Namespace):
    from .logger import setup_logging
    from .csr import Pkcs10
    from .errors import Pkcs10Error

    logger = setup_logging(args.log_file, args.verbose)

    try:
        csr = Pkcs10.load(args.csr)
    except (Pkcs10Error, OSError, UnicodeDecodeError) as exc:
        logger.error("Failed to load CSR %s: %s", args.csr, exc)
        print(f"FAIL: {exc}", file=sys.stderr)
        return logger, None

    return logger, csr


def _handle_show(args: argparse.Namespace) -> int:
    logger, csr = _load_csr(args)
    if csr is None:
        return 1
    print(str(csr), end="")
    return 0


def _handle_verify(args: argparse.Namespace) -> int:
    logger, csr = _load_csr(args)
    if csr is None:
        return 1

    msg = f"CSR signature verification PASSED: {csr.subject} ({csr.signature_algorithm})"
    logger.info(msg)
    print(msg)
    return 0


if __name__ == "__main__":
    sys.exit(main())
