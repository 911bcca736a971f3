#!/usr/bin/env python3
"""
cli.py — jwkstore command line

Commands:
  generate  Generate keys and print them as a JWK Set
  jwks      Load keys from JWK/PEM files and print them as a JWK Set

Output always goes to stdout; nothing is written to disk. Private members
are only printed with --private.
"""

from __future__ import annotations
import argparse
import json
import logging
import sys
from pathlib import Path
from typing import List, Optional

from .errors import JwkStoreError
from .jwk import EDDSA_CURVES, SUPPORTED_ALGORITHMS
from .store import KeyStore
from .config import StoreConfig

logger = logging.getLogger(__name__)


def _fail_with_error(err: JwkStoreError) -> None:
    """Print a structured error message from a ``JwkStoreError`` and exit.

    Args:
        err: Structured key store error.

    Returns:
        None: This function terminates the process.
    """
    context = f" Context: {err.context}." if err.context else ""
    print(f"ERROR: {err.code}. {err.message.rstrip('.')}.{context}", file=sys.stderr)
    sys.exit(1)


def _cli_error(what: str, why: str, fix: str) -> None:
    """Print a teaching-style CLI error and exit.

    Args:
        what: What failed.
        why: Why it failed.
        fix: Recommended remediation.

    Returns:
        None: This function terminates the process.
    """
    print(f"ERROR: {what}. {why}. Fix: {fix}.", file=sys.stderr)
    sys.exit(1)


def _load_config() -> StoreConfig:
    try:
        return StoreConfig.from_env()
    except ValueError as e:
        _cli_error(
            f"Invalid configuration: {e}",
            "JWKSTORE_* environment variables must hold valid integers",
            "unset or correct the offending variable",
        )


def _print_jwks(store: KeyStore, include_private: bool) -> None:
    print(json.dumps(store.to_json(include_private_fields=include_private), indent=2))


def cmd_generate(args: argparse.Namespace) -> None:
    """Handle ``jwkstore generate``.

    Args:
        args: Parsed CLI arguments with algorithm, kid, curve and count.
    """
    if args.count < 1:
        _cli_error(
            f"Invalid --count {args.count}",
            "at least one key must be generated",
            "pass --count 1 or higher",
        )
    if args.kid and args.count > 1:
        _cli_error(
            "--kid cannot be combined with --count",
            "every key in a store needs a distinct kid",
            "drop --kid to get random identifiers",
        )

    store = KeyStore(_load_config())
    for _ in range(args.count):
        jwk = store.generate(args.alg, kid=args.kid, crv=args.crv)
        logger.info("Generated %s key with kid %s", jwk["kty"], jwk["kid"])
    _print_jwks(store, args.private)


def cmd_jwks(args: argparse.Namespace) -> None:
    """Handle ``jwkstore jwks``.

    Args:
        args: Parsed CLI arguments listing JWK and PEM key files.
    """
    if not args.jwk and not args.pem:
        _cli_error(
            "No key files given",
            "the JWK Set is built only from the supplied files",
            "pass one or more --jwk <file> or --pem <file>",
        )
    if args.pem and not args.alg:
        _cli_error(
            "--pem requires --alg",
            "PEM files carry no JOSE algorithm",
            "pass --alg, e.g. --alg RS256",
        )

    store = KeyStore(_load_config())
    for path in args.jwk or []:
        try:
            data = json.loads(Path(path).read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            _cli_error(
                f"Failed to read JWK file {path}: {e}",
                "--jwk expects a readable UTF-8 JSON file holding one JWK object",
                "check the path and the file contents",
            )
        if not isinstance(data, dict):
            _cli_error(
                f"JWK file {path} does not hold a JSON object",
                "--jwk expects one JWK object per file",
                "split JWK Sets into one file per key",
            )
        jwk = store.add(data)
        logger.info("Added key with kid %s", jwk["kid"])

    for path in args.pem or []:
        try:
            pem = Path(path).read_bytes()
        except OSError as e:
            _cli_error(
                f"Failed to read PEM file {path}: {e}",
                "--pem expects a readable PEM private key file",
                "check the path",
            )
        jwk = store.add_pem(pem, args.alg)
        logger.info("Added key with kid %s", jwk["kid"])

    _print_jwks(store, args.private)


def main(argv: Optional[List[str]] = None) -> None:
    """CLI entrypoint.

    Parses command-line arguments, routes to a subcommand handler, and exits
    non-zero on key store errors.
    """
    parser = argparse.ArgumentParser(prog="jwkstore", description="Rotating JWK store CLI")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    sub = parser.add_subparsers(dest="command", required=True)

    # generate
    p_gen = sub.add_parser("generate", help="Generate keys and print a JWK Set")
    p_gen.add_argument("alg", nargs="?", default="RS256", help=f"One of: {', '.join(SUPPORTED_ALGORITHMS)}")
    p_gen.add_argument("--kid", help="Key identifier (random if omitted)")
    p_gen.add_argument("--crv", help=f"EdDSA curve: {' or '.join(EDDSA_CURVES)}")
    p_gen.add_argument("--count", type=int, default=1, help="Number of keys to generate")
    p_gen.add_argument("--private", action="store_true", help="Include private key members")

    # jwks
    p_jwks = sub.add_parser("jwks", help="Print a JWK Set built from key files")
    p_jwks.add_argument("--jwk", action="append", help="JSON-formatted key file (repeatable)")
    p_jwks.add_argument("--pem", action="append", help="PEM-encoded private key file (repeatable)")
    p_jwks.add_argument("--alg", help="Algorithm for keys loaded with --pem")
    p_jwks.add_argument("--private", action="store_true", help="Include private key members")

    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )

    try:
        if args.command == "generate": cmd_generate(args)
        elif args.command == "jwks": cmd_jwks(args)
    except JwkStoreError as err:
        _fail_with_error(err)

if __name__ == "__main__":
    main()
