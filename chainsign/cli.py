#!/usr/bin/env python3
"""
chainsign Command Line Interface

Usage:
    chainsign verify --document <file> --registry <file> [--json] [--workers N]
    chainsign hash --document <file> [--index N]
    chainsign sign --document <file> --signer <id> --key <hex> [--output <file>]
    chainsign keygen [--signer <id>]
    chainsign demo
"""

import argparse
import json
import logging
import sys
import time
from typing import List, Optional

from . import config
from .errors import ChainSignError
from .logging_config import configure_logging, set_verification_id

logger = logging.getLogger(__name__)


def load_json(path: str) -> dict:
    """Load JSON from file."""
    with open(path, 'r', encoding='utf-8') as f:
        return json.load(f)


def save_json(data: dict, path: str):
    """Save JSON to file."""
    with open(path, 'w', encoding='utf-8') as f:
        json.dump(data, f, indent=2, ensure_ascii=False)


def _binder(args):
    from .chain import HashChainBinder
    from .hashing import get_hasher

    return HashChainBinder(hasher=get_hasher(args.hash))


def print_verification_result(result, title: Optional[str] = None):
    """Print a verification result in human-readable form."""
    if title:
        print(f"\n{title}")
        print("=" * 50)

    if result.is_valid:
        print("✓ VALID")
    else:
        print(f"✗ INVALID: {result.error}")

    for index, sig in enumerate(result.signature_results, start=1):
        status = "✓" if sig.is_valid else "✗"
        print(f"  {index}. {status} {sig.signer_id}")
        if sig.is_valid:
            print("     hash chain: ✓  signature: ✓")
        elif sig.error:
            print(f"     error: {sig.error}")


def cmd_verify(args) -> int:
    """Verify a signed document against a signer registry."""
    from .registry import load_registry
    from .verifier import ChainVerifier

    document = load_json(args.document)
    registry = load_registry(args.registry)
    set_verification_id()

    verifier = ChainVerifier(
        binder=_binder(args),
        scheme=args.scheme,
        max_workers=args.workers
    )
    result = verifier.verify(document, registry)

    if args.json:
        print(json.dumps(result.to_dict(), indent=2))
    else:
        print_verification_result(result)

    return 0 if result.is_valid else 1


def cmd_hash(args) -> int:
    """Print the expected chain hash for a position in the document."""
    from .models import SignedDocument

    document = SignedDocument.from_dict(load_json(args.document))
    if document.payload is None:
        print("ERROR: document has no payload", file=sys.stderr)
        return 2

    index = len(document.signatures) if args.index is None else args.index
    if index < 0 or index > len(document.signatures):
        print(
            f"ERROR: index must be between 0 and {len(document.signatures)}",
            file=sys.stderr
        )
        return 2

    h = _binder(args).expected_hash(document.payload, document.signatures[:index])
    print(f"expected_hash[{index}]: {h}")
    return 0


def cmd_sign(args) -> int:
    """Append a signature to a document."""
    from .models import SignedDocument
    from .signer import ChainSigner

    document = SignedDocument.from_dict(load_json(args.document))
    signer = ChainSigner(binder=_binder(args), scheme=args.scheme)
    signed = signer.sign(document, args.signer, args.key)

    if args.output:
        save_json(signed.to_dict(), args.output)
        print(f"Signed document saved to: {args.output}", file=sys.stderr)
    else:
        print(json.dumps(signed.to_dict(), indent=2, ensure_ascii=False))

    return 0


def cmd_keygen(args) -> int:
    """Generate a key pair for the selected scheme."""
    from .signing import get_scheme

    key_pair = get_scheme(args.scheme).generate_keypair()
    out = key_pair.to_dict()
    if args.signer:
        out["signerId"] = args.signer

    print(json.dumps(out, indent=2))
    return 0


def cmd_demo(args) -> int:
    """Run a demonstration of chain verification."""
    from .fixtures import DocumentGenerator
    from .verifier import ChainVerifier

    print("=" * 60)
    print("chainsign Demonstration")
    print("=" * 60)

    generator = DocumentGenerator(scheme=args.scheme, binder=_binder(args))
    verifier = ChainVerifier(binder=generator.binder, scheme=generator.scheme)
    registry = generator.signer_registry()

    print(f"\nScheme: {generator.scheme.name}")
    print("Signer registry:")
    for signer_id, identity in registry.items():
        print(f"  {signer_id}: {identity}")

    document = generator.generate_valid_document()
    print(f"\nDocument ID: {document.payload.document_id}")
    print(f"Content: \"{document.payload.content[:50]}...\"")
    print(f"Signatures: {len(document.signatures)}")

    scenarios = [
        ("Valid document", document),
        ("Tampered payload", generator.generate_document_with_tampered_payload()),
        ("Corrupted signature", generator.generate_document_with_invalid_signature()),
        ("Broken hash chain", generator.generate_document_with_broken_hash_chain()),
    ]
    for title, doc in scenarios:
        print_verification_result(verifier.verify(doc, registry), title)

    rounds = 100
    start = time.perf_counter()
    for _ in range(rounds):
        verifier.verify(document, registry)
    elapsed_ms = (time.perf_counter() - start) * 1000
    print(f"\nVerified {rounds} documents in {elapsed_ms:.1f}ms "
          f"(avg: {elapsed_ms / rounds:.2f}ms per document)")

    print("\n" + "=" * 60)
    print("Demonstration complete.")
    print("=" * 60)
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="chainsign",
        description="Hash-chained multi-signature verification",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  chainsign demo                                  Run demonstration
  chainsign verify -d contract.json -r registry.json
  chainsign hash -d contract.json -i 0
  chainsign sign -d contract.json -s qa-bob -k <hex> -o contract.json
  chainsign keygen -s qa-bob
        """
    )
    parser.add_argument("--scheme", default=config.SIGNATURE_SCHEME,
                        help="Signature scheme (secp256k1, ed25519)")
    parser.add_argument("--hash", default=config.HASH_ALGORITHM,
                        help="Chain hash algorithm (sha256, sha3-256)")
    parser.add_argument("--log-level", default=config.LOG_LEVEL, help="Log level")
    parser.add_argument("--json-logs", action="store_true", default=config.log_json_enabled(),
                        help="Emit structured JSON logs")

    subparsers = parser.add_subparsers(dest="command", help="Commands")

    # verify
    verify_parser = subparsers.add_parser("verify", help="Verify a signed document")
    verify_parser.add_argument("-d", "--document", required=True, help="Signed document JSON file")
    verify_parser.add_argument("-r", "--registry", required=True, help="Signer registry JSON file")
    verify_parser.add_argument("-w", "--workers", type=int, default=config.MAX_WORKERS,
                               help="Worker threads for signature checks")
    verify_parser.add_argument("--json", action="store_true", help="Print result as JSON")

    # hash
    hash_parser = subparsers.add_parser("hash", help="Compute expected chain hash")
    hash_parser.add_argument("-d", "--document", required=True, help="Document JSON file")
    hash_parser.add_argument("-i", "--index", type=int,
                             help="Chain position (default: next signer)")

    # sign
    sign_parser = subparsers.add_parser("sign", help="Append a signature")
    sign_parser.add_argument("-d", "--document", required=True, help="Document JSON file")
    sign_parser.add_argument("-s", "--signer", required=True, help="Signer id")
    sign_parser.add_argument("-k", "--key", required=True, help="Private key (hex)")
    sign_parser.add_argument("-o", "--output", help="Output file for signed document")

    # keygen
    keygen_parser = subparsers.add_parser("keygen", help="Generate a key pair")
    keygen_parser.add_argument("-s", "--signer", help="Signer id to include in output")

    # demo
    subparsers.add_parser("demo", help="Run demonstration")

    return parser


COMMANDS = {
    "verify": cmd_verify,
    "hash": cmd_hash,
    "sign": cmd_sign,
    "keygen": cmd_keygen,
    "demo": cmd_demo,
}


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command not in COMMANDS:
        parser.print_help()
        return 2

    try:
        configure_logging(
            level="DEBUG" if config.is_debug() else args.log_level,
            json_format=args.json_logs,
            log_file=config.LOG_FILE or None
        )
        logger.debug("Settings: %s", config.current_settings())

        return COMMANDS[args.command](args)
    except FileNotFoundError as e:
        print(f"ERROR: File not found - {e.filename}", file=sys.stderr)
    except json.JSONDecodeError as e:
        print(f"ERROR: JSON parse error - {e}", file=sys.stderr)
    except (ValueError, ChainSignError) as e:
        print(f"ERROR: {e}", file=sys.stderr)
    return 2


if __name__ == "__main__":
    sys.exit(main())
