#!/usr/bin/env python3
"""
chainsign Example - Contract Approval Chain

A contract is signed in turn by its author, a reviewer and an approver.
Each signature commits to the contract and to every earlier signature,
so a verifier can tell exactly where the chain was broken.

Run with: python examples/contract_signing_example.py
"""

import json

from chainsign import (
    ChainSigner,
    ChainVerifier,
    SignedDocument,
    create_signer_registry,
    get_scheme,
)


def print_result(title, result):
    print(f"\n{title}")
    print("-" * 70)
    print(f"  Valid: {result.is_valid}")
    if result.error:
        print(f"  Error: {result.error}")
    for sig in result.signature_results:
        status = "✓" if sig.is_valid else "✗"
        print(f"  {status} {sig.signer_id:<14} hash={sig.hash_chain_valid!s:<5} "
              f"signature={sig.signature_valid}")


def main():
    print("=" * 70)
    print("chainsign Contract Approval - Example")
    print("=" * 70)

    # =========================================================================
    # SETUP: Keys and registry
    # =========================================================================

    scheme = get_scheme("secp256k1")
    approvers = ["author-dana", "legal-eve", "cfo-frank"]
    keys = {signer_id: scheme.generate_keypair() for signer_id in approvers}

    registry = create_signer_registry(
        (signer_id, key_pair.identity) for signer_id, key_pair in keys.items()
    )
    print("\n[SETUP] Registered approvers:")
    for signer_id, identity in registry.items():
        print(f"  {signer_id}: {identity}")

    # =========================================================================
    # SIGNING: Each approver extends the chain
    # =========================================================================

    document = SignedDocument(payload={
        "documentId": "MSA-2024-0042",
        "content": "Master services agreement between Acme Corp and Globex Inc.",
        "version": 3,
    })

    signer = ChainSigner(scheme=scheme)
    for signer_id in approvers:
        document = signer.sign(document, signer_id, keys[signer_id].private_key)
        print(f"\n[SIGN] {signer_id} signed {document.signatures[-1].signed_hash}")

    verifier = ChainVerifier(scheme=scheme)
    print_result("SCENARIO 1: Untouched contract", verifier.verify(document, registry))

    # =========================================================================
    # TAMPERING: The contract text changes after approval
    # =========================================================================

    altered = SignedDocument(
        payload=document.payload.replace(content="Master services agreement (amended)."),
        signatures=document.signatures
    )
    print_result("SCENARIO 2: Contract edited after signing", verifier.verify(altered, registry))

    # =========================================================================
    # REPLACEMENT: An unregistered key re-signs the last step
    # =========================================================================

    intruder = scheme.generate_keypair()
    forged = SignedDocument(payload=document.payload, signatures=document.signatures[:2])
    forged = signer.sign(forged, "cfo-frank", intruder.private_key)
    print_result("SCENARIO 3: Approval forged with another key", verifier.verify(forged, registry))

    print("\n[WIRE FORMAT]")
    print(json.dumps(document.to_dict(), indent=2))


if __name__ == "__main__":
    main()
