"""
chainsign - Hash-Chained Multi-Signature Verification

Version: 1.0.0
License: Apache 2.0

A document is signed by several parties in turn. Each signer signs a hash of
the payload plus every signature record before theirs, so any later change to
the content or to an earlier signature breaks the chain.

chainsign answers one question about such a document: is every signature
bound to an untouched chain, and was it made by the signer it claims?

Usage:
    from chainsign import (
        SignedDocument,
        create_signer_registry,
        expected_hash,
        verify,
    )

    registry = create_signer_registry([
        ("developer-alice", "02a1..."),
        ("qa-bob", "03b2..."),
    ])

    result = verify(document, registry)

    if result.is_valid:
        ...
    else:
        print(result.error)
        for sig in result.signature_results:
            print(sig.signer_id, sig.hash_chain_valid, sig.signature_valid, sig.error)
"""

__version__ = "1.0.0"
__license__ = "Apache-2.0"

# Canonicalization and hashing
from .canonicalization import canonicalize, canonicalize_str
from .hashing import (
    sha256_hash,
    sha3_256_hash,
    get_hasher,
    verify_hash,
)

# Errors
from .errors import (
    FailureKind,
    ChainSignError,
    SignatureSchemeError,
    UnknownSchemeError,
    UnknownHashError,
)

# Data model
from .models import (
    Payload,
    SignatureRecord,
    SignedDocument,
    SignatureVerificationResult,
    VerificationResult,
)

# Registry
from .registry import (
    SignerRegistry,
    create_signer_registry,
    load_registry,
)

# Hash chain
from .chain import (
    HashChainBinder,
    expected_hash,
    serialize_payload,
    serialize_signature,
)

# Signing
from .signing import (
    SignatureScheme,
    Secp256k1Scheme,
    Ed25519Scheme,
    KeyPair,
    get_scheme,
    sign_message,
    verify_signature,
)
from .signer import ChainSigner

# Verifier
from .verifier import (
    ChainVerifier,
    verify,
    verify_documents,
)


__all__ = [
    # Version
    "__version__",

    # Canonicalization
    "canonicalize",
    "canonicalize_str",

    # Hashing
    "sha256_hash",
    "sha3_256_hash",
    "get_hasher",
    "verify_hash",

    # Errors
    "FailureKind",
    "ChainSignError",
    "SignatureSchemeError",
    "UnknownSchemeError",
    "UnknownHashError",

    # Data model
    "Payload",
    "SignatureRecord",
    "SignedDocument",
    "SignatureVerificationResult",
    "VerificationResult",

    # Registry
    "SignerRegistry",
    "create_signer_registry",
    "load_registry",

    # Hash chain
    "HashChainBinder",
    "expected_hash",
    "serialize_payload",
    "serialize_signature",

    # Signing
    "SignatureScheme",
    "Secp256k1Scheme",
    "Ed25519Scheme",
    "KeyPair",
    "get_scheme",
    "sign_message",
    "verify_signature",
    "ChainSigner",

    # Verifier
    "ChainVerifier",
    "verify",
    "verify_documents",
]
