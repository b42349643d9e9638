"""
Configuration module for chainsign.

Centralizes runtime defaults with environment variable support. Values are
read once at import; explicit arguments to `ChainVerifier` or the CLI always
take precedence.
"""

import os
from typing import Dict, Any

# ============================================================
# Environment Configuration
# ============================================================

# Signature scheme used to recover signer identities (secp256k1|ed25519)
SIGNATURE_SCHEME = os.getenv("CHAINSIGN_SCHEME", "secp256k1")

# Hash function for the chain (sha256|sha3-256)
HASH_ALGORITHM = os.getenv("CHAINSIGN_HASH", "sha256")

# Worker threads for per-signature checks (1 = sequential)
MAX_WORKERS = int(os.getenv("CHAINSIGN_MAX_WORKERS", "1"))

# Logging
LOG_LEVEL = os.getenv("CHAINSIGN_LOG_LEVEL", "WARNING")
LOG_FILE = os.getenv("CHAINSIGN_LOG_FILE", "")


# ============================================================
# Feature Flags
# ============================================================

def _flag(name: str) -> bool:
    return os.getenv(name, "").lower() in ("1", "true", "yes")


def is_debug() -> bool:
    """Check if debug mode is enabled."""
    return _flag("CHAINSIGN_DEBUG")


def log_json_enabled() -> bool:
    """Check if structured JSON log output is requested."""
    return _flag("CHAINSIGN_LOG_JSON")


def current_settings() -> Dict[str, Any]:
    """Snapshot of the effective configuration, for diagnostics."""
    return {
        "scheme": SIGNATURE_SCHEME,
        "hash": HASH_ALGORITHM,
        "max_workers": MAX_WORKERS,
        "log_level": LOG_LEVEL,
        "log_json": log_json_enabled(),
        "debug": is_debug(),
    }
