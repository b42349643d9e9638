"""
chainsign error taxonomy.

Data problems found while verifying a document are reported as values
(`FailureKind` on a result). Exceptions are reserved for misuse: bad
configuration names, malformed keys handed to a signer, and the like.
"""

from enum import Enum


class FailureKind(str, Enum):
    """Category of a verification failure."""
    STRUCTURAL = "STRUCTURAL"
    REGISTRY_LOOKUP = "REGISTRY_LOOKUP"
    HASH_CHAIN = "HASH_CHAIN"
    SIGNATURE_AUTHENTICITY = "SIGNATURE_AUTHENTICITY"


class ChainSignError(Exception):
    """Base class for chainsign exceptions."""


class SignatureSchemeError(ChainSignError):
    """A signature or key could not be decoded or recovered."""


class UnknownSchemeError(ChainSignError, ValueError):
    """No signature scheme is registered under the requested name."""


class UnknownHashError(ChainSignError, ValueError):
    """No hash function is registered under the requested name."""
