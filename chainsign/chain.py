"""
chainsign Hash-Chain Binder

Computes the hash a signer at a given chain position must sign:

    expected_hash = H( C(payload) || C(sig_0) || C(sig_1) || ... || C(sig_k-1) )

where C is canonical JSON serialization (keys sorted, compact) and `||` is
string concatenation. Because every prior record, signature bytes included,
is part of the input, each signature binds to the whole chain before it.
"""

from typing import Any, Callable, Mapping, Optional, Sequence, Union

from . import config
from .canonicalization import canonicalize_str
from .hashing import HashFunction, get_hasher
from .models import Payload, SignatureRecord

Serializer = Callable[[Any], str]


def serialize_payload(payload: Mapping, serializer: Serializer = canonicalize_str) -> str:
    """Serialize a payload to its canonical string form."""
    return serializer(payload)


def serialize_signature(
    signature: Union[SignatureRecord, Mapping],
    serializer: Serializer = canonicalize_str
) -> str:
    """Serialize a signature record (wire field names) to its canonical form."""
    if isinstance(signature, SignatureRecord):
        signature = signature.to_dict()
    return serializer(signature)


class HashChainBinder:
    """
    Produces expected chain hashes.

    The serializer and hash function are injectable; the defaults are
    canonical JSON and the configured hash algorithm (`CHAINSIGN_HASH`,
    SHA-256 unless set). Instances hold no state beyond those two
    callables and can be shared freely.
    """

    def __init__(
        self,
        serializer: Optional[Serializer] = None,
        hasher: Optional[HashFunction] = None
    ):
        self.serializer = serializer or canonicalize_str
        self.hasher = hasher or get_hasher(config.HASH_ALGORITHM)

    def chain_input(
        self,
        payload: Mapping,
        prior_signatures: Sequence[Union[SignatureRecord, Mapping]] = ()
    ) -> str:
        """Return the exact string that is hashed for this chain position."""
        parts = [serialize_payload(payload, self.serializer)]
        for signature in prior_signatures:
            parts.append(serialize_signature(signature, self.serializer))
        return "".join(parts)

    def expected_hash(
        self,
        payload: Mapping,
        prior_signatures: Sequence[Union[SignatureRecord, Mapping]] = ()
    ) -> str:
        """
        Compute the hash the next signer must sign.

        Args:
            payload: The document payload (a `Payload` or plain mapping)
            prior_signatures: Records already on the chain, chronological

        Returns:
            Hash string from the configured hash function
        """
        return self.hasher(self.chain_input(payload, prior_signatures))


def expected_hash(
    payload: Union[Payload, Mapping],
    prior_signatures: Sequence[Union[SignatureRecord, Mapping]] = ()
) -> str:
    """Expected chain hash using canonical JSON and the configured hash algorithm."""
    return HashChainBinder().expected_hash(payload, prior_signatures)
