"""
chainsign Data Model

Value objects for signed documents and their verification results.

Attribute names are snake_case; the wire format (JSON documents, and the
serialization that feeds the hash chain) uses camelCase names so documents
stay interoperable with other implementations of the same chain format.
"""

import copy
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, List, Optional, Tuple

from .errors import FailureKind

PAYLOAD_REQUIRED_FIELDS = ("documentId", "content")
SIGNATURE_FIELDS = ("signerId", "signature", "signedAt", "signedHash")


class Payload(Mapping):
    """
    Immutable document payload.

    Holds arbitrary fields; `documentId` and `content` are required. The
    mapping is deep-copied on construction so later changes to the source
    dict cannot alter a payload that is being verified.
    """

    __slots__ = ("_fields",)

    def __init__(self, fields: Mapping):
        if not isinstance(fields, Mapping):
            raise ValueError("payload must be an object/dict")

        missing = [f for f in PAYLOAD_REQUIRED_FIELDS if f not in fields]
        if missing:
            raise ValueError(f"Payload missing required fields: {missing}")

        self._fields: Dict[str, Any] = copy.deepcopy(dict(fields))

    @property
    def document_id(self) -> str:
        return self._fields["documentId"]

    @property
    def content(self) -> str:
        return self._fields["content"]

    def __getitem__(self, key: str) -> Any:
        return self._fields[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._fields)

    def __len__(self) -> int:
        return len(self._fields)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, Payload):
            return self._fields == other._fields
        if isinstance(other, Mapping):
            return self._fields == dict(other)
        return NotImplemented

    __hash__ = None

    def __repr__(self) -> str:
        return f"Payload({self._fields!r})"

    def replace(self, **changes: Any) -> 'Payload':
        """Return a copy with some fields changed (wire names as keywords)."""
        fields = dict(self._fields)
        fields.update(changes)
        return Payload(fields)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to a plain dict (deep copy)."""
        return copy.deepcopy(self._fields)

    @classmethod
    def from_dict(cls, data: Mapping) -> 'Payload':
        return cls(data)


@dataclass(frozen=True)
class SignatureRecord:
    """
    One signer's entry in the chain.

    `signature` is hex-encoded; `signed_hash` is the chain hash the signer
    actually signed. Unknown wire fields are kept in `extra` so that a record
    read from JSON serializes exactly as it was written.
    """
    signer_id: str
    signature: str
    signed_at: str
    signed_hash: str
    extra: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to wire-format dictionary."""
        d = dict(self.extra)
        d.update({
            "signerId": self.signer_id,
            "signature": self.signature,
            "signedAt": self.signed_at,
            "signedHash": self.signed_hash,
        })
        return d

    @classmethod
    def from_dict(cls, data: Mapping) -> 'SignatureRecord':
        """Create a record from a wire-format dictionary."""
        if not isinstance(data, Mapping):
            raise ValueError("signature record must be an object/dict")

        missing = [f for f in SIGNATURE_FIELDS if f not in data]
        if missing:
            raise ValueError(f"Signature record missing required fields: {missing}")

        extra = {k: v for k, v in data.items() if k not in SIGNATURE_FIELDS}
        return cls(
            signer_id=data["signerId"],
            signature=data["signature"],
            signed_at=data["signedAt"],
            signed_hash=data["signedHash"],
            extra=copy.deepcopy(extra),
        )

    def replace(self, **changes: Any) -> 'SignatureRecord':
        """Return a copy with some attributes changed."""
        values = {
            "signer_id": self.signer_id,
            "signature": self.signature,
            "signed_at": self.signed_at,
            "signed_hash": self.signed_hash,
            "extra": dict(self.extra),
        }
        values.update(changes)
        return SignatureRecord(**values)


@dataclass(frozen=True)
class SignedDocument:
    """
    A payload with its signature chain.

    Signatures are in chronological order: index 0 is the first signer and
    the last index the most recent one.
    """
    payload: Optional[Payload]
    signatures: Tuple[SignatureRecord, ...] = ()

    def __post_init__(self):
        if self.payload is not None and not isinstance(self.payload, Payload):
            object.__setattr__(self, "payload", Payload(self.payload))
        object.__setattr__(self, "signatures", tuple(self.signatures or ()))

    def with_signature(self, record: SignatureRecord) -> 'SignedDocument':
        """Return a new document with `record` appended to the chain."""
        return SignedDocument(payload=self.payload, signatures=self.signatures + (record,))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "payload": self.payload.to_dict() if self.payload is not None else None,
            "signatures": [s.to_dict() for s in self.signatures],
        }

    @classmethod
    def from_dict(cls, data: Mapping) -> 'SignedDocument':
        """
        Create a document from its wire format.

        A missing payload or signature list is allowed here; the verifier
        reports those as structural failures.
        """
        if not isinstance(data, Mapping):
            raise ValueError("document must be an object/dict")

        payload_data = data.get("payload")
        signatures_data = data.get("signatures") or []
        if not isinstance(signatures_data, (list, tuple)):
            raise ValueError("signatures must be an array")

        return cls(
            payload=Payload(payload_data) if payload_data is not None else None,
            signatures=tuple(SignatureRecord.from_dict(s) for s in signatures_data),
        )


@dataclass
class SignatureVerificationResult:
    """Outcome of checking one signature in the chain."""
    signer_id: str
    is_valid: bool
    hash_chain_valid: bool = False
    signature_valid: bool = False
    error: Optional[str] = None
    failure: Optional[FailureKind] = None

    def to_dict(self) -> Dict[str, Any]:
        d = {
            "signerId": self.signer_id,
            "isValid": self.is_valid,
            "hashChainValid": self.hash_chain_valid,
            "signatureValid": self.signature_valid,
        }
        if self.error:
            d["error"] = self.error
        if self.failure:
            d["failure"] = self.failure.value
        return d


@dataclass
class VerificationResult:
    """Outcome of verifying a whole document."""
    is_valid: bool
    signature_results: List[SignatureVerificationResult] = field(default_factory=list)
    error: Optional[str] = None
    failure: Optional[FailureKind] = None

    @classmethod
    def structural(cls, reason: str) -> 'VerificationResult':
        return cls(is_valid=False, error=reason, failure=FailureKind.STRUCTURAL)

    @property
    def failed_signers(self) -> List[str]:
        return [r.signer_id for r in self.signature_results if not r.is_valid]

    def to_dict(self) -> Dict[str, Any]:
        d = {
            "isValid": self.is_valid,
            "signatureResults": [r.to_dict() for r in self.signature_results],
        }
        if self.error:
            d["error"] = self.error
        if self.failure:
            d["failure"] = self.failure.value
        return d
