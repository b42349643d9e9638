"""
Deterministic signed documents for demos and tests.

Three signers with fixed keys sign a contract in order. Variants of the same
document with a tampered payload, a corrupted signature or a corrupted chain
hash exercise each failure path of the verifier.
"""

from datetime import datetime, timedelta, timezone
from typing import Dict, List, Optional, Union

from .chain import HashChainBinder
from .models import Payload, SignedDocument
from .registry import SignerRegistry, create_signer_registry
from .signer import ChainSigner
from .signing import KeyPair, SignatureScheme, get_scheme

SIGNER_KEYS = {
    "developer-alice": "1234567890123456789012345678901234567890123456789012345678901234",
    "qa-bob": "2345678901234567890123456789012345678901234567890123456789012345",
    "manager-charlie": "3456789012345678901234567890123456789012345678901234567890123456",
}

SIGNER_ORDER = ["developer-alice", "qa-bob", "manager-charlie"]

DEFAULT_PAYLOAD = {
    "documentId": "CONTRACT-XYZ-123",
    "content": (
        "This is the legal agreement text that must remain unchanged "
        "throughout the signing process."
    ),
}

BASE_TIME = datetime(2024, 1, 15, 9, 0, 0, tzinfo=timezone.utc)
SIGNING_INTERVAL = timedelta(minutes=90)


def flip_hex_char(value: str, position: int) -> str:
    """Replace the hex digit at `position` with a different one."""
    position %= len(value)
    current = value[position]
    replacement = "0" if current.lower() != "0" else "1"
    return value[:position] + replacement + value[position + 1:]


class DocumentGenerator:
    """
    Builds valid and deliberately broken signed documents.

    Args:
        scheme: Signature scheme (instance or name; default: configured)
        binder: Hash-chain binder (default: canonical JSON + configured hash)
    """

    def __init__(
        self,
        scheme: Union[SignatureScheme, str, None] = None,
        binder: Optional[HashChainBinder] = None
    ):
        self.scheme = scheme if isinstance(scheme, SignatureScheme) else get_scheme(scheme)
        self.binder = binder or HashChainBinder()
        self.signer = ChainSigner(binder=self.binder, scheme=self.scheme)
        self.keys: Dict[str, KeyPair] = {
            signer_id: self.scheme.keypair_from_private(private_key)
            for signer_id, private_key in SIGNER_KEYS.items()
        }

    def key_for(self, signer_id: str) -> Optional[KeyPair]:
        return self.keys.get(signer_id)

    def signer_registry(self) -> SignerRegistry:
        return create_signer_registry(
            (signer_id, self.keys[signer_id].identity) for signer_id in SIGNER_ORDER
        )

    def sign_chain(
        self,
        payload: Union[Payload, dict],
        signer_order: Optional[List[str]] = None
    ) -> SignedDocument:
        """Have each signer in `signer_order` sign `payload` in turn."""
        document = SignedDocument(payload=Payload(payload))
        for position, signer_id in enumerate(signer_order or SIGNER_ORDER):
            document = self.signer.sign(
                document,
                signer_id,
                self.keys[signer_id].private_key,
                signed_at=BASE_TIME + position * SIGNING_INTERVAL,
            )
        return document

    def generate_valid_document(self) -> SignedDocument:
        return self.sign_chain(DEFAULT_PAYLOAD)

    def generate_document_with_tampered_payload(self) -> SignedDocument:
        """Valid chain whose content was changed after signing."""
        document = self.generate_valid_document()
        tampered = document.payload.replace(content="This content has been maliciously altered!")
        return SignedDocument(payload=tampered, signatures=document.signatures)

    def generate_document_with_invalid_signature(self, index: int = 1) -> SignedDocument:
        """Valid chain with the signature bytes at `index` corrupted."""
        document = self.generate_valid_document()
        signatures = list(document.signatures)
        record = signatures[index]
        signatures[index] = record.replace(signature=flip_hex_char(record.signature, 0))
        return SignedDocument(payload=document.payload, signatures=signatures)

    def generate_document_with_broken_hash_chain(self, index: int = 1) -> SignedDocument:
        """Valid chain with the recorded signed hash at `index` corrupted."""
        document = self.generate_valid_document()
        signatures = list(document.signatures)
        record = signatures[index]
        signatures[index] = record.replace(signed_hash=flip_hex_char(record.signed_hash, -1))
        return SignedDocument(payload=document.payload, signatures=signatures)
