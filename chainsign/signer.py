"""
chainsign Chain Signer

Appends a signature to a document so that it binds to the payload and to
every signature already on the chain.
"""

import logging
from datetime import datetime, timezone
from typing import Optional, Union

from .chain import HashChainBinder
from .models import SignatureRecord, SignedDocument
from .signing import SignatureScheme, get_scheme

logger = logging.getLogger(__name__)


def utc_timestamp(moment: Optional[datetime] = None) -> str:
    """ISO 8601 UTC timestamp with millisecond precision and Z suffix."""
    moment = moment or datetime.now(timezone.utc)
    return moment.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


class ChainSigner:
    """
    Produces correctly bound signature records.

    The binder and scheme must match the ones the verifier will use.
    """

    def __init__(
        self,
        binder: Optional[HashChainBinder] = None,
        scheme: Union[SignatureScheme, str, None] = None
    ):
        self.binder = binder or HashChainBinder()
        self.scheme = scheme if isinstance(scheme, SignatureScheme) else get_scheme(scheme)

    def sign(
        self,
        document: SignedDocument,
        signer_id: str,
        private_key: str,
        signed_at: Union[datetime, str, None] = None
    ) -> SignedDocument:
        """
        Return a new document with one more signature.

        Args:
            document: The document to extend (not modified)
            signer_id: Registry id of the signer
            private_key: Signer's hex private key for this scheme
            signed_at: Signing time (datetime or preformatted string; default now)
        """
        if document.payload is None:
            raise ValueError("Cannot sign a document without a payload")

        chain_hash = self.binder.expected_hash(document.payload, document.signatures)
        if not isinstance(signed_at, str):
            signed_at = utc_timestamp(signed_at)

        record = SignatureRecord(
            signer_id=signer_id,
            signature=self.scheme.sign(chain_hash, private_key),
            signed_at=signed_at,
            signed_hash=chain_hash,
        )
        logger.debug("Signed position %d as %s", len(document.signatures), signer_id)
        return document.with_signature(record)
