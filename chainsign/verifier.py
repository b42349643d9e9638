"""
chainsign Chain Verification Algorithm

Confirms that a sequentially signed document is intact and that every
signature was produced by its registered signer.

Verification walks the chain from the most recent signature back to the
first. For each position it:
1. Looks up the signer in the registry
2. Recomputes the expected chain hash from the payload and all earlier
   records, and compares it with the recorded signed hash
3. Recovers the signing identity and compares it with the registry entry

Every signature is checked even after a failure, so callers always get a
complete per-signature report in chronological order.
"""

import contextvars
import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Any, List, Mapping, Optional, Sequence, Union

from . import config
from .chain import HashChainBinder
from .errors import FailureKind, SignatureSchemeError
from .logging_config import audit_log
from .models import (
    Payload,
    SignatureRecord,
    SignatureVerificationResult,
    SignedDocument,
    VerificationResult,
)
from .registry import SignerRegistry
from .signing import SignatureScheme, get_scheme

logger = logging.getLogger(__name__)

NO_SIGNATURES = "Document has no signatures"
NO_PAYLOAD = "Document has no payload"
MALFORMED_DOCUMENT = "Malformed document"


class ChainVerifier:
    """
    Verifier for hash-chained multi-signature documents.

    Args:
        binder: Computes expected chain hashes (default: canonical JSON with
            the configured hash algorithm)
        scheme: Signature scheme used for identity recovery, as an instance
            or a name (default: configured scheme)
        max_workers: Threads used for the per-signature checks; 1 or None
            keeps everything on the calling thread
    """

    def __init__(
        self,
        binder: Optional[HashChainBinder] = None,
        scheme: Union[SignatureScheme, str, None] = None,
        max_workers: Optional[int] = None
    ):
        self.binder = binder or HashChainBinder()
        self.scheme = scheme if isinstance(scheme, SignatureScheme) else get_scheme(scheme)
        self.max_workers = max_workers if max_workers is not None else config.MAX_WORKERS

    def verify(
        self,
        document: Union[SignedDocument, Mapping[str, Any], None],
        registry: Mapping[str, str]
    ) -> VerificationResult:
        """
        Verify a signed document against a signer registry.

        Args:
            document: A `SignedDocument` or its wire-format dict
            registry: Signer id -> identity (a `SignerRegistry` or plain mapping)

        Returns:
            VerificationResult with per-signature results in chronological order

        Raises:
            TypeError: if registry is None
        """
        if registry is None:
            raise TypeError("registry is required")
        if not isinstance(registry, SignerRegistry):
            registry = SignerRegistry(registry)

        if document is not None and not isinstance(document, SignedDocument):
            if isinstance(document, Mapping) and not document.get("signatures"):
                document = None
            else:
                try:
                    document = SignedDocument.from_dict(document)
                except ValueError as e:
                    reason = f"{MALFORMED_DOCUMENT}: {e}"
                    audit_log.verification_result(None, False, error=reason)
                    return VerificationResult.structural(reason)

        if document is None or not document.signatures:
            audit_log.verification_result(None, False, error=NO_SIGNATURES)
            return VerificationResult.structural(NO_SIGNATURES)

        if document.payload is None:
            audit_log.verification_result(None, False, error=NO_PAYLOAD)
            return VerificationResult.structural(NO_PAYLOAD)

        payload = document.payload
        signatures = tuple(document.signatures)
        audit_log.verification_request(payload.get("documentId"), len(signatures))

        indices = range(len(signatures) - 1, -1, -1)
        if self.max_workers and self.max_workers > 1 and len(signatures) > 1:
            with ThreadPoolExecutor(max_workers=self.max_workers) as executor:
                # Each job runs in a copy of the caller's context (verification id)
                futures = [
                    executor.submit(
                        contextvars.copy_context().run,
                        self._verify_at_index, payload, signatures, i, registry
                    )
                    for i in indices
                ]
                checked = [f.result() for f in futures]
        else:
            checked = [self._verify_at_index(payload, signatures, i, registry) for i in indices]

        result = VerificationResult(is_valid=True)
        for i, sig_result in zip(indices, checked):
            # Reverse traversal; prepend to keep the list chronological
            result.signature_results.insert(0, sig_result)

            if not sig_result.is_valid:
                result.is_valid = False
                audit_log.signature_failure(
                    sig_result.signer_id, i, sig_result.failure.value, sig_result.error
                )
                if result.error is None:
                    result.error = f"Signature chain broken at signer: {signatures[i].signer_id}"
                    result.failure = sig_result.failure

        audit_log.verification_result(
            payload.get("documentId"),
            result.is_valid,
            error=result.error,
            failed_signers=result.failed_signers
        )
        return result

    def _verify_at_index(
        self,
        payload: Payload,
        signatures: Sequence[SignatureRecord],
        index: int,
        registry: SignerRegistry
    ) -> SignatureVerificationResult:
        """Check one signature against the chain prefix before it."""
        signature = signatures[index]
        result = SignatureVerificationResult(signer_id=signature.signer_id, is_valid=False)

        identity = registry.identity_for(signature.signer_id)
        if identity is None:
            result.error = f"Signer {signature.signer_id} not found in registry"
            result.failure = FailureKind.REGISTRY_LOOKUP
            return result

        expected = self.binder.expected_hash(payload, signatures[:index])
        result.hash_chain_valid = expected == signature.signed_hash
        if not result.hash_chain_valid:
            result.error = f"Hash chain broken: expected {expected}, got {signature.signed_hash}"
            result.failure = FailureKind.HASH_CHAIN
            return result

        result.signature_valid = self._signature_matches(signature, identity, registry)
        if not result.signature_valid:
            result.error = f"Invalid cryptographic signature for {signature.signer_id}"
            result.failure = FailureKind.SIGNATURE_AUTHENTICITY
            return result

        result.is_valid = True
        return result

    def _signature_matches(
        self,
        signature: SignatureRecord,
        identity: str,
        registry: SignerRegistry
    ) -> bool:
        try:
            recovered = self.scheme.recover_identity(
                signature.signed_hash, signature.signature, identity
            )
        except SignatureSchemeError as e:
            logger.debug("Identity recovery failed for %s: %s", signature.signer_id, e)
            return False
        except Exception:
            logger.debug("Unexpected error recovering identity for %s",
                         signature.signer_id, exc_info=True)
            return False

        return registry.identity_matches(signature.signer_id, recovered)


def verify(
    document: Union[SignedDocument, Mapping[str, Any], None],
    registry: Mapping[str, str]
) -> VerificationResult:
    """Verify a document with the configured scheme and hash algorithm."""
    return ChainVerifier().verify(document, registry)


def verify_documents(
    documents: List[Union[SignedDocument, Mapping[str, Any]]],
    registry: Mapping[str, str],
    max_workers: int = 4
) -> List[VerificationResult]:
    """
    Verify independent documents concurrently.

    Results are returned in the order of `documents`.
    """
    verifier = ChainVerifier(max_workers=1)
    with ThreadPoolExecutor(max_workers=max_workers) as executor:
        return list(executor.map(lambda d: verifier.verify(d, registry), documents))
