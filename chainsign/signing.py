"""
chainsign Signature Schemes

A scheme signs chain hashes and turns a signature back into the identity that
produced it. The verifier compares that identity with the signer registry.

Supported schemes:
- secp256k1 (ecdsa): 65-byte r || s || v signatures with public-key recovery.
  Identity is the compressed public key in hex.
- ed25519 (PyNaCl): 64-byte signatures. Ed25519 has no key recovery, so the
  registered identity is used as the candidate key and returned only when the
  signature verifies against it.

Messages are the UTF-8 bytes of the chain hash string. Keys and signatures
travel as hex.
"""

import hashlib
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Dict, Optional

from ecdsa import SECP256k1, SigningKey as EcdsaSigningKey, VerifyingKey as EcdsaVerifyingKey
from ecdsa.util import sigdecode_string, sigencode_string
from nacl.encoding import HexEncoder
from nacl.exceptions import BadSignatureError
from nacl.signing import SigningKey as Ed25519SigningKey, VerifyKey as Ed25519VerifyKey

from .errors import SignatureSchemeError, UnknownSchemeError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class KeyPair:
    """A private key and the identity it signs as."""
    private_key: str
    identity: str
    scheme: str

    def to_dict(self) -> Dict[str, str]:
        return {
            "scheme": self.scheme,
            "privateKey": self.private_key,
            "identity": self.identity,
        }


def _decode_hex(value: str, what: str) -> bytes:
    if not isinstance(value, str):
        raise SignatureSchemeError(f"{what} must be a hex string")
    text = value[2:] if value[:2] in ("0x", "0X") else value
    try:
        return bytes.fromhex(text)
    except ValueError as e:
        raise SignatureSchemeError(f"{what} is not valid hex: {e}") from e


class SignatureScheme(ABC):
    """Capability interface for signing and identity recovery."""

    name: str = ""

    @abstractmethod
    def generate_keypair(self) -> KeyPair:
        """Create a fresh random key pair."""

    @abstractmethod
    def identity_for(self, private_key: str) -> str:
        """Derive the public identity for a hex private key."""

    @abstractmethod
    def sign(self, message: str, private_key: str) -> str:
        """Sign `message` and return the hex signature."""

    @abstractmethod
    def recover_identity(self, message: str, signature: str, expected_identity: str) -> str:
        """
        Return the identity that produced `signature` over `message`.

        Raises:
            SignatureSchemeError: if the signature cannot be decoded or
                does not yield an identity
        """

    def keypair_from_private(self, private_key: str) -> KeyPair:
        return KeyPair(private_key=private_key, identity=self.identity_for(private_key), scheme=self.name)


class Secp256k1Scheme(SignatureScheme):
    """ECDSA over secp256k1 with SHA-256 and a trailing recovery byte."""

    name = "secp256k1"

    SIGNATURE_LENGTH = 65

    def _signing_key(self, private_key: str) -> EcdsaSigningKey:
        raw = _decode_hex(private_key, "private key")
        try:
            return EcdsaSigningKey.from_string(raw, curve=SECP256k1, hashfunc=hashlib.sha256)
        except Exception as e:
            raise SignatureSchemeError(f"Invalid secp256k1 private key: {e}") from e

    def generate_keypair(self) -> KeyPair:
        sk = EcdsaSigningKey.generate(curve=SECP256k1, hashfunc=hashlib.sha256)
        return self.keypair_from_private(sk.to_string().hex())

    def identity_for(self, private_key: str) -> str:
        vk = self._signing_key(private_key).get_verifying_key()
        return vk.to_string("compressed").hex()

    def _candidates(self, rs: bytes, message: bytes):
        return EcdsaVerifyingKey.from_public_key_recovery(
            rs,
            message,
            SECP256k1,
            hashfunc=hashlib.sha256,
            sigdecode=sigdecode_string,
        )

    def sign(self, message: str, private_key: str) -> str:
        sk = self._signing_key(private_key)
        data = message.encode("utf-8")
        rs = sk.sign_deterministic(data, hashfunc=hashlib.sha256, sigencode=sigencode_string)

        own_key = sk.get_verifying_key().to_string()
        for recovery_id, candidate in enumerate(self._candidates(rs, data)):
            if candidate.to_string() == own_key:
                return (rs + bytes([recovery_id])).hex()

        raise SignatureSchemeError("Could not determine recovery id for signature")

    def recover_identity(self, message: str, signature: str, expected_identity: str = "") -> str:
        raw = _decode_hex(signature, "signature")
        if len(raw) != self.SIGNATURE_LENGTH:
            raise SignatureSchemeError(
                f"secp256k1 signature must be {self.SIGNATURE_LENGTH} bytes, got {len(raw)}"
            )

        rs, recovery_id = raw[:64], raw[64]
        try:
            candidates = self._candidates(rs, message.encode("utf-8"))
        except Exception as e:
            raise SignatureSchemeError(f"Public key recovery failed: {e}") from e

        if recovery_id >= len(candidates):
            raise SignatureSchemeError(f"Invalid recovery id: {recovery_id}")

        return candidates[recovery_id].to_string("compressed").hex()


class Ed25519Scheme(SignatureScheme):
    """Ed25519 (RFC 8032) signatures; identity is the public key hex."""

    name = "ed25519"

    def _signing_key(self, private_key: str) -> Ed25519SigningKey:
        raw = _decode_hex(private_key, "private key")
        try:
            return Ed25519SigningKey(raw)
        except Exception as e:
            raise SignatureSchemeError(f"Invalid Ed25519 private key: {e}") from e

    def generate_keypair(self) -> KeyPair:
        sk = Ed25519SigningKey.generate()
        return self.keypair_from_private(bytes(sk).hex())

    def identity_for(self, private_key: str) -> str:
        sk = self._signing_key(private_key)
        return sk.verify_key.encode(encoder=HexEncoder).decode("ascii")

    def sign(self, message: str, private_key: str) -> str:
        sk = self._signing_key(private_key)
        return sk.sign(message.encode("utf-8")).signature.hex()

    def recover_identity(self, message: str, signature: str, expected_identity: str) -> str:
        sig = _decode_hex(signature, "signature")
        key = _decode_hex(expected_identity, "identity")
        try:
            verify_key = Ed25519VerifyKey(key)
            verify_key.verify(message.encode("utf-8"), sig)
        except BadSignatureError as e:
            raise SignatureSchemeError("Ed25519 signature does not verify") from e
        except Exception as e:
            raise SignatureSchemeError(f"Ed25519 verification failed: {e}") from e

        return verify_key.encode(encoder=HexEncoder).decode("ascii")


SIGNATURE_SCHEMES: Dict[str, SignatureScheme] = {
    Secp256k1Scheme.name: Secp256k1Scheme(),
    Ed25519Scheme.name: Ed25519Scheme(),
}


def get_scheme(name: Optional[str] = None) -> SignatureScheme:
    """Look up a signature scheme by name (default: configured scheme)."""
    if name is None:
        from .config import SIGNATURE_SCHEME
        name = SIGNATURE_SCHEME

    try:
        return SIGNATURE_SCHEMES[name.lower()]
    except KeyError:
        raise UnknownSchemeError(
            f"Unknown signature scheme '{name}': must be one of {sorted(SIGNATURE_SCHEMES)}"
        ) from None


def sign_message(message: str, private_key: str, scheme: Optional[str] = None) -> str:
    """Sign a message with the given (or configured) scheme."""
    return get_scheme(scheme).sign(message, private_key)


def verify_signature(
    message: str,
    signature: str,
    expected_identity: str,
    scheme: Optional[str] = None
) -> bool:
    """
    Check that `signature` over `message` was made by `expected_identity`.

    Identities are compared case-insensitively. Never raises for bad input.
    """
    try:
        recovered = get_scheme(scheme).recover_identity(message, signature, expected_identity)
    except SignatureSchemeError as e:
        logger.debug("Signature recovery failed: %s", e)
        return False
    return recovered.lower() == expected_identity.lower()
