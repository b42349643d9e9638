"""
Signature scheme and signer registry tests.
"""

import json
import os
import tempfile
import unittest

from chainsign import (
    Secp256k1Scheme,
    Ed25519Scheme,
    SignatureSchemeError,
    UnknownSchemeError,
    SignerRegistry,
    create_signer_registry,
    load_registry,
    get_scheme,
    sign_message,
    verify_signature,
)
from chainsign.fixtures import SIGNER_KEYS, flip_hex_char

ALICE_KEY = SIGNER_KEYS["developer-alice"]
BOB_KEY = SIGNER_KEYS["qa-bob"]
MESSAGE = "sha256:" + "ab" * 32


class SchemeContract:
    """Checks shared by every signature scheme."""

    scheme = None
    signature_hex_length = 0
    identity_hex_length = 0

    def test_sign_and_recover(self):
        signature = self.scheme.sign(MESSAGE, ALICE_KEY)
        identity = self.scheme.identity_for(ALICE_KEY)
        self.assertEqual(len(signature), self.signature_hex_length)
        self.assertEqual(len(identity), self.identity_hex_length)
        self.assertEqual(self.scheme.recover_identity(MESSAGE, signature, identity), identity)

    def test_verify_signature_helper(self):
        signature = sign_message(MESSAGE, ALICE_KEY, scheme=self.scheme.name)
        identity = self.scheme.identity_for(ALICE_KEY)
        self.assertTrue(verify_signature(MESSAGE, signature, identity, scheme=self.scheme.name))

    def test_identity_comparison_ignores_case(self):
        signature = self.scheme.sign(MESSAGE, ALICE_KEY)
        identity = self.scheme.identity_for(ALICE_KEY).upper()
        self.assertTrue(verify_signature(MESSAGE, signature, identity, scheme=self.scheme.name))

    def test_rejects_wrong_signer(self):
        signature = self.scheme.sign(MESSAGE, BOB_KEY)
        alice = self.scheme.identity_for(ALICE_KEY)
        self.assertFalse(verify_signature(MESSAGE, signature, alice, scheme=self.scheme.name))

    def test_rejects_tampered_signature(self):
        signature = flip_hex_char(self.scheme.sign(MESSAGE, ALICE_KEY), 0)
        alice = self.scheme.identity_for(ALICE_KEY)
        self.assertFalse(verify_signature(MESSAGE, signature, alice, scheme=self.scheme.name))

    def test_rejects_different_message(self):
        signature = self.scheme.sign(MESSAGE, ALICE_KEY)
        alice = self.scheme.identity_for(ALICE_KEY)
        self.assertFalse(
            verify_signature(MESSAGE + "0", signature, alice, scheme=self.scheme.name)
        )

    def test_invalid_signature_handled_gracefully(self):
        alice = self.scheme.identity_for(ALICE_KEY)
        self.assertFalse(verify_signature(MESSAGE, "invalid-signature", alice, scheme=self.scheme.name))
        self.assertFalse(verify_signature(MESSAGE, "abcd", alice, scheme=self.scheme.name))
        with self.assertRaises(SignatureSchemeError):
            self.scheme.recover_identity(MESSAGE, "invalid-signature", alice)

    def test_generate_keypair(self):
        key_pair = self.scheme.generate_keypair()
        self.assertEqual(key_pair.scheme, self.scheme.name)
        self.assertEqual(key_pair.identity, self.scheme.identity_for(key_pair.private_key))
        signature = self.scheme.sign(MESSAGE, key_pair.private_key)
        self.assertEqual(
            self.scheme.recover_identity(MESSAGE, signature, key_pair.identity),
            key_pair.identity
        )

    def test_bad_private_key(self):
        with self.assertRaises(SignatureSchemeError):
            self.scheme.sign(MESSAGE, "zz")
        with self.assertRaises(SignatureSchemeError):
            self.scheme.identity_for("abcd")


class TestSecp256k1Scheme(SchemeContract, unittest.TestCase):
    scheme = Secp256k1Scheme()
    signature_hex_length = 130
    identity_hex_length = 66

    def test_identity_is_compressed_public_key(self):
        self.assertIn(self.scheme.identity_for(ALICE_KEY)[:2], ("02", "03"))

    def test_signatures_are_deterministic(self):
        self.assertEqual(self.scheme.sign(MESSAGE, ALICE_KEY), self.scheme.sign(MESSAGE, ALICE_KEY))

    def test_recovery_does_not_need_expected_identity(self):
        signature = self.scheme.sign(MESSAGE, ALICE_KEY)
        self.assertEqual(
            self.scheme.recover_identity(MESSAGE, signature, ""),
            self.scheme.identity_for(ALICE_KEY)
        )

    def test_accepts_0x_prefix(self):
        signature = "0x" + self.scheme.sign(MESSAGE, ALICE_KEY)
        self.assertEqual(
            self.scheme.recover_identity(MESSAGE, signature, ""),
            self.scheme.identity_for(ALICE_KEY)
        )

    def test_wrong_length_rejected(self):
        signature = self.scheme.sign(MESSAGE, ALICE_KEY)
        with self.assertRaises(SignatureSchemeError):
            self.scheme.recover_identity(MESSAGE, signature[:-2], "")

    def test_invalid_recovery_id_rejected(self):
        signature = self.scheme.sign(MESSAGE, ALICE_KEY)[:-2] + "05"
        with self.assertRaises(SignatureSchemeError):
            self.scheme.recover_identity(MESSAGE, signature, "")


class TestEd25519Scheme(SchemeContract, unittest.TestCase):
    scheme = Ed25519Scheme()
    signature_hex_length = 128
    identity_hex_length = 64

    def test_bad_identity_rejected(self):
        signature = self.scheme.sign(MESSAGE, ALICE_KEY)
        with self.assertRaises(SignatureSchemeError):
            self.scheme.recover_identity(MESSAGE, signature, "abcd")


class TestSchemeLookup(unittest.TestCase):

    def test_known_schemes(self):
        self.assertIsInstance(get_scheme("secp256k1"), Secp256k1Scheme)
        self.assertIsInstance(get_scheme("Ed25519"), Ed25519Scheme)

    def test_unknown_scheme(self):
        with self.assertRaises(UnknownSchemeError):
            get_scheme("rsa")
        with self.assertRaises(UnknownSchemeError):
            verify_signature(MESSAGE, "00", "00", scheme="rsa")


class TestSignerRegistry(unittest.TestCase):

    def setUp(self):
        self.registry = create_signer_registry([
            ("developer-alice", "02AbCdEf"),
            ("qa-bob", "03123456"),
        ])

    def test_lookup(self):
        self.assertEqual(self.registry["developer-alice"], "02AbCdEf")
        self.assertEqual(self.registry.identity_for("qa-bob"), "03123456")
        self.assertIsNone(self.registry.identity_for("manager-charlie"))
        self.assertEqual(len(self.registry), 2)
        self.assertEqual(list(self.registry), ["developer-alice", "qa-bob"])

    def test_identity_matches_ignores_case(self):
        self.assertTrue(self.registry.identity_matches("developer-alice", "02abcdef"))
        self.assertTrue(self.registry.identity_matches("developer-alice", "02ABCDEF"))
        self.assertFalse(self.registry.identity_matches("developer-alice", "03abcdef"))
        self.assertFalse(self.registry.identity_matches("manager-charlie", "02abcdef"))

    def test_blank_identity_treated_as_missing(self):
        registry = create_signer_registry([("ghost", "")])
        self.assertIsNone(registry.identity_for("ghost"))
        self.assertFalse(registry.identity_matches("ghost", ""))

    def test_duplicate_signer_rejected(self):
        with self.assertRaises(ValueError):
            create_signer_registry([("a", "01"), ("a", "02")])

    def test_non_string_identity_rejected(self):
        with self.assertRaises(ValueError):
            SignerRegistry({"a": 1})

    def test_registry_is_read_only(self):
        with self.assertRaises(TypeError):
            self.registry["mallory"] = "02ff"

    def test_load_registry(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = os.path.join(tmp, "registry.json")
            with open(path, "w", encoding="utf-8") as f:
                json.dump({"developer-alice": "02aa", "qa-bob": "03bb"}, f)

            registry = load_registry(path)

        self.assertEqual(registry.to_dict(), {"developer-alice": "02aa", "qa-bob": "03bb"})

    def test_load_registry_requires_object(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = os.path.join(tmp, "registry.json")
            with open(path, "w", encoding="utf-8") as f:
                json.dump([["developer-alice", "02aa"]], f)

            with self.assertRaises(ValueError):
                load_registry(path)


if __name__ == "__main__":
    unittest.main()
