"""
Command line interface tests.
"""

import contextlib
import io
import json
import os
import tempfile
import unittest

from chainsign.cli import main
from chainsign.fixtures import DocumentGenerator
from chainsign import expected_hash, SignedDocument


def run_cli(*argv):
    """Run the CLI and return (exit_code, stdout, stderr)."""
    out, err = io.StringIO(), io.StringIO()
    with contextlib.redirect_stdout(out), contextlib.redirect_stderr(err):
        code = main(list(argv))
    return code, out.getvalue(), err.getvalue()


class CLITestCase(unittest.TestCase):
    scheme = "ed25519"

    @classmethod
    def setUpClass(cls):
        cls.generator = DocumentGenerator(scheme=cls.scheme)

    def setUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        self.addCleanup(self._tmp.cleanup)
        self.registry_path = self.write("registry.json", self.generator.signer_registry().to_dict())

    def write(self, name, data):
        path = os.path.join(self._tmp.name, name)
        with open(path, "w", encoding="utf-8") as f:
            json.dump(data, f)
        return path


class TestVerifyCommand(CLITestCase):

    def test_valid_document(self):
        doc = self.write("doc.json", self.generator.generate_valid_document().to_dict())
        code, out, _ = run_cli("--scheme", self.scheme, "verify", "-d", doc, "-r", self.registry_path)

        self.assertEqual(code, 0)
        self.assertIn("VALID", out)
        self.assertIn("manager-charlie", out)

    def test_tampered_document(self):
        doc = self.write("doc.json", self.generator.generate_document_with_tampered_payload().to_dict())
        code, out, _ = run_cli("--scheme", self.scheme, "verify", "-d", doc, "-r", self.registry_path)

        self.assertEqual(code, 1)
        self.assertIn("INVALID", out)
        self.assertIn("Hash chain broken", out)

    def test_json_output(self):
        doc = self.write("doc.json", self.generator.generate_document_with_invalid_signature().to_dict())
        code, out, _ = run_cli(
            "--scheme", self.scheme, "verify", "-d", doc, "-r", self.registry_path, "--json", "-w", "3"
        )

        self.assertEqual(code, 1)
        data = json.loads(out)
        self.assertFalse(data["isValid"])
        self.assertEqual(data["signatureResults"][1]["failure"], "SIGNATURE_AUTHENTICITY")

    def test_incomplete_record_is_invalid_not_an_error(self):
        data = self.generator.generate_valid_document().to_dict()
        del data["signatures"][1]["signedAt"]
        doc = self.write("doc.json", data)

        code, out, _ = run_cli("--scheme", self.scheme, "verify", "-d", doc, "-r", self.registry_path, "--json")

        self.assertEqual(code, 1)
        self.assertEqual(json.loads(out)["failure"], "STRUCTURAL")

    def test_missing_file(self):
        code, _, err = run_cli("verify", "-d", "/nonexistent/doc.json", "-r", self.registry_path)
        self.assertEqual(code, 2)
        self.assertIn("File not found", err)

    def test_invalid_json(self):
        path = os.path.join(self._tmp.name, "broken.json")
        with open(path, "w", encoding="utf-8") as f:
            f.write("{not json")

        code, _, err = run_cli("verify", "-d", path, "-r", self.registry_path)
        self.assertEqual(code, 2)
        self.assertIn("JSON parse error", err)

    def test_unknown_scheme(self):
        doc = self.write("doc.json", self.generator.generate_valid_document().to_dict())
        code, _, err = run_cli("--scheme", "rsa", "verify", "-d", doc, "-r", self.registry_path)
        self.assertEqual(code, 2)
        self.assertIn("Unknown signature scheme", err)


class TestHashCommand(CLITestCase):

    def test_hash_for_position(self):
        document = self.generator.generate_valid_document()
        doc = self.write("doc.json", document.to_dict())

        code, out, _ = run_cli("hash", "-d", doc, "-i", "1")

        self.assertEqual(code, 0)
        self.assertIn(expected_hash(document.payload, document.signatures[:1]), out)

    def test_hash_for_next_signer(self):
        document = self.generator.generate_valid_document()
        doc = self.write("doc.json", document.to_dict())

        code, out, _ = run_cli("hash", "-d", doc)

        self.assertEqual(code, 0)
        self.assertIn(expected_hash(document.payload, document.signatures), out)

    def test_index_out_of_range(self):
        doc = self.write("doc.json", self.generator.generate_valid_document().to_dict())
        code, _, err = run_cli("hash", "-d", doc, "-i", "7")
        self.assertEqual(code, 2)
        self.assertIn("index must be between", err)


class TestSignCommand(CLITestCase):

    def test_sign_then_verify(self):
        doc = self.write("doc.json", {"payload": {"documentId": "CLI-1", "content": "From the CLI"}})
        signed_path = os.path.join(self._tmp.name, "signed.json")

        for signer_id in ("developer-alice", "qa-bob"):
            key = self.generator.key_for(signer_id).private_key
            code, _, _ = run_cli(
                "--scheme", self.scheme, "sign", "-d", doc, "-s", signer_id, "-k", key, "-o", signed_path
            )
            self.assertEqual(code, 0)
            doc = signed_path

        with open(signed_path, "r", encoding="utf-8") as f:
            signed = SignedDocument.from_dict(json.load(f))
        self.assertEqual([s.signer_id for s in signed.signatures], ["developer-alice", "qa-bob"])

        code, _, _ = run_cli("--scheme", self.scheme, "verify", "-d", signed_path, "-r", self.registry_path)
        self.assertEqual(code, 0)

    def test_bad_key(self):
        doc = self.write("doc.json", {"payload": {"documentId": "CLI-1", "content": "c"}})
        code, _, err = run_cli("--scheme", self.scheme, "sign", "-d", doc, "-s", "x", "-k", "not-hex")
        self.assertEqual(code, 2)
        self.assertIn("ERROR", err)


class TestKeygenCommand(CLITestCase):

    def test_keygen(self):
        code, out, _ = run_cli("--scheme", self.scheme, "keygen", "-s", "qa-bob")

        self.assertEqual(code, 0)
        data = json.loads(out)
        self.assertEqual(data["signerId"], "qa-bob")
        self.assertEqual(data["scheme"], self.scheme)
        self.assertEqual(len(data["identity"]), 64)


class TestDemoCommand(CLITestCase):

    def test_demo_runs(self):
        code, out, _ = run_cli("--scheme", self.scheme, "demo")

        self.assertEqual(code, 0)
        self.assertIn("Tampered payload", out)
        self.assertIn("Demonstration complete.", out)

    def test_no_command_prints_help(self):
        code, out, _ = run_cli()
        self.assertEqual(code, 2)
        self.assertIn("usage", out)


if __name__ == "__main__":
    unittest.main()
