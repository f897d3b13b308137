#! /usr/bin/env python
# vim: expandtab shiftwidth=4 softtabstop=4 tabstop=17 filetype=python :
import contextlib
import io
import os
import unittest.mock

from cryptography import x509

from toffee.scripts import generate, verify

from . import TempDirTestCase


@unittest.mock.patch.dict(os.environ, {"TOFFEE_LOG_LEVEL": "ERROR"})
class TestScripts(TempDirTestCase):
    def run_verify(self, *argv):
        out = io.StringIO()
        with contextlib.redirect_stdout(out):
            verify.main(list(argv))
        return out.getvalue()

    def test_generate_and_verify(self):
        generate.main(["--host", "test.example.com", "--dest", self.dest])
        self.assertTrue(os.path.isfile(self.path("cert.pem")))
        self.assertFileMode("key.pem", 0o600)

        cert = self.path("cert.pem")
        out = self.run_verify(cert, cert, "test.example.com")
        self.assertEqual(out, "{}: OK\n".format(cert))

    def test_generate_options(self):
        generate.main(
            [
                "--host", "a.example.com,127.0.0.1",
                "--dest", self.dest,
                "--ecdsa-curve", "P256",
                "--ca",
                "--duration", "1",
                "--cert-file", "ca.pem",
                "--key-file", "ca.key",
            ]
        )
        cert = self.load("ca.pem")
        constraints = cert.extensions.get_extension_for_class(x509.BasicConstraints)
        self.assertTrue(constraints.value.ca)

        generate.main(
            [
                "--host", "leaf.example.com",
                "--dest", self.dest,
                "--parent-cert", self.path("ca.pem"),
                "--parent-key", self.path("ca.key"),
                "--ed25519",
            ]
        )
        self.run_verify(self.path("ca.pem"), self.path("cert.pem"), "leaf.example.com")

    def test_generate_without_host(self):
        with unittest.mock.patch.dict(os.environ, {}, clear=False):
            os.environ.pop("TOFFEE_HOST", None)
            with self.assertRaises(SystemExit) as cm:
                generate.main(["--dest", self.dest])
        self.assertEqual(cm.exception.code, 1)
        self.assertEqual(os.listdir(self.dest), [])

    def test_generate_bad_curve(self):
        with self.assertRaises(SystemExit) as cm:
            generate.main(
                ["--host", "x.example.com", "--dest", self.dest,
                 "--ecdsa-curve", "P192"]
            )
        self.assertEqual(cm.exception.code, 1)
        self.assertEqual(os.listdir(self.dest), [])

    def test_verify_failure(self):
        generate.main(
            ["--host", "test.example.com", "--dest", self.dest,
             "--ecdsa-curve", "P256"]
        )
        cert = self.path("cert.pem")
        with self.assertRaises(SystemExit) as cm:
            self.run_verify(cert, cert, "other.example.com")
        self.assertEqual(cm.exception.code, 1)
