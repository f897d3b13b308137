#! /usr/bin/env python
# vim: expandtab shiftwidth=4 softtabstop=4 tabstop=17 filetype=python :
"""tests.test_options contains the unittests for toffee.options"""
import dataclasses
import datetime
import unittest

from toffee import options


class TestResolve(unittest.TestCase):
    def test_defaults(self):
        config = options.resolve()
        self.assertEqual(config.cert_file_name, "cert.pem")
        self.assertEqual(config.key_file_name, "key.pem")
        self.assertIsNone(config.parent_cert)
        self.assertIsNone(config.parent_key)
        self.assertIsNone(config.valid_from)
        self.assertEqual(config.valid_for, datetime.timedelta(days=365))
        self.assertEqual(config.rsa_bits, 2048)
        self.assertIsNone(config.ecdsa_curve)
        self.assertFalse(config.ed25519)
        self.assertFalse(config.is_ca)
        self.assertFalse(config.atomic)
        self.assertFalse(config.has_parent)

    def test_each_option_sets_its_field(self):
        duration = datetime.timedelta(hours=3)
        cases = (
            (options.with_cert_file_name("c.pem"), "cert_file_name", "c.pem"),
            (options.with_key_file_name("k.pem"), "key_file_name", "k.pem"),
            (options.with_start_date("Jan 2 15:04:05 2011"), "valid_from",
             "Jan 2 15:04:05 2011"),
            (options.with_duration(duration), "valid_for", duration),
            (options.with_ca(), "is_ca", True),
            (options.with_rsa_bits(4096), "rsa_bits", 4096),
            (options.with_p224(), "ecdsa_curve", "P224"),
            (options.with_p256(), "ecdsa_curve", "P256"),
            (options.with_p384(), "ecdsa_curve", "P384"),
            (options.with_p521(), "ecdsa_curve", "P521"),
            (options.with_ecdsa_curve("P192"), "ecdsa_curve", "P192"),
            (options.with_ed25519(), "ed25519", True),
            (options.with_atomic_write(), "atomic", True),
        )
        defaults = dataclasses.asdict(options.resolve())
        for option, field, value in cases:
            with self.subTest(field=field, value=value):
                config = options.resolve(option)
                self.assertEqual(getattr(config, field), value)
                # and nothing else changed
                changed = {
                    k for k, v in dataclasses.asdict(config).items()
                    if v != defaults[k]
                }
                self.assertEqual(changed, {field})

    def test_parent_sets_both(self):
        config = options.resolve(options.with_sign_by_parent("ca.pem", "ca.key"))
        self.assertEqual(config.parent_cert, "ca.pem")
        self.assertEqual(config.parent_key, "ca.key")
        self.assertTrue(config.has_parent)

    def test_later_overrides_earlier(self):
        config = options.resolve(
            options.with_rsa_bits(1024),
            options.with_p256(),
            options.with_rsa_bits(4096),
            options.with_p521(),
        )
        self.assertEqual(config.rsa_bits, 4096)
        self.assertEqual(config.ecdsa_curve, "P521")

    def test_no_validation(self):
        config = options.resolve(
            options.with_rsa_bits(-1),
            options.with_duration(datetime.timedelta(days=-1)),
            options.with_start_date("not a date"),
        )
        self.assertEqual(config.rsa_bits, -1)
        self.assertEqual(config.valid_for, datetime.timedelta(days=-1))

    def test_config_is_immutable(self):
        config = options.resolve()
        with self.assertRaises(dataclasses.FrozenInstanceError):
            config.is_ca = True

    def test_options_do_not_mutate_their_input(self):
        config = options.IssuanceConfig()
        changed = options.with_ca()(config)
        self.assertFalse(config.is_ca)
        self.assertTrue(changed.is_ca)
