#! /usr/bin/env python
# vim: expandtab shiftwidth=4 softtabstop=4 tabstop=17 filetype=python :
"""Key pairs for the three supported algorithm families"""

import enum
import logging

from cryptography.exceptions import UnsupportedAlgorithm
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import ec, ed25519, rsa

from .errors import KeyGenerationFailure, UnsupportedCurve
from .options import CURVE_P224, CURVE_P256, CURVE_P384, CURVE_P521

LOG = logging.getLogger(__name__)

RSA_PUBLIC_EXPONENT = 65537

CURVES = {
    CURVE_P224: ec.SECP224R1,
    CURVE_P256: ec.SECP256R1,
    CURVE_P384: ec.SECP384R1,
    CURVE_P521: ec.SECP521R1,
}

# Curve size => hash strength.
ECDSA_HASH = {224: hashes.SHA256, 256: hashes.SHA256, 384: hashes.SHA384, 521: hashes.SHA512}


class KeyAlgorithm(enum.Enum):
    RSA = "RSA"
    ECDSA = "ECDSA"
    ED25519 = "Ed25519"


def algorithm_of(private_key):
    """Returns the KeyAlgorithm of a private key, raises TypeError for keys
    outside the supported families"""
    if isinstance(private_key, rsa.RSAPrivateKey):
        return KeyAlgorithm.RSA
    if isinstance(private_key, ec.EllipticCurvePrivateKey):
        return KeyAlgorithm.ECDSA
    if isinstance(private_key, ed25519.Ed25519PrivateKey):
        return KeyAlgorithm.ED25519
    raise TypeError(
        "only RSA, ECDSA and Ed25519 keys are supported, got {}".format(
            type(private_key).__name__
        )
    )


class KeyPair(object):
    """A private key tagged with its algorithm family"""

    def __init__(self, private_key):
        self.algorithm = algorithm_of(private_key)
        self.private_key = private_key

    def __repr__(self):
        return "<{0.__class__.__name__} {0.description}>".format(self)

    @property
    def description(self):
        if self.algorithm is KeyAlgorithm.RSA:
            return "RSA-{}".format(self.private_key.key_size)
        if self.algorithm is KeyAlgorithm.ECDSA:
            return "ECDSA-{}".format(self.private_key.curve.name)
        return self.algorithm.value

    @property
    def is_rsa(self):
        # KeyEncipherment only applies to RSA key exchange in TLS.
        return self.algorithm is KeyAlgorithm.RSA

    def public_key(self):
        return self.private_key.public_key()

    def signature_hash(self):
        """Hash to use when this key signs a certificate. Ed25519 signs the
        message itself and takes no hash."""
        if self.algorithm is KeyAlgorithm.ED25519:
            return None
        if self.algorithm is KeyAlgorithm.ECDSA:
            size = self.private_key.curve.key_size
            return ECDSA_HASH.get(size, hashes.SHA256)()
        return hashes.SHA256()

    def pkcs8(self):
        """The private key as a PKCS#8 PEM block, whatever its algorithm"""
        return self.private_key.private_bytes(
            encoding=serialization.Encoding.PEM,
            format=serialization.PrivateFormat.PKCS8,
            encryption_algorithm=serialization.NoEncryption(),
        )


def generate_key(config):
    """Generates a fresh key pair for a resolved IssuanceConfig.

    A curve takes precedence over the Ed25519 flag, RSA is used when neither
    is set."""
    curve = config.ecdsa_curve
    if curve and curve not in CURVES:
        raise UnsupportedCurve(curve)

    try:
        if curve:
            private_key = ec.generate_private_key(CURVES[curve]())
        elif config.ed25519:
            private_key = ed25519.Ed25519PrivateKey.generate()
        else:
            private_key = rsa.generate_private_key(
                public_exponent=RSA_PUBLIC_EXPONENT,
                key_size=config.rsa_bits,
            )
    except (ValueError, TypeError, UnsupportedAlgorithm) as exc:
        raise KeyGenerationFailure(
            "failed to generate private key: {}".format(exc)
        ) from exc

    key = KeyPair(private_key)
    LOG.debug("Generated %s key", key.description)
    return key
