#! /usr/bin/env python
# vim: expandtab shiftwidth=4 softtabstop=4 tabstop=17 filetype=python :
"""Loading certificates and keys from PEM files.

The loaders read a whole file, check the label of its first PEM block and
only then hand the data to cryptography. Every failure says which of those
steps went wrong."""

import re

from cryptography import x509
from cryptography.exceptions import UnsupportedAlgorithm
from cryptography.hazmat.primitives import serialization

from .errors import CertificateParseFailure, KeyParseFailure
from .keys import KeyPair

CERTIFICATE = "CERTIFICATE"
PRIVATE_KEY = "PRIVATE KEY"

_BEGIN = re.compile(rb"-----BEGIN ([^-\r\n]*)-----")


def block_label(data):
    """Label of the first PEM block in data, None if there is none"""
    match = _BEGIN.search(data)
    if match is None:
        return None
    return match.group(1).decode("ascii", "replace")


def _read_block(path, expected, error):
    try:
        with open(path, "rb") as f:
            data = f.read()
    except OSError as exc:
        raise error("read", "failed to read file {}: {}".format(path, exc)) from exc

    label = block_label(data)
    if label is None:
        raise error("pem", "failed to parse {} PEM: no PEM block found".format(expected))
    if label != expected:
        raise error(
            "type",
            "failed to parse {} PEM: found {!r} block".format(expected, label),
        )
    return data


def load_certificate(path):
    """Reads a CERTIFICATE PEM file, returns a cryptography x509.Certificate"""
    data = _read_block(path, CERTIFICATE, CertificateParseFailure)
    try:
        return x509.load_pem_x509_certificate(data)
    except ValueError as exc:
        raise CertificateParseFailure(
            "parse", "failed to parse certificate: {}".format(exc)
        ) from exc


def load_private_key(path):
    """Reads a PKCS#8 PRIVATE KEY PEM file, returns a KeyPair"""
    data = _read_block(path, PRIVATE_KEY, KeyParseFailure)
    try:
        private_key = serialization.load_pem_private_key(data, password=None)
        return KeyPair(private_key)
    except (ValueError, TypeError, UnsupportedAlgorithm) as exc:
        raise KeyParseFailure(
            "parse", "failed to parse private key: {}".format(exc)
        ) from exc
