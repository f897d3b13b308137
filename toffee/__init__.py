#! /usr/bin/env python
# vim: expandtab shiftwidth=4 softtabstop=4 tabstop=17 filetype=python :
"""Generate self-signed or parent-signed X.509 certificates for TLS servers,
and verify them against a root."""

from .certlib import generate
from .errors import (
    CertificateParseFailure,
    DateParseFailure,
    FileIOFailure,
    KeyGenerationFailure,
    KeyParseFailure,
    MissingHost,
    ParentLoadFailure,
    SerialNumberFailure,
    SigningFailure,
    ToffeeError,
    UnsupportedCurve,
    VerificationFailure,
)
from .options import (
    IssuanceConfig,
    resolve,
    with_atomic_write,
    with_ca,
    with_cert_file_name,
    with_duration,
    with_ecdsa_curve,
    with_ed25519,
    with_key_file_name,
    with_p224,
    with_p256,
    with_p384,
    with_p521,
    with_rsa_bits,
    with_sign_by_parent,
    with_start_date,
)
from .pem import load_certificate, load_private_key
from .chain import verify
