#! /usr/bin/env python
# vim: expandtab shiftwidth=4 softtabstop=4 tabstop=17 filetype=python :
"""toffee.options holds the issuance configuration and the option functions
used to build one.

An option is a plain function taking an IssuanceConfig and returning a new
one with a single field changed. Options are applied left to right over the
defaults, so a later option silently overrides an earlier one:

    >>> resolve(with_rsa_bits(1024), with_rsa_bits(4096)).rsa_bits
    4096
"""

import dataclasses
import datetime
from typing import Callable, Optional

CURVE_P224 = "P224"
CURVE_P256 = "P256"
CURVE_P384 = "P384"
CURVE_P521 = "P521"
CURVES = (CURVE_P224, CURVE_P256, CURVE_P384, CURVE_P521)

# Format of the start date, e.g. "Jan 2 15:04:05 2011"
START_DATE_FORMAT = "%b %d %H:%M:%S %Y"

DEFAULT_VALIDITY = datetime.timedelta(days=365)
DEFAULT_RSA_BITS = 2048


@dataclasses.dataclass(frozen=True)
class IssuanceConfig:
    cert_file_name: str = "cert.pem"
    key_file_name: str = "key.pem"
    parent_cert: Optional[str] = None
    parent_key: Optional[str] = None
    valid_from: Optional[str] = None
    valid_for: datetime.timedelta = DEFAULT_VALIDITY
    rsa_bits: int = DEFAULT_RSA_BITS
    ecdsa_curve: Optional[str] = None
    ed25519: bool = False
    is_ca: bool = False
    atomic: bool = False

    @property
    def has_parent(self):
        return bool(self.parent_cert or self.parent_key)


Option = Callable[[IssuanceConfig], IssuanceConfig]


def _setter(**changes) -> Option:
    def option(config):
        return dataclasses.replace(config, **changes)

    return option


def resolve(*options: Option) -> IssuanceConfig:
    """Apply options, in order, over the default configuration"""
    config = IssuanceConfig()
    for option in options:
        config = option(config)
    return config


def with_cert_file_name(name) -> Option:
    """Name of the generated certificate file (default cert.pem)"""
    return _setter(cert_file_name=name)


def with_key_file_name(name) -> Option:
    """Name of the generated key file (default key.pem)"""
    return _setter(key_file_name=name)


def with_sign_by_parent(cert_path, key_path) -> Option:
    """Sign with the certificate and PKCS#8 key stored in these PEM files"""
    return _setter(parent_cert=cert_path, parent_key=key_path)


def with_start_date(start_date) -> Option:
    """Start of validity, formatted like "Jan 2 15:04:05 2011" (UTC)"""
    return _setter(valid_from=start_date)


def with_duration(duration: datetime.timedelta) -> Option:
    """How long the certificate is valid for, counted from the start date.

    Zero gives a certificate whose validity starts and ends at the same
    instant. A negative duration is refused by cryptography when signing
    and raises SigningFailure, use a start date in the past to get an
    already expired certificate."""
    return _setter(valid_for=duration)


def with_ca() -> Option:
    """The certificate is its own certificate authority"""
    return _setter(is_ca=True)


def with_rsa_bits(bits) -> Option:
    """Size of the RSA key. Ignored when a curve or Ed25519 is chosen"""
    return _setter(rsa_bits=bits)


def with_ecdsa_curve(curve) -> Option:
    """Free-form curve name, checked only when the key is generated"""
    return _setter(ecdsa_curve=curve)


def with_p224() -> Option:
    return with_ecdsa_curve(CURVE_P224)


def with_p256() -> Option:
    return with_ecdsa_curve(CURVE_P256)


def with_p384() -> Option:
    return with_ecdsa_curve(CURVE_P384)


def with_p521() -> Option:
    return with_ecdsa_curve(CURVE_P521)


def with_ed25519() -> Option:
    return _setter(ed25519=True)


def with_atomic_write() -> Option:
    """Write each output file to a temporary name and rename it into place"""
    return _setter(atomic=True)
