#! /usr/bin/env python3
# vim: expandtab shiftwidth=4 softtabstop=4 tabstop=17 filetype=python :
"""Certificate issuance: template construction, signing and writing the
certificate and key files."""

import dataclasses
import datetime
import ipaddress
import logging
import os
import secrets
import tempfile
from typing import List

from cryptography import x509
from cryptography.exceptions import UnsupportedAlgorithm
from cryptography.hazmat.primitives import serialization
from cryptography.x509.oid import ExtendedKeyUsageOID, NameOID
from dateutil import tz

from . import pem
from .errors import (
    DateParseFailure,
    FileIOFailure,
    MissingHost,
    ParentLoadFailure,
    SerialNumberFailure,
    SigningFailure,
    ToffeeError,
)
from .keys import generate_key
from .options import START_DATE_FORMAT, resolve

LOG = logging.getLogger(__name__)

ORGANIZATION = "Acme Co"
SERIAL_BITS = 128

CERT_MODE = 0o644
KEY_MODE = 0o600


@dataclasses.dataclass
class CertificateTemplate:
    serial_number: int
    not_before: datetime.datetime
    not_after: datetime.datetime
    key_usage: x509.KeyUsage
    is_ca: bool = False
    dns_names: List[str] = dataclasses.field(default_factory=list)
    ip_addresses: List[object] = dataclasses.field(default_factory=list)
    organization: str = ORGANIZATION

    @property
    def subject(self):
        return x509.Name(
            [x509.NameAttribute(NameOID.ORGANIZATION_NAME, self.organization)]
        )

    @property
    def subject_alt_name(self):
        names = [x509.DNSName(name) for name in self.dns_names]
        names += [x509.IPAddress(ip) for ip in self.ip_addresses]
        return x509.SubjectAlternativeName(names)


def parse_start_date(valid_from=None):
    """Start of validity from a "Jan 2 15:04:05 2011" string (UTC), or now"""
    if not valid_from:
        return datetime.datetime.now(tz=tz.UTC)
    try:
        start = datetime.datetime.strptime(valid_from, START_DATE_FORMAT)
    except ValueError as exc:
        raise DateParseFailure(
            "failed to parse creation date: {}".format(exc)
        ) from exc
    return start.replace(tzinfo=tz.UTC)


def random_serial():
    try:
        return secrets.randbelow(1 << SERIAL_BITS)
    except (OSError, NotImplementedError) as exc:
        raise SerialNumberFailure(
            "failed to generate serial number: {}".format(exc)
        ) from exc


def split_hosts(hosts):
    """Splits a comma separated host string into (dns_names, ip_addresses).

    Tokens are not stripped. Anything that isn't an IP literal is a DNS name,
    wildcards and IPv6 addresses with a zone ("fe80::1%eth0") included."""
    dns_names, ip_addresses = [], []
    for token in hosts.split(","):
        if "%" in token:
            dns_names.append(token)
            continue
        try:
            ip_addresses.append(ipaddress.ip_address(token))
        except ValueError:
            dns_names.append(token)
    return dns_names, ip_addresses


def key_usage(key, is_ca=False):
    return x509.KeyUsage(
        digital_signature=True,
        content_commitment=False,
        key_encipherment=key.is_rsa,
        data_encipherment=False,
        key_agreement=False,
        key_cert_sign=is_ca,
        crl_sign=False,
        encipher_only=False,
        decipher_only=False,
    )


def build_template(hosts, key, config):
    not_before = parse_start_date(config.valid_from)
    not_after = not_before + config.valid_for
    dns_names, ip_addresses = split_hosts(hosts)
    return CertificateTemplate(
        serial_number=random_serial(),
        not_before=not_before,
        not_after=not_after,
        key_usage=key_usage(key, config.is_ca),
        is_ca=config.is_ca,
        dns_names=dns_names,
        ip_addresses=ip_addresses,
    )


def _public_der(public_key):
    return public_key.public_bytes(
        serialization.Encoding.DER,
        serialization.PublicFormat.SubjectPublicKeyInfo,
    )


def load_parent(config):
    """Loads the parent certificate and key, returns (certificate, KeyPair)"""
    if not config.parent_cert:
        raise ParentLoadFailure("certificate", None, "no path given")
    if not config.parent_key:
        raise ParentLoadFailure("key", None, "no path given")
    try:
        parent_cert = pem.load_certificate(config.parent_cert)
    except ToffeeError as exc:
        raise ParentLoadFailure("certificate", config.parent_cert, exc) from exc
    try:
        parent_key = pem.load_private_key(config.parent_key)
    except ToffeeError as exc:
        raise ParentLoadFailure("key", config.parent_key, exc) from exc

    if _public_der(parent_key.public_key()) != _public_der(parent_cert.public_key()):
        raise ParentLoadFailure(
            "key", config.parent_key, "key does not match the parent certificate"
        )
    return parent_cert, parent_key


def _authority_key_identifier(issuer_cert):
    try:
        ski = issuer_cert.extensions.get_extension_for_class(
            x509.SubjectKeyIdentifier
        )
    except x509.ExtensionNotFound:
        return x509.AuthorityKeyIdentifier.from_issuer_public_key(
            issuer_cert.public_key()
        )
    return x509.AuthorityKeyIdentifier.from_issuer_subject_key_identifier(
        ski.value
    )


def sign(template, key, parent=None):
    """Signs the template for key.

    Without a parent the certificate signs itself with key, otherwise parent
    is a (certificate, KeyPair) tuple whose key signs and whose subject becomes
    the issuer."""
    if parent is None:
        issuer_name = template.subject
        signer = key
        authority = x509.AuthorityKeyIdentifier.from_issuer_public_key(
            key.public_key()
        )
        LOG.debug("Self-signing certificate with %s", key.description)
    else:
        parent_cert, signer = parent
        issuer_name = parent_cert.subject
        authority = _authority_key_identifier(parent_cert)
        LOG.debug(
            "Signing certificate with parent %s (%s)",
            parent_cert.subject.rfc4514_string(),
            signer.description,
        )

    try:
        builder = (
            x509.CertificateBuilder()
            .subject_name(template.subject)
            .issuer_name(issuer_name)
            .public_key(key.public_key())
            .serial_number(template.serial_number)
            .not_valid_before(template.not_before)
            .not_valid_after(template.not_after)
            .add_extension(template.key_usage, critical=True)
            .add_extension(
                x509.ExtendedKeyUsage([ExtendedKeyUsageOID.SERVER_AUTH]),
                critical=False,
            )
            .add_extension(
                x509.BasicConstraints(ca=template.is_ca, path_length=None),
                critical=True,
            )
            .add_extension(template.subject_alt_name, critical=False)
            .add_extension(
                x509.SubjectKeyIdentifier.from_public_key(key.public_key()),
                critical=False,
            )
            .add_extension(authority, critical=False)
        )
        return builder.sign(
            private_key=signer.private_key,
            algorithm=signer.signature_hash(),
        )
    except (ValueError, TypeError, UnsupportedAlgorithm) as exc:
        raise SigningFailure("failed to create certificate: {}".format(exc)) from exc


def _write_file(path, data, mode, atomic=False):
    target = path
    try:
        if atomic:
            fd, path = tempfile.mkstemp(
                prefix=".", suffix=".tmp", dir=os.path.dirname(target) or os.curdir
            )
            os.fchmod(fd, mode)
        else:
            fd = os.open(path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, mode)
    except OSError as exc:
        raise FileIOFailure(target, "open", exc) from exc

    f = os.fdopen(fd, "wb")
    try:
        f.write(data)
        f.flush()
    except OSError as exc:
        f.close()
        raise FileIOFailure(target, "write", exc) from exc

    try:
        f.close()
    except OSError as exc:
        raise FileIOFailure(target, "close", exc) from exc

    if atomic:
        try:
            os.replace(path, target)
        except OSError as exc:
            raise FileIOFailure(target, "rename", exc) from exc


def write_out_files(cert, key, dest, config):
    """Writes the certificate, then the key. A failure on the key leaves the
    certificate file in place."""
    cert_path = os.path.join(dest, config.cert_file_name)
    key_path = os.path.join(dest, config.key_file_name)

    data = cert.public_bytes(serialization.Encoding.PEM)
    _write_file(cert_path, data, CERT_MODE, atomic=config.atomic)
    LOG.info("Wrote certificate to %s", cert_path)

    data = key.pkcs8()
    _write_file(key_path, data, KEY_MODE, atomic=config.atomic)
    LOG.info("Wrote private key to %s", key_path)
    return cert_path, key_path


def generate(hosts, dest, *options):
    """Generates a certificate for TLS servers and writes it with its key into
    dest, overwriting existing files.

    hosts is a comma separated list of hostnames and IP addresses. The
    certificate is self-signed unless a parent is configured with
    with_sign_by_parent()."""
    if not hosts:
        raise MissingHost()

    config = resolve(*options)
    key = generate_key(config)
    template = build_template(hosts, key, config)

    parent = load_parent(config) if config.has_parent else None
    cert = sign(template, key, parent)
    write_out_files(cert, key, dest, config)
