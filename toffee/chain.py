#! /usr/bin/env python
# vim: expandtab shiftwidth=4 softtabstop=4 tabstop=17 filetype=python :
"""Verification of a certificate against a single trusted root.

The chain itself (signature, validity window, issuer constraints) is checked
by OpenSSL through pyOpenSSL, the same checks `openssl verify -CAfile` does.
On top of that the leaf has to be usable for TLS servers and be valid for
the requested name."""

import ipaddress
import logging

import dateutil.parser
from cryptography import x509
from cryptography.x509.oid import ExtendedKeyUsageOID
from OpenSSL import crypto as _crypto

from .errors import VerificationFailure
from .pem import load_certificate

LOG = logging.getLogger(__name__)


def validity_window(cert):
    """Returns (not_before, not_after) of a pyOpenSSL X509 as datetimes"""
    return tuple(
        dateutil.parser.parse(ts.decode("ascii"))
        for ts in (cert.get_notBefore(), cert.get_notAfter())
    )


def _match_dns(pattern, host):
    """Matches a host against a DNS name from a certificate. A "*" is only
    allowed as the whole left-most label and covers exactly one label."""
    pattern = pattern.lower()
    host = host.lower().rstrip(".")
    if not pattern or not host:
        return False

    pattern_labels = pattern.split(".")
    host_labels = host.split(".")
    if len(pattern_labels) != len(host_labels):
        return False

    for i, (expected, label) in enumerate(zip(pattern_labels, host_labels)):
        if i == 0 and expected == "*" and label:
            continue
        if expected != label:
            return False
    return True


def match_hostname(cert, name):
    """Raises VerificationFailure unless the subject alternative names of a
    cryptography certificate cover name (a DNS name or an IP literal)"""
    try:
        san = cert.extensions.get_extension_for_class(
            x509.SubjectAlternativeName
        ).value
    except x509.ExtensionNotFound:
        raise VerificationFailure(
            "certificate has no subject alternative names, not valid for "
            "{}".format(name)
        )

    try:
        ip = ipaddress.ip_address(name)
    except ValueError:
        ip = None

    if ip is not None:
        candidates = san.get_values_for_type(x509.IPAddress)
        if ip in candidates:
            return
    else:
        candidates = san.get_values_for_type(x509.DNSName)
        if any(_match_dns(pattern, name) for pattern in candidates):
            return

    valid_for = ", ".join(str(c) for c in candidates) or "no names of that kind"
    raise VerificationFailure(
        "certificate is valid for {}, not {}".format(valid_for, name)
    )


def check_server_usage(cert):
    try:
        usage = cert.extensions.get_extension_for_class(x509.ExtendedKeyUsage).value
    except x509.ExtensionNotFound:
        return
    if ExtendedKeyUsageOID.SERVER_AUTH in usage:
        return
    if ExtendedKeyUsageOID.ANY_EXTENDED_KEY_USAGE in usage:
        return
    raise VerificationFailure("certificate specifies an incompatible key usage")


def verify_chain(root, leaf, at=None):
    """Verifies that cryptography certificate leaf chains to root.

    at is the datetime to verify at, the current time when None."""
    store = _crypto.X509Store()
    store.add_cert(_crypto.X509.from_cryptography(root))
    # The root is a trust anchor even when it isn't a self-signed CA, which
    # is what a self-signed server certificate checked against itself is.
    store.set_flags(_crypto.X509StoreFlags.PARTIAL_CHAIN)
    if at is not None:
        store.set_time(at)

    openssl_leaf = _crypto.X509.from_cryptography(leaf)
    context = _crypto.X509StoreContext(store, openssl_leaf)
    try:
        context.verify_certificate()
    except _crypto.X509StoreContextError as exc:
        not_before, not_after = validity_window(openssl_leaf)
        LOG.debug(
            "Verification of %s failed, valid from %s to %s",
            leaf.subject.rfc4514_string(),
            not_before,
            not_after,
        )
        raise VerificationFailure(
            "failed to verify certificate: {} (valid from {} to {})".format(
                exc, not_before.isoformat(), not_after.isoformat()
            )
        ) from exc


def verify(root_cert_path, cert_path, dns_name, at=None):
    """Verifies the certificate in cert_path against the root in
    root_cert_path, for dns_name.

    Raises CertificateParseFailure if either file can't be read, and
    VerificationFailure with the cause in its message if the certificate
    isn't valid."""
    root = load_certificate(root_cert_path)
    leaf = load_certificate(cert_path)

    match_hostname(leaf, dns_name)
    check_server_usage(leaf)
    verify_chain(root, leaf, at=at)
    LOG.debug("%s is valid for %s", cert_path, dns_name)
