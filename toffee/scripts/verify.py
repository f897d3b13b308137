#! /usr/bin/env python3
# vim: expandtab shiftwidth=4 softtabstop=4 tabstop=17 filetype=python :
"""Verify a certificate against a root certificate for a DNS name."""

import argparse
import logging
import sys

from toffee import config
from toffee.errors import ToffeeError
from toffee.chain import verify

LOG = logging.getLogger(name="toffee.verify")


def cmdline(argv=None):
    parser = argparse.ArgumentParser(description=__doc__)

    config.add_logconfig_argument(parser)
    config.add_verbosity_argument(parser)
    parser.add_argument("root", help="Path to the trusted root certificate")
    parser.add_argument("cert", help="Path to the certificate to verify")
    parser.add_argument("name", help="DNS name or IP the certificate must be valid for")

    return parser.parse_args(argv)


def main(argv=None):
    args = cmdline(argv)
    config.setup_logging(args.log_config)
    config.configure_log_level(args)

    try:
        verify(args.root, args.cert, args.name)
    except ToffeeError as error:
        LOG.error("%s: %s", args.cert, error)
        sys.exit(1)
    print("{}: OK".format(args.cert))


if __name__ == "__main__":
    main()
