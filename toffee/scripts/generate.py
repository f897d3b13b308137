#! /usr/bin/env python3
# vim: expandtab shiftwidth=4 softtabstop=4 tabstop=17 filetype=python :
"""Generate a self-signed, or parent-signed, certificate for TLS servers.

Writes cert.pem and key.pem into the destination directory, overwriting
existing files."""

import argparse
import logging
import sys

from toffee import config
from toffee.certlib import generate
from toffee.errors import ToffeeError

LOG = logging.getLogger(name="toffee.generate")


def cmdline(argv=None):
    """Parse commandline."""
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])

    config.add_logconfig_argument(parser)
    config.add_verbosity_argument(parser)
    config.add_host_arguments(parser)
    config.add_filename_arguments(parser)
    config.add_parent_arguments(parser)
    config.add_validity_arguments(parser)
    config.add_key_arguments(parser)

    return parser.parse_args(argv)


def error_out(message, exc=None):
    """Print error message and exit with failure code."""
    LOG.error(message)
    if exc is not None:
        LOG.error(str(exc))
    sys.exit(1)


def main(argv=None):
    """Entrypoint of application."""
    args = cmdline(argv)
    config.setup_logging(args.log_config)
    config.configure_log_level(args)

    try:
        hosts = config.get_hosts(args)
        dest = config.get_dest(args)
        options = config.get_issuance_options(args)
    except ValueError as error:
        error_out("Error reading configuration", exc=error)

    LOG.info("Generating certificate for %s into %s", hosts, dest)
    try:
        generate(hosts, dest, *options)
    except ToffeeError as error:
        error_out("Failed to generate certificate", exc=error)


if __name__ == "__main__":
    main()
