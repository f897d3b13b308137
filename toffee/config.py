#! /usr/bin/env python
# vim: expandtab shiftwidth=4 softtabstop=4 tabstop=17 filetype=python :
"""toffee.config is a helper library that standardizes and collects the logic
in one place used by the toffee CLI tools/scripts"""

import argparse
import datetime
import logging
import os
from logging.config import dictConfig, fileConfig

from . import options

LOG_LEVEL = {
    "ERROR": logging.ERROR,
    "WARNING": logging.WARNING,
    "INFO": logging.INFO,
    "DEBUG": logging.DEBUG,
}

DEFAULT_LOGGING_CONFIG = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "generic": {
            "format": "%(asctime)s %(levelname)-5.5s [%(name)s][%(threadName)s]"
            "%(message)s"
        },
    },
    "handlers": {
        "console": {
            "class": "logging.StreamHandler",
            "stream": "ext://sys.stderr",
            "level": "NOTSET",
            "formatter": "generic",
        },
    },
    "loggers": {
        "": {  # root logger
            "handlers": ["console"],
            "level": "ERROR",
        },
        "toffee": {
            "level": "NOTSET",
            "qualname": "toffee",
        },
    },
}

DEFAULT_DURATION_HOURS = int(options.DEFAULT_VALIDITY.total_seconds() // 3600)


def add_logconfig_argument(parser, env=None):
    """Adds an argument for a logging config-file, defaults to
    TOFFEE_LOG_CONFIG in the environment"""
    if env is None:
        env = os.environ
    parser.add_argument(
        "--log-config",
        help="Path to a logging .ini-file to use instead of the default",
        dest="log_config",
        default=env.get("TOFFEE_LOG_CONFIG"),
        type=str,
    )


def add_verbosity_argument(parser):
    """Adds an argument for verbosity to a given parser, counting the amount of
    'v's and 'verbose' on the commandline"""
    parser.add_argument(
        "-v",
        "--verbose",
        help="Verbosity of root logger, increasing the more 'v's are added",
        action="count",
        default=0,
    )


def add_host_arguments(parser):
    """Adds the host list and destination directory arguments"""
    parser.add_argument(
        "--host",
        help="Comma-separated hostnames and IPs to generate a certificate for",
        type=str,
    )
    parser.add_argument(
        "--dest",
        help="Directory to write the certificate and key to",
        type=str,
    )


def add_filename_arguments(parser):
    parser.add_argument(
        "--cert-file",
        help="File name of the generated certificate (default cert.pem)",
        type=str,
    )
    parser.add_argument(
        "--key-file",
        help="File name of the generated key (default key.pem)",
        type=str,
    )


def add_parent_arguments(parser):
    """Adds a parent-cert and parent-key argument to a given parser"""
    parser.add_argument(
        "--parent-cert",
        help="Path to the certificate to sign with",
        type=str,
    )
    parser.add_argument(
        "--parent-key",
        help="Path to the PKCS#8 key to sign with",
        type=str,
    )


def add_validity_arguments(parser):
    """Adds arguments for start date and duration of the certificate"""
    parser.add_argument(
        "--start-date",
        help="Creation date formatted as Jan 1 15:04:05 2011 (UTC)",
        type=str,
    )
    parser.add_argument(
        "--duration",
        help="Hours that the certificate is valid for",
        type=int,
    )


def add_key_arguments(parser):
    """Adds the key algorithm and CA arguments"""
    parser.add_argument(
        "--ca",
        help="Whether this certificate should be its own Certificate Authority",
        action="store_true",
        default=None,
    )
    parser.add_argument(
        "--rsa-bits",
        help="Size of RSA key to generate. Ignored if --ecdsa-curve is set",
        type=int,
    )
    parser.add_argument(
        "--ecdsa-curve",
        help="ECDSA curve to use to generate a key. Valid values are "
        + ", ".join(options.CURVES),
        type=str,
    )
    parser.add_argument(
        "--ed25519",
        help="Generate an Ed25519 key",
        action="store_true",
        default=None,
    )
    parser.add_argument(
        "--atomic",
        help="Write files to a temporary name and rename them into place",
        action="store_true",
        default=None,
    )


def _get_config_value(
    arguments: argparse.Namespace,
    variable,
    required=False,
    default=None,
    env=None,
):
    """Returns what value to use for a given config variable, prefer argument >
    env-variable, if a value cant be found and default is not None, default is
    returned"""
    if env is None:
        env = os.environ
    env_var = "TOFFEE_" + variable.upper().replace("-", "_")
    result = env.get(env_var)

    arg_value = getattr(arguments, variable, result)
    result = arg_value if arg_value is not None else result

    if result is None:
        result = default

    if required and result is None:
        raise ValueError(
            f"No {variable} could be found as either an argument"
            f" or in the environment variable {env_var}",
            variable,
            env_var,
        )
    return result


def asbool(value):
    """Arguments are already bools, environment values are strings"""
    if isinstance(value, str):
        return value.strip().lower() in ("1", "true", "yes", "on", "y", "t")
    return bool(value)


def get_log_level(argument_level, logger=None, env=None):
    """Calculates the highest verbosity(here inverted) from the argument,
    environment and root, capping it to between logging.DEBUG(10)-logging.ERROR(40),
    returning the log level"""

    if env is None:
        env = os.environ
    env_level_name = env.get("TOFFEE_LOG_LEVEL", "ERROR").upper()
    env_level = LOG_LEVEL[env_level_name]

    if logger is None:
        logger = logging.getLogger()
    current_level = logger.level

    argument_verbosity = logging.ERROR - argument_level * 10  # level steps are 10
    verbosity = min(argument_verbosity, env_level, current_level)
    log_level = (
        verbosity if logging.DEBUG <= verbosity <= logging.ERROR else logging.ERROR
    )
    return log_level


def configure_log_level(arguments: argparse.Namespace, logger=None):
    """Sets the root loggers level to the highest verbosity from the argument,
    environment and config-file"""
    log_level = get_log_level(arguments.verbose)
    if logger is None:
        logger = logging.getLogger()
    logger.setLevel(log_level)


def setup_logging(config_path=None):
    """Configure logging from the .ini-file at config_path, if no config_path
    is passed on use dictionary DEFAULT_LOGGING_CONFIG"""
    if config_path:
        fileConfig(config_path, disable_existing_loggers=False)
    else:
        dictConfig(DEFAULT_LOGGING_CONFIG)


def get_hosts(arguments: argparse.Namespace, env=None):
    """Returns the comma separated host list, required"""
    return _get_config_value(arguments, variable="host", required=True, env=env)


def get_dest(arguments: argparse.Namespace, env=None):
    """Returns the destination directory, defaults to the current one"""
    return _get_config_value(arguments, variable="dest", default=os.curdir, env=env)


def get_parent_cert_key_path(arguments: argparse.Namespace, env=None):
    """Returns the path to the parent-cert and parent-key to use, both None if
    neither is set. Raises ValueError if only one of them is."""
    parent_cert = _get_config_value(arguments, variable="parent_cert", env=env)
    parent_key = _get_config_value(arguments, variable="parent_key", env=env)
    if bool(parent_cert) != bool(parent_key):
        raise ValueError("parent-cert and parent-key have to be given together")
    return parent_cert, parent_key


def get_duration(arguments: argparse.Namespace, env=None):
    """Returns the validity duration as a timedelta, given in hours"""
    hours = _get_config_value(
        arguments, variable="duration", default=DEFAULT_DURATION_HOURS, env=env
    )
    return datetime.timedelta(hours=int(hours))


def get_issuance_options(arguments: argparse.Namespace, env=None):
    """Translates arguments and environment into a list of toffee options"""
    result = []

    cert_file = _get_config_value(arguments, variable="cert_file", env=env)
    if cert_file:
        result.append(options.with_cert_file_name(cert_file))
    key_file = _get_config_value(arguments, variable="key_file", env=env)
    if key_file:
        result.append(options.with_key_file_name(key_file))

    parent_cert, parent_key = get_parent_cert_key_path(arguments, env=env)
    if parent_cert:
        result.append(options.with_sign_by_parent(parent_cert, parent_key))

    start_date = _get_config_value(arguments, variable="start_date", env=env)
    if start_date:
        result.append(options.with_start_date(start_date))
    result.append(options.with_duration(get_duration(arguments, env=env)))

    if asbool(_get_config_value(arguments, variable="ca", default=False, env=env)):
        result.append(options.with_ca())

    rsa_bits = _get_config_value(arguments, variable="rsa_bits", env=env)
    if rsa_bits is not None:
        result.append(options.with_rsa_bits(int(rsa_bits)))

    curve = _get_config_value(arguments, variable="ecdsa_curve", env=env)
    if curve:
        result.append(options.with_ecdsa_curve(curve))

    if asbool(_get_config_value(arguments, variable="ed25519", default=False, env=env)):
        result.append(options.with_ed25519())

    if asbool(_get_config_value(arguments, variable="atomic", default=False, env=env)):
        result.append(options.with_atomic_write())

    return result
