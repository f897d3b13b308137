#! /usr/bin/env python
# vim: expandtab shiftwidth=4 softtabstop=4 tabstop=17 filetype=python :
"""Exceptions raised by toffee. Every one of them is terminal for the call
that raised it, nothing is retried internally."""


class ToffeeError(Exception):
    pass


class MissingHost(ToffeeError, ValueError):
    def __init__(self):
        super().__init__("missing required host parameter")


class UnsupportedCurve(ToffeeError, ValueError):
    def __init__(self, curve):
        self.curve = curve
        super().__init__("unrecognized elliptic curve: {!r}".format(curve))


class KeyGenerationFailure(ToffeeError):
    pass


class DateParseFailure(ToffeeError, ValueError):
    pass


class SerialNumberFailure(ToffeeError):
    pass


class SigningFailure(ToffeeError):
    pass


class _StepError(ToffeeError):
    """Error that remembers which processing step failed"""

    def __init__(self, step, message):
        self.step = step
        super().__init__(message)


class CertificateParseFailure(_StepError, ValueError):
    pass


class KeyParseFailure(_StepError, ValueError):
    pass


class ParentLoadFailure(ToffeeError):
    """Loading the parent certificate or key failed.

    `which` is "certificate" or "key", `step` is the step of the loader that
    failed ("read", "pem", "type" or "parse")."""

    def __init__(self, which, path, cause):
        self.which = which
        self.path = path
        self.step = getattr(cause, "step", None)
        super().__init__(
            "failed to load parent {} {}: {}".format(which, path, cause)
        )


class FileIOFailure(ToffeeError, OSError):
    """Writing one of the output files failed at `step` ("open", "write" or
    "close")."""

    def __init__(self, path, step, cause):
        self.path = path
        self.step = step
        super().__init__("failed to {} {}: {}".format(step, path, cause))


class VerificationFailure(ToffeeError):
    pass
