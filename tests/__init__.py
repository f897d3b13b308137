#! /usr/bin/env python
# vim: expandtab shiftwidth=4 softtabstop=4 tabstop=17 filetype=python :
import datetime
import os
import tempfile
import unittest

from dateutil import tz

from toffee.options import START_DATE_FORMAT
from toffee.pem import load_certificate


def start_date(delta=datetime.timedelta(0)):
    """A start date string, relative to now"""
    when = datetime.datetime.now(tz=tz.UTC) + delta
    return when.strftime(START_DATE_FORMAT)


class TempDirTestCase(unittest.TestCase):
    """Test case with a fresh destination directory for every test"""

    def setUp(self):
        super(TempDirTestCase, self).setUp()
        self._tmpdir = tempfile.TemporaryDirectory()
        self.addCleanup(self._tmpdir.cleanup)
        self.dest = self._tmpdir.name

    def path(self, name):
        return os.path.join(self.dest, name)

    def load(self, name="cert.pem"):
        return load_certificate(self.path(name))

    def assertFileMode(self, name, mode):
        self.assertEqual(os.stat(self.path(name)).st_mode & 0o777, mode)
