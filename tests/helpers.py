"""Shared fixtures for the bro tests"""

import os
import shutil
import tempfile
import threading
import unittest
from unittest import mock

# An arbitrary point in the past to set file times relative to
T0 = 1_600_000_000


class Spy:
	"""Stands in for bro.cmd.system. Records every command line and returns a status for it:
	the status of the first prefix in statuses that the line starts with, otherwise 0."""
	def __init__(self, statuses=None):
		self.statuses = statuses or {}
		self.lines = []
		self._lock = threading.Lock()

	def __call__(self, line):
		with self._lock:
			self.lines.append(line)
		for prefix, status in self.statuses.items():
			if line.startswith(prefix):
				return status
		return 0


def write(path, text=""):
	dirname = os.path.dirname(path)
	if dirname:
		os.makedirs(dirname, exist_ok=True)
	with open(path, "w") as f:
		f.write(text)


def set_mtime(path, seconds):
	"""Set a file's access and modification time to T0 + seconds"""
	os.utime(path, (T0 + seconds, T0 + seconds))


class WorkdirTestCase(unittest.TestCase):
	"""Runs each test inside its own empty temporary directory"""

	def setUp(self):
		self._old_cwd = os.getcwd()
		self.workdir = tempfile.mkdtemp(prefix="bro-test-")
		os.chdir(self.workdir)

	def tearDown(self):
		os.chdir(self._old_cwd)
		shutil.rmtree(self.workdir, ignore_errors=True)

	def spy(self, statuses=None):
		"""Replace command execution with a Spy for the rest of the test"""
		spy = Spy(statuses)
		patcher = mock.patch("bro.cmd.system", spy)
		patcher.start()
		self.addCleanup(patcher.stop)
		return spy
