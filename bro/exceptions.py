from .verbose_print import color

class BroError(Exception):
	"""General exception that should be reported to the user"""


class RebuildError(BroError):
	"""
	The build program could not rebuild itself.
	This is fatal: the old binary has been backed up and the new one may be half-built,
	so there is no safe way to continue running.
	"""
	def __init__(self, binary, message):
		self.binary = binary
		self.message = message

	def __str__(self):
		return f"{color.cyan(self.binary)}: {self.message}"
