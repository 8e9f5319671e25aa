import os
import shutil

from .verbose_print import error

"""Snapshots of filesystem entries, and filesystem primitives that report status codes.

A File records whether a path existed and when it was last modified at the moment the File
was made. It is not refreshed, so take snapshots right before comparing them.

The primitives return 0 on success, otherwise the OS errno (or 1 when there is none),
and log the failure. They never raise for ordinary filesystem errors.
"""

# Status reported when a precondition (eg. the file existing) does not hold
FAILED = 1


def _failed(action, e):
	error(f"{action}: {e}")
	return e.errno or FAILED


def mkdirs(path):
	"""Create a directory and its parents. Already existing is fine."""
	if not path:
		return 0
	try:
		os.makedirs(path, exist_ok=True)
	except OSError as e:
		return _failed(f"Failed to create directory {path!r}", e)
	return 0


def copy(src, dst):
	try:
		shutil.copy2(src, dst)
	except OSError as e:
		return _failed(f"Failed to copy {src!r} to {dst!r}", e)
	return 0


def move(src, dst):
	try:
		shutil.move(src, dst)
	except OSError as e:
		return _failed(f"Failed to move {src!r} to {dst!r}", e)
	return 0


def remove(path):
	try:
		os.remove(path)
	except FileNotFoundError:
		pass
	except OSError as e:
		return _failed(f"Failed to remove {path!r}", e)
	return 0


def remove_all(path):
	"""Recursively delete a directory. Not existing is fine."""
	if not os.path.lexists(path):
		return 0
	try:
		if os.path.isdir(path) and not os.path.islink(path):
			shutil.rmtree(path)
		else:
			os.remove(path)
	except OSError as e:
		return _failed(f"Failed to remove {path!r}", e)
	return 0


class File:
	def __init__(self, path):
		self.path = os.fspath(path)
		try:
			stat = os.stat(self.path)
		except OSError:
			self.exists = False
			self.mtime = None
		else:
			self.exists = True
			self.mtime = stat.st_mtime_ns

	def __repr__(self):
		return f"<{type(self).__name__}({self.path!r})>"

	def __str__(self):
		return self.path

	def __fspath__(self):
		return self.path

	@property
	def ext(self):
		"""The extension including the dot, eg. ".c". Empty if there is none."""
		return os.path.splitext(self.path)[1]

	def refresh(self):
		"""A new snapshot of the same path"""
		return type(self)(self.path)

	def newer(self, other):
		"""True if both files exist and this one was modified strictly later"""
		return self.exists and other.exists and self.mtime > other.mtime

	def older(self, other):
		"""True if both files exist and this one was modified strictly earlier"""
		return self.exists and other.exists and self.mtime < other.mtime

	def copy(self, dst):
		if not self.exists:
			error(f"Cannot copy {self.path!r}: it does not exist")
			return FAILED
		return copy(self.path, os.fspath(dst))

	def move(self, dst):
		if not self.exists:
			error(f"Cannot move {self.path!r}: it does not exist")
			return FAILED
		return move(self.path, os.fspath(dst))


class Directory(File):
	def files(self):
		"""All regular files anywhere under this directory, as Files.
		Directories are walked into but not listed. Entries are sorted within each directory
		so that the result is stable between runs."""
		if not self.exists:
			error(f"Cannot list {self.path!r}: it does not exist")
			return []
		result = []
		for dirpath, dirnames, filenames in os.walk(self.path):
			# sorting in place also controls the order os.walk descends
			dirnames.sort()
			for name in sorted(filenames):
				result.append(File(os.path.join(dirpath, name)))
		return result

	def replicate(self, dst):
		"""Recreate this directory's structure (directories only, no file contents) under dst"""
		if not self.exists:
			error(f"Cannot replicate {self.path!r}: it does not exist")
			return FAILED
		for dirpath, dirnames, filenames in os.walk(self.path):
			target = os.path.join(os.fspath(dst), os.path.relpath(dirpath, self.path))
			status = mkdirs(os.path.normpath(target))
			if status:
				return status
		return 0
