import os

from .files import FAILED, Directory, File
from .verbose_print import error, verbose_print

# What a module links into
EXE = "exe"
LIB = "lib"
SO = "so"
KINDS = (EXE, LIB, SO)


class Module:
	"""A named, ordered collection of files that are built together.

	The order of files matters: it is the order things are compiled and linked in.
	Stages append the files they produce, so later stages see them as inputs.
	deps are names of other modules (or paths) the linked output depends on.
	flags are extra linker arguments.
	"""
	def __init__(self, name, kind=EXE):
		if kind not in KINDS:
			raise ValueError(f"Unknown module kind {kind!r}, expected one of {', '.join(KINDS)}")
		self.name = name
		self.kind = kind
		self.files = []
		self.deps = []
		self.flags = []
		self.disabled = False
		# Number of files present when this copy was taken, see copy()
		self.initial = 0

	def __repr__(self):
		return f"<Module({self.name!r}) {len(self.files)} files>"

	def add_file(self, path):
		self.files.append(path if isinstance(path, File) else File(path))
		return 0

	def add_directory(self, path):
		"""Add every file found anywhere under path"""
		directory = path if isinstance(path, Directory) else Directory(path)
		if not directory.exists:
			error(f"Module {self.name!r}: directory {directory.path!r} does not exist")
			return FAILED
		files = directory.files()
		verbose_print(2, f"Module {self.name!r}: found {len(files)} files in {directory.path!r}")
		self.files.extend(files)
		return 0

	def add(self, path):
		"""Add a file or a whole directory"""
		if os.path.isdir(path):
			return self.add_directory(path)
		return self.add_file(path)

	def add_flags(self, *flags):
		self.flags.extend(flags)

	def add_deps(self, *names):
		for name in names:
			if name not in self.deps:
				self.deps.append(name)

	def copy(self):
		"""A copy to plan a build with, so that planning never changes this module.
		Files the stages add to the copy are available from derived()."""
		new = Module(self.name, self.kind)
		new.files = list(self.files)
		new.deps = list(self.deps)
		new.flags = list(self.flags)
		new.disabled = self.disabled
		new.initial = len(new.files)
		return new

	def derived(self):
		"""Files added since this copy was taken"""
		return self.files[self.initial:]
