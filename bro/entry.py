import os
import re

from .cmd import Runnable, Task, quote
from .files import File, mkdirs
from .template import as_values
from .verbose_print import color, verbose_print


NINJA_NAME = re.compile(r"^[A-Za-z0-9_.-]+$")
# Words that start a statement, so they cannot be top-level variable names
NINJA_KEYWORDS = ("build", "rule", "pool", "default", "include", "subninja")


def ninja_path(path):
	"""Escape a path for a ninja build line"""
	return path.replace("$", "$$").replace(" ", "$ ").replace(":", "$:")


def make_path(path):
	"""Escape a path for a make rule line"""
	return path.replace("$", "$$").replace("#", "\\#").replace(" ", "\\ ")


class CmdEntry(Runnable):
	"""One planned build action: run tmpl to make output from inputs.

	deps are extra files that the output depends on without being passed to the command.
	flags are extra template bindings, {name: [values]}.
	When smart is set, the command only runs if the output is missing or older than
	any of its inputs or deps.

	The same fields drive sync()/start(), ninja() and make(), so all three describe
	the same action.
	"""
	def __init__(self, output, inputs, tmpl, deps=(), flags=None, smart=False):
		self.output = os.fspath(output)
		self.inputs = [os.fspath(path) for path in inputs]
		self.deps = [os.fspath(path) for path in deps]
		self.tmpl = tmpl
		self.flags = {name: as_values(values) for name, values in (flags or {}).items()}
		self.smart = smart

	def __repr__(self):
		return f"<CmdEntry {self.output!r} <- {self.inputs}>"

	def bindings(self):
		"""Template bindings for this entry. The entry's own in/out win over flags of the same name."""
		return self.flags | {"in": list(self.inputs), "out": [self.output]}

	def compile(self):
		return self.tmpl.compile(self.bindings())

	def stale(self):
		"""Returns a reason string if the output needs remaking, or else None.
		Files are looked at now, not when the entry was planned."""
		output = File(self.output)
		if not output.exists:
			return "output does not exist"
		for path in self.inputs:
			if File(path).newer(output):
				return f"input {path} is newer"
		for path in self.deps:
			if File(path).newer(output):
				return f"dependency {path} is newer"
		return None

	def sync(self):
		status = mkdirs(os.path.dirname(self.output))
		if status:
			return status
		if self.smart:
			reason = self.stale()
			if reason is None:
				verbose_print(1, f"Skipping {color.cyan(self.output)}: up to date")
				return 0
			verbose_print(2, f"Building {color.cyan(self.output)}: {reason}")
		return self.compile().sync()

	def start(self):
		return Task(self.sync)

	def ninja(self, rule=None, shared=None):
		"""A ninja build statement. rule defaults to the template's name.
		Flag groups equal to the file-level variables in shared are inherited from there instead."""
		shared = shared or {}
		line = f"build {ninja_path(self.output)}: {rule or self.tmpl.name}"
		for path in self.inputs:
			line += " " + ninja_path(path)
		if self.deps:
			line += " |"
			for path in self.deps:
				line += " " + ninja_path(path)
		lines = [line]
		for name in sorted(self.flags):
			values = self.flags[name]
			if name in ("in", "out") or not NINJA_NAME.match(name):
				continue
			if list(as_values(shared.get(name))) == values:
				continue
			lines.append(f"  {name} = {ninja_value(values)}")
		return "\n".join(lines) + "\n"

	def make(self):
		"""A make rule: the output, its prerequisites, and the fully resolved recipe.
		The output directory is an order-only prerequisite, to be made by a directory rule."""
		prereqs = " ".join(make_path(path) for path in self.inputs + self.deps)
		line = f"{make_path(self.output)}:"
		if prereqs:
			line += " " + prereqs
		outdir = os.path.dirname(self.output)
		if outdir:
			line += f" | {make_path(outdir)}"
		recipe = self.compile().str().replace("$", "$$")
		return f"{line}\n\t{recipe}\n"


def ninja_value(values):
	"""Empty values are left out, as they are when a command is run directly"""
	return " ".join(quote(value) for value in values if value != "").replace("$", "$$")
