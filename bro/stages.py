import os
import re

from .entry import CmdEntry
from .template import Template, as_values
from .verbose_print import verbose_print


"""Stages turn the files of a module into planned build actions (CmdEntry).

A stage holds a map from file extension to the command template that handles it.
Extensions are matched exactly, ".c" and ".cpp" are different extensions and there are no wildcards.
Several extensions may map to the same template.

	apply(module, flags, products): Returns the CmdEntries for the module, and appends the files
		they will produce to the module so later stages can consume them.
		flags are extra template bindings {name: [values]} (usually the orchestrator's flags).
		The build root is taken from the "build" binding.
		products maps module names to the files linked for them so far in this pass.

Outputs always live under <build root>/<stage name>/, and a stage never gives two inputs of one
module the same output path.
"""

DEFAULT_ROOT = "build"


def build_root(flags):
	values = as_values((flags or {}).get("build"))
	return values[0] if values and values[0] else DEFAULT_ROOT


# First segment of a relocated absolute path
ABSOLUTE = "__abs"


def relocatable(path):
	"""Make a path safe to put under another directory: .. can't climb out and absolute paths
	are kept apart from relative ones.
	Different paths always stay different: ".." becomes "__", a segment that already starts with "__"
	gets one more "_", and absolute paths start with "__abs".
	"""
	path = os.path.normpath(path)
	parts = [ABSOLUTE] if os.path.isabs(path) else []
	for part in path.split(os.sep):
		if part in ("", "."):
			continue
		if part == "..":
			part = "__"
		elif part.startswith("__"):
			part = "_" + part
		parts.append(part)
	return os.path.join(*parts)


class Stage:
	def __init__(self, name):
		self.name = name
		self.cmds = {}

	def __repr__(self):
		return f"<{type(self).__name__}({self.name!r})>"

	def bind(self, tmpl, *exts):
		"""Use tmpl for files with any of the given extensions (by default, the template's own).
		Returns True if there were no extensions to bind."""
		exts = exts or tmpl.exts
		if not exts:
			return True
		for ext in exts:
			self.cmds[ext] = tmpl
		return False

	def match(self, file):
		"""The template handling this file, or None"""
		return self.cmds.get(file.ext)

	def tmpls(self):
		"""The distinct templates of this stage, in the order they were first bound"""
		result = []
		for tmpl in self.cmds.values():
			if tmpl not in result:
				result.append(tmpl)
		return result

	def apply(self, module, flags=None, products=None):
		raise NotImplementedError


class Transform(Stage):
	"""Maps every matching file of a module to its own output file, eg. sources to objects.
	src/main.c in module "app" becomes <build>/<stage>/app/src/main.c<ext>.
	Inputs that are already the output of some stage for this module
	(<build>/<any stage>/app/...) lose that prefix first, so build trees never nest.
	"""
	def __init__(self, name, ext=".o"):
		super().__init__(name)
		self.ext = ext

	def output(self, module, path, root=DEFAULT_ROOT):
		prefix = re.compile(rf"^{re.escape(root)}/[^/]+/{re.escape(module.name)}/")
		path = prefix.sub("", os.path.normpath(path).replace(os.sep, "/"))
		return os.path.join(root, self.name, module.name, relocatable(path) + self.ext)

	def apply(self, module, flags=None, products=None):
		if not self.cmds:
			return []
		flags = flags or {}
		root = build_root(flags)
		entries = []
		for file in module.files:
			tmpl = self.match(file)
			if tmpl is None:
				continue
			entries.append(CmdEntry(
				self.output(module, file.path, root),
				[file.path],
				tmpl,
				flags=flags | {"mod": [module.name]},
			))
		for entry in entries:
			module.add_file(entry.output)
		verbose_print(2, f"Stage {self.name!r}: {len(entries)} actions for module {module.name!r}")
		return entries


class Link(Stage):
	"""Combines every matching file of a module into one output, eg. objects into an executable.
	output is a template for the output's name under <build>/<stage>/, ${mod} is the module name.
	A Link stage has exactly one command template. Several extensions can be bound to it,
	but binding a different template replaces the previous one.
	"""
	def __init__(self, name, output="${mod}"):
		super().__init__(name)
		self.output = Template(output)

	def bind(self, tmpl, *exts):
		if any(bound is not tmpl for bound in self.cmds.values()):
			self.cmds = {}
		return super().bind(tmpl, *exts)

	@property
	def tmpl(self):
		return next(iter(self.cmds.values()), None)

	def output_path(self, module, flags=None):
		root = build_root(flags)
		names = self.output.resolve((flags or {}) | {"mod": [module.name]})
		name = names[0] if names and names[0] else module.name
		return os.path.join(root, self.name, name)

	def apply(self, module, flags=None, products=None):
		tmpl = self.tmpl
		if tmpl is None:
			return []
		flags = flags or {}
		products = {} if products is None else products
		output = self.output_path(module, flags)
		inputs = [file.path for file in module.files if file.ext in self.cmds]
		deps = []
		for name in module.deps:
			deps.extend(products.get(name, [name]))
		entry = CmdEntry(
			output,
			inputs,
			tmpl,
			deps=deps,
			flags=flags | {"mod": [module.name], "flags": list(module.flags)},
		)
		module.add_file(output)
		products[module.name] = [output]
		verbose_print(2, f"Stage {self.name!r}: linking {len(inputs)} files for module {module.name!r}")
		return [entry]
