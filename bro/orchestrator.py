import os
import sys

from . import files, flags as flagslib
from .cmd import Cmd, CmdPool, CmdQueue, CmdTmpl
from .entry import NINJA_KEYWORDS, NINJA_NAME, make_path, ninja_path, ninja_value
from .exceptions import BroError, RebuildError
from .files import Directory, File
from .module import EXE, LIB, SO, Module
from .registry import NOT_FOUND, Registry
from .stages import Link, Stage, Transform
from .verbose_print import color, error, verbose_print


# Link stage and command used for each module kind by use()
KIND_STAGES = {
	EXE: ("bin", "${mod}", "exe"),
	LIB: ("lib", "lib${mod}.a", "lib"),
	SO: ("so", "lib${mod}.so", "so"),
}
# Transform stage used by use()
OBJ_STAGE = "obj"

REBUILD_CMD = CmdTmpl("rebuild", ["${compiler}", "-O2", "-Wall", "${in}", "-o", "${out}"])

# Forces the result of is_fresh()
FRESH_FLAG = "~FRESH"
# Removes the backup of the old binary after a successful rebuild and rerun
RMOLD_FLAG = "~RMOLD"


class Bro:
	"""Owns everything a build program describes: commands, modules, stages,
	which modules each stage applies to, and the flags given on the command line.

	The same description can be consumed three ways:
		build()/run(): run the build directly
		ninja(): write a build.ninja
		makefile(): write a Makefile
	All three walk the same plan(), so they agree on every output, input and command.

	argv is the program's command line. argv[0] is the program's binary, and is what
	fresh() rebuilds from source (and header) if either is newer.
	"""
	def __init__(self, argv, source=None, header=None):
		argv = list(argv)
		self.binary = argv[0] if argv else None
		self.source = source
		self.header = header
		try:
			self.flags = dict(flagslib.DEFAULTS) | flagslib.parse(argv[1:])
		except ValueError as e:
			raise BroError(f"Bad flag: {e}") from None

		self.cmds = Registry()
		self.modules = Registry()
		self.stages = Registry()
		# stage index -> [module index]
		self.stage_modules = {}

		self.register_cmd("exe", ["${ld}", "${in}", "-o", "${out}", "${flags}"])
		self.register_cmd("lib", ["${ar}", "rcs", "${out}", "${in}"])
		self.register_cmd("so", ["${ld}", "-shared", "${in}", "-o", "${out}", "${flags}"])

	def __repr__(self):
		return f"<Bro {self.binary!r}>"

	# Flags

	def flag(self, name, default=None):
		return self.flags.get(name, default)

	def enabled(self, name):
		return flagslib.truthy(self.flags.get(name))

	@property
	def root(self):
		return self.flags.get("build") or "build"

	def bindings(self):
		"""A snapshot of the flags as template bindings"""
		return {name: (value,) for name, value in self.flags.items()}

	# Registration

	def register_cmd(self, name, args, *exts):
		"""Register a command template. Returns its index, or NOT_FOUND if the name is taken."""
		tmpl = args if isinstance(args, CmdTmpl) else CmdTmpl(name, args, exts)
		return self.cmds.add(name, tmpl)

	def register_module(self, name, *paths, kind=EXE):
		"""Register a module, adding the given files and directories to it.
		Returns its index, or NOT_FOUND if the name is taken."""
		module = Module(name, kind)
		index = self.modules.add(name, module)
		if index == NOT_FOUND:
			return NOT_FOUND
		for path in paths:
			module.add(path)
		return index

	def register_stage(self, stage):
		"""Returns the stage's index, or NOT_FOUND if a stage of that name exists"""
		index = self.stages.add(stage.name, stage)
		if index != NOT_FOUND:
			self.stage_modules[index] = []
		return index

	def cmd(self, key):
		return self.cmds.get(key)

	def module(self, key):
		return self.modules.get(key)

	def stage(self, key):
		return self.stages.get(key)

	def bind_cmd(self, stage, cmd, *exts):
		"""Have a stage use a registered command for the given extensions
		(by default, those the command was registered with).
		Returns True if the stage or command can't be found, or there are no extensions."""
		stage = self.stage(stage) if not isinstance(stage, Stage) else stage
		tmpl = self.cmd(cmd) if not isinstance(cmd, CmdTmpl) else cmd
		if stage is None or tmpl is None:
			error(f"Cannot bind command {cmd!r} to stage {stage!r}: not registered")
			return True
		return stage.bind(tmpl, *exts)

	def bind_module(self, stage, *modules):
		"""Apply a stage to modules. Returns True if the stage or any module can't be found."""
		stage_index = self.stages.index(stage.name if isinstance(stage, Stage) else stage)
		if stage_index == NOT_FOUND:
			error(f"Cannot bind modules to stage {stage!r}: not registered")
			return True
		failed = False
		bound = self.stage_modules[stage_index]
		for module in modules:
			module_index = self.modules.index(module.name if isinstance(module, Module) else module)
			if module_index == NOT_FOUND:
				error(f"Cannot bind module {module!r} to stage {stage!r}: not registered")
				failed = True
			elif module_index not in bound:
				bound.append(module_index)
		return failed

	def stage_of(self, name, factory):
		"""The stage of this name, registering factory() as it if there is none"""
		stage = self.stage(name)
		if stage is None:
			stage = factory()
			self.register_stage(stage)
		return stage

	def use(self, module, cmd):
		"""Compile a module's files with a registered command, and link the results according
		to the module's kind. Returns True if the module or command can't be found."""
		module = self.module(module)
		tmpl = self.cmd(cmd)
		if module is None or tmpl is None:
			error(f"Cannot use command {cmd!r} for module {module!r}: not registered")
			return True
		obj = self.stage_of(OBJ_STAGE, lambda: Transform(OBJ_STAGE, ".o"))
		if obj.bind(tmpl):
			error(f"Command {cmd!r} has no extensions to compile")
			return True
		stage_name, output, link_cmd = KIND_STAGES[module.kind]
		link = self.stage_of(stage_name, lambda: Link(stage_name, output))
		if link.tmpl is None:
			link.bind(self.cmd(link_cmd), obj.ext)
		return self.bind_module(obj, module.name) or self.bind_module(link, module.name)

	def link(self, module, *flags):
		"""Add linker flags to a module. Returns True if the module can't be found."""
		module = self.module(module)
		if module is None:
			return True
		module.add_flags(*flags)
		return False

	def depend(self, module, *names):
		"""Make a module's linked output depend on other modules (or files).
		Returns True if the module can't be found."""
		module = self.module(module)
		if module is None:
			return True
		module.add_deps(*names)
		return False

	# Planning

	def snapshot(self):
		"""Planning copies of every module, by index"""
		return [module.copy() for module in self.modules]

	def plan(self, modules=None):
		"""Yields (stage, [CmdEntry]) for each stage in registration order.
		Each stage is applied to each of its modules that is not disabled, in binding order.
		Stages work on copies of the modules (see snapshot()), so planning never changes them."""
		modules = self.snapshot() if modules is None else modules
		bindings = self.bindings()
		products = {}
		for index, stage in enumerate(self.stages):
			entries = []
			for module_index in self.stage_modules[index]:
				module = modules[module_index]
				if module.disabled:
					continue
				entries.extend(stage.apply(module, bindings, products))
			yield stage, entries

	# Self rebuild

	def is_fresh(self):
		"""False if the program's source or header is newer than its binary.
		The ~FRESH flag, if given, decides instead."""
		if FRESH_FLAG in self.flags:
			return flagslib.truthy(self.flags[FRESH_FLAG])
		if self.binary is None or self.source is None:
			return True
		binary = File(self.binary)
		for path in (self.source, self.header):
			if path is not None and File(path).newer(binary):
				return False
		return True

	def compiler(self):
		return self.flags["cc"] if self.source.endswith(".c") else self.flags["cxx"]

	def fresh(self):
		"""Make sure the running program is up to date with its source.
		If it isn't, the binary is backed up, rebuilt, and the rebuilt binary is run with the same
		flags. The process then exits with its status, so this only returns if nothing was rebuilt.
		Raises RebuildError if the backup or the rebuild fails."""
		if self.is_fresh():
			return
		verbose_print(0, f"{color.cyan(self.source)} changed, rebuilding {color.cyan(self.binary)}")
		backup = f"{self.binary}.old"
		if files.copy(self.binary, backup):
			raise RebuildError(self.binary, f"Failed to back up binary to {backup}")
		status = REBUILD_CMD.sync({
			"compiler": [self.compiler()],
			"in": [self.source],
			"out": [self.binary],
		})
		if status:
			raise RebuildError(self.binary, f"Rebuild failed with status {status}, previous binary is in {backup}")
		binary = self.binary if os.sep in self.binary else os.path.join(".", self.binary)
		status = Cmd(binary, *flagslib.serialize(self.flags)).sync()
		if status == 0 and self.enabled(RMOLD_FLAG):
			files.remove(backup)
		sys.exit(status)

	# Building

	def build(self):
		"""Run every stage in order, each one's actions all at once.
		Actions whose outputs are up to date are skipped.
		Returns 0, or the nonzero result of the first stage that failed (later stages don't run)."""
		status = files.mkdirs(self.root)
		if status:
			return status
		for stage, entries in self.plan():
			pool = CmdPool()
			for entry in entries:
				entry.smart = True
				pool.add(entry)
			status = pool.start().wait()
			if status:
				error(f"Stage {stage.name!r} failed")
				return status
		verbose_print(0, color.green("Build complete"))
		return 0

	def select(self):
		"""Enable or disable modules by the flags named after them.
		If any module's flag is truthy, only modules with truthy flags are enabled.
		A falsy flag always disables its module."""
		selected = any(
			flagslib.truthy(self.flags[name]) for name in self.modules.names()
			if name in self.flags
		)
		for name, module in self.modules.items():
			if name in self.flags:
				module.disabled = not flagslib.truthy(self.flags[name])
			else:
				module.disabled = selected

	def run(self):
		"""build() only the modules selected by flags, first wiping the build root if "clean" is set"""
		self.select()
		if self.enabled("clean"):
			verbose_print(0, f"Removing {color.cyan(self.root)}")
			status = files.remove_all(self.root)
			if status:
				return status
		return self.build()

	# Build files

	def ninja_text(self):
		modules = self.snapshot()
		planned = list(self.plan(modules))
		shared = {
			name: (value,) for name, value in self.flags.items()
			if NINJA_NAME.match(name) and name not in NINJA_KEYWORDS
		}
		lines = ["# Generated by bro, do not edit", ""]
		for name in sorted(shared):
			lines.append(f"{name} = {ninja_value(shared[name])}")
		lines.append("")

		rules = RuleNames()
		for stage, entries in planned:
			for entry in entries:
				name, new = rules.name_for(entry.tmpl)
				if new:
					lines.append(f"rule {name}")
					lines.append(f"  command = {entry.tmpl.ninja()}")
					lines.append(f"  description = {entry.tmpl.name.upper()} $out")
					lines.append("")

		for stage, entries in planned:
			for entry in entries:
				lines.append(entry.ninja(rules.name_for(entry.tmpl)[0], shared))

		enabled = [module for module in modules if not module.disabled]
		for module in enabled:
			derived = " ".join(ninja_path(file.path) for file in module.derived())
			lines.append(f"build {module.name}: phony {derived}".rstrip())
		lines.append(f"build all: phony {' '.join(module.name for module in enabled)}".rstrip())
		lines.append("")
		lines.append("rule bro_clean")
		lines.append(f"  command = rm -rf {ninja_value([self.root])}")
		lines.append("build clean: bro_clean")
		lines.append("")
		lines.append("default all")
		return "\n".join(lines) + "\n"

	def makefile_text(self):
		modules = self.snapshot()
		planned = list(self.plan(modules))
		enabled = [module for module in modules if not module.disabled]
		phony = ["all", "clean"] + [module.name for module in enabled]

		lines = ["# Generated by bro, do not edit", ""]
		lines.append(f".PHONY: {' '.join(phony)}")
		lines.append(f"all: {' '.join(module.name for module in enabled)}".rstrip())
		lines.append("")
		for module in enabled:
			derived = " ".join(make_path(file.path) for file in module.derived())
			lines.append(f"{module.name}: {derived}".rstrip())
		lines.append("")

		dirs = []
		for stage, entries in planned:
			for entry in entries:
				lines.append(entry.make())
				outdir = os.path.dirname(entry.output)
				if outdir and outdir not in dirs:
					dirs.append(outdir)
		for outdir in dirs:
			lines.append(f"{make_path(outdir)}:")
			lines.append(f"\tmkdir -p {Cmd(outdir).str().replace('$', '$$')}")
			lines.append("")
		lines.append("clean:")
		lines.append(f"\trm -rf {Cmd(self.root).str().replace('$', '$$')}")
		return "\n".join(lines) + "\n"

	def ninja(self, path="build.ninja"):
		return self._write(path, self.ninja_text())

	def makefile(self, path="Makefile"):
		return self._write(path, self.makefile_text())

	def _write(self, path, text):
		try:
			with open(path, "w") as f:
				f.write(text)
		except OSError as e:
			error(f"Failed to write {path!r}: {e}")
			return e.errno or files.FAILED
		verbose_print(0, f"Wrote {color.cyan(path)}")
		return 0

	# Build scripts

	def load_brofile(self, brofile):
		"""Run a build script with this Bro and the rest of the API available as globals"""
		injected = {
			"__name__": "__brofile__",
			"__file__": brofile,
			"os": os,
			"bro": self,
			"Cmd": Cmd,
			"CmdTmpl": CmdTmpl,
			"CmdPool": CmdPool,
			"CmdQueue": CmdQueue,
			"Transform": Transform,
			"Link": Link,
			"File": File,
			"Directory": Directory,
			"EXE": EXE,
			"LIB": LIB,
			"SO": SO,
			"log": lambda text: verbose_print(0, text),
		}
		with open(brofile) as f:
			source = f.read()
		code = compile(source, brofile, "exec")
		try:
			exec(code, injected)
		except Exception as e:
			raise BroError("Unhandled exception while loading Brofile") from e
		return injected


class RuleNames:
	"""Gives each distinct template a unique ninja rule name, based on its own name"""
	def __init__(self):
		self._names = {}

	def name_for(self, tmpl):
		"""Returns (name, whether this is the first time tmpl was seen)"""
		if id(tmpl) in self._names:
			return self._names[id(tmpl)][0], False
		base = "".join(c if NINJA_NAME.match(c) else "_" for c in tmpl.name) or "cmd"
		name = base
		taken = {name for name, _ in self._names.values()}
		suffix = 1
		while name in taken or name in ("phony", "bro_clean"):
			suffix += 1
			name = f"{base}_{suffix}"
		# keep tmpl referenced so its id stays unique
		self._names[id(tmpl)] = (name, tmpl)
		return name, True
