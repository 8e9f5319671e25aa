import shlex
import subprocess
import threading

from .template import Template
from .verbose_print import color, error, verbose_print

"""Commands, command templates, and ways to run many of them.

Everything that can be run is a Runnable:
	sync(): Runs to completion on the calling thread and returns an exit status (0 is success).
	start(): Runs on a new worker thread and immediately returns a Task.
		Task.wait() blocks until the work is done and returns the exit status.
There is no thread pool. Every start() gets its own thread, so starting N commands
runs N processes at once.
"""

# Status reported for commands that could not be run at all
FAILED = 1


def system(line):
	"""Run a shell command line and return its exit status.
	A process killed by a signal reports 128 + the signal number, as a shell would.
	This is the only place bro hands anything to the OS."""
	proc = None
	try:
		proc = subprocess.Popen(line, shell=True, close_fds=True)
		retcode = proc.wait()
	except BaseException:
		# attempt to kill before returning
		try:
			if proc is not None:
				proc.kill()
		except ProcessLookupError:
			pass # process not existing is fine, ignore it.
		raise
	return retcode if retcode >= 0 else 128 - retcode


def quote(arg):
	return shlex.quote(arg)


class Task:
	"""A handle to work running on its own thread.
	An exception raised by the work is re-raised from wait()."""
	def __init__(self, fn):
		self._result = None
		self._error = None
		self._thread = threading.Thread(target=self._run, args=(fn,))
		self._thread.daemon = True
		self._thread.start()

	def _run(self, fn):
		try:
			self._result = fn()
		except BaseException as e:
			self._error = e

	def wait(self):
		self._thread.join()
		if self._error is not None:
			raise self._error
		return self._result

	get = wait


class PoolTask:
	"""Waits for a group of Tasks. The result is the sum of all their statuses,
	so the only meaningful question to ask of it is whether it is zero."""
	def __init__(self, tasks):
		self._tasks = list(tasks)

	def wait(self):
		return sum(task.wait() for task in self._tasks)

	get = wait


class Runnable:
	def sync(self):
		raise NotImplementedError

	def start(self):
		return Task(self.sync)


class Cmd(Runnable):
	"""
	A concrete command: a list of argument strings with no placeholders left.
	Immutable, calling it returns a new Cmd with extra args, so you can define command "stems":
		cc = Cmd("gcc", "-Wall")
		cc("-c", "main.c", "-o", "main.o").sync()
	"""
	def __init__(self, *args):
		# Cmd(["a", "b"]) and Cmd("a", "b") are the same
		if len(args) == 1 and not isinstance(args[0], str):
			args = args[0]
		self.args = tuple(str(arg) for arg in args)

	def __repr__(self):
		return f"<Cmd {self.args}>"

	def __eq__(self, other):
		return isinstance(other, Cmd) and self.args == other.args

	def __hash__(self):
		return hash(self.args)

	def __call__(self, *args):
		return Cmd(self.args + tuple(str(arg) for arg in args))

	def __bool__(self):
		return bool(self.args)

	def str(self):
		"""The command as a single shell-safe line"""
		return " ".join(quote(arg) for arg in self.args)

	__str__ = str

	def sync(self):
		if not self.args:
			error("cannot run empty command")
			return FAILED
		line = self.str()
		verbose_print(0, color.blue(line))
		return system(line)


class CmdTmpl(Runnable):
	"""A named command whose arguments are Templates.
	The name only identifies the command to humans (and names the ninja rule).
	exts are the file extensions this command is registered to handle, if any."""
	def __init__(self, name, args, exts=()):
		self.name = name
		self.args = tuple(Template(arg) for arg in args)
		self.exts = tuple(exts)

	def __repr__(self):
		return f"<CmdTmpl {self.name!r} {' '.join(map(str, self.args))}>"

	def compile(self, bindings=None):
		"""Resolve every argument and flatten the variants into one Cmd.
		An argument that had placeholders and resolves to nothing at all is dropped."""
		bindings = bindings or {}
		args = []
		for arg in self.args:
			for value in arg.resolve(bindings):
				if value == "" and arg.has_variables():
					continue
				args.append(value)
		return Cmd(args)

	def variables(self):
		names = set()
		for arg in self.args:
			names |= arg.variables()
		return names

	def ninja(self):
		"""The command line for a ninja rule, with placeholders as ninja variables"""
		return " ".join(_ninja_arg(arg) for arg in self.args)

	def sync(self, bindings=None):
		return self.compile(bindings).sync()

	def start(self, bindings=None):
		return Task(lambda: self.sync(bindings))


def _ninja_arg(arg):
	text = arg.ninja()
	literal = arg.literal()
	if literal and quote(literal) != literal:
		return "'" + text.replace("'", "'\"'\"'") + "'"
	return text


class CmdPool(Runnable):
	"""An unordered group of Runnables.
	sync() runs them one at a time and stops at the first failure.
	start() runs all of them at once; none are skipped because another failed.
	"""
	def __init__(self, runnables=()):
		self.runnables = list(runnables)

	def __repr__(self):
		return f"<CmdPool {len(self.runnables)}>"

	def __len__(self):
		return len(self.runnables)

	def add(self, runnable):
		self.runnables.append(runnable)
		return self

	def sync(self):
		for runnable in self.runnables:
			status = runnable.sync()
			if status:
				return status
		return 0

	def start(self):
		return PoolTask(runnable.start() for runnable in self.runnables)


class CmdQueue(Runnable):
	"""An ordered chain of Runnables, run one after another until one fails.
	The failing status is returned as-is.
	start() runs the whole chain on a single worker, so a queue inside a CmdPool
	keeps its own order while running alongside the pool's other members.
	"""
	def __init__(self, runnables=()):
		self.runnables = list(runnables)

	def __repr__(self):
		return f"<CmdQueue {len(self.runnables)}>"

	def __len__(self):
		return len(self.runnables)

	def add(self, runnable):
		self.runnables.append(runnable)
		return self

	def sync(self):
		for runnable in self.runnables:
			status = runnable.sync()
			if status:
				return status
		return 0
