"""Mechanism for printing at various verbosity levels.
Use set_verbosity to set the global verbosity level.
verbose_print(v, text) wraps print(text) but only runs
if v <= the global verbosity level.

Levels used by bro:
	-1: errors
	0: commands as they are run, build summaries
	1: actions skipped because they are up to date
	2: planning detail

Also exposes color formatting, which can optionally be disabled.
"""

import re
import sys
import threading

verbosity = 0

# Commands are logged from worker threads, keep lines whole
_lock = threading.Lock()

class Colors:
	enabled = False

	def set(self, enabled):
		self.enabled = enabled

	def make_method(format_code):
		def color_method(self, text):
			return f"\x1b[{format_code}m{text}\x1b[m" if self.enabled else text
		return color_method

	bold = make_method("1")
	red = make_method("31")
	green = make_method("32")
	yellow = make_method("33")
	blue = make_method("34")
	cyan = make_method("36")

color = Colors()

def set_verbosity(new_verbosity, color_enabled=None):
	global verbosity
	verbosity = new_verbosity
	if color_enabled is not None:
		color.set(color_enabled)

def verbose_print(v, text, file=None):
	if v <= verbosity:
		text = str(text)
		if color.enabled:
			text = stack_colors(text)
		with _lock:
			print(text, file=sys.stdout if file is None else file)

def error(text):
	verbose_print(-1, color.red("BRO ERROR: ") + str(text), file=sys.stderr)

SGR = re.compile("\x1b\\[([0-9;]*)m")

def stack_colors(text):
	"""Make color resets nest.
	Colored pieces are often put inside other colored text, eg. a cyan path in a red error.
	A plain reset then goes back to the enclosing color instead of to no color."""
	out = []
	open_codes = []
	pos = 0
	for match in SGR.finditer(text):
		out.append(text[pos:match.start()])
		pos = match.end()
		code = match.group(1)
		if code:
			open_codes.append(code)
		else:
			if open_codes:
				open_codes.pop()
			code = open_codes[-1] if open_codes else ""
		out.append(f"\x1b[{code}m")
	out.append(text[pos:])
	return "".join(out)
