"""Build flags given on the command line.

Each word is one of:
	name=value: sets name to value
	name: sets name to TRUE
	-name: sets name to FALSE
Names starting with RESERVED are for bro itself, and are not passed on when bro re-runs
a rebuilt program.
"""

TRUE = "1"
FALSE = "0"
RESERVED = "~"

FALSY = ("", "0", "false", "no", "off")

DEFAULTS = {
	"cc": "gcc",
	"cxx": "g++",
	"ld": "g++",
	"ar": "ar",
	"build": "build",
}


def parse(words):
	flags = {}
	for word in words:
		if "=" in word:
			name, value = word.split("=", 1)
		elif word.startswith("-"):
			name, value = word[1:], FALSE
		else:
			name, value = word, TRUE
		if not name:
			raise ValueError(f"Flag {word!r} has no name")
		flags[name] = value
	return flags


def truthy(value):
	if value is None:
		return False
	if isinstance(value, bool):
		return value
	return str(value).strip().lower() not in FALSY


def serialize(flags):
	"""Flags as command line words, leaving out reserved ones"""
	return [
		f"{name}={value}" for name, value in flags.items()
		if not name.startswith(RESERVED)
	]
