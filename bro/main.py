import os
import sys
import traceback

import argh

from .exceptions import BroError
from .orchestrator import Bro
from .verbose_print import error, set_verbosity

BROFILES = ["Brofile", "Brofile.py"]

@argh.arg("flags", help=" ".join([
	"Build flags: name=value, name (true) or -name (false).",
	"A module's name selects it, if any are selected only those modules are built.",
	"Flags starting with - must come after --.",
]))
@argh.arg("--brofile", "-f", help="Build script filename. Defaults to Brofile or Brofile.py")
@argh.arg("--ninja", help="Instead of building, write build.ninja")
@argh.arg("--makefile", help="Instead of building, write Makefile")
@argh.arg("--no-color", help="Never color output")
@argh.arg("-q", "--quiet", action="count", default=0, help="Specify once to only output errors, twice for nothing at all.")
@argh.arg("-v", "--verbose", action="count", default=0, help=" ".join([
	"Specify multiple times to print additional information:",
	"(Once) Print actions skipped because they are up to date.",
	"(Twice) Print why actions run and what each stage planned.",
]))
def main(*flags, brofile=None, ninja=False, makefile=False, no_color=False, quiet=0, verbose=0):
	set_verbosity(verbose - quiet, not no_color and sys.stdout.isatty())
	try:
		if brofile is None:
			for candidate in BROFILES:
				if os.path.exists(candidate):
					brofile = candidate
					break
			else:
				raise BroError("Could not find Brofile, are you in the right directory?")

		bro = Bro([brofile] + list(flags))
		bro.load_brofile(brofile)

		# module flags select what the build files cover too
		bro.select()
		if ninja:
			status = bro.ninja()
		elif makefile:
			status = bro.makefile()
		else:
			status = bro.run()

	except BroError as e:
		error(e)
		if e.__cause__ is not None:
			traceback.print_exception(e.__cause__)
		sys.exit(1)

	# statuses of a stage are summed, and only the low 8 bits of an exit code survive
	sys.exit(min(status, 255))
