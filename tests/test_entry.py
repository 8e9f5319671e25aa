"""Test cases for planned build actions"""

import os
import subprocess
import unittest

from bro.cmd import CmdTmpl
from bro.entry import CmdEntry

from helpers import WorkdirTestCase, set_mtime, write

CC = CmdTmpl("cc", ["${cc}", "-c", "${in}", "-o", "${out}"], [".c"])


class TestBindings(unittest.TestCase):

	def test_entry_owns_in_and_out(self):
		entry = CmdEntry("a.o", ["a.c"], CC, flags={"in": ["bogus.c"], "out": ["bogus.o"], "cc": "gcc"})
		self.assertEqual({"in": ["a.c"], "out": ["a.o"], "cc": ["gcc"]}, entry.bindings())
		self.assertEqual(("gcc", "-c", "a.c", "-o", "a.o"), entry.compile().args)


class TestSmart(WorkdirTestCase):

	def setUp(self):
		super().setUp()
		write("a.c")
		write("a.h")
		write("out/a.o")
		set_mtime("a.c", 0)
		set_mtime("a.h", 0)
		set_mtime("out/a.o", 10)

	def entry(self, **kwargs):
		return CmdEntry("out/a.o", ["a.c"], CC, flags={"cc": ["gcc"]}, **kwargs)

	def test_up_to_date_is_skipped(self):
		spy = self.spy()
		self.assertEqual(0, self.entry(smart=True).sync())
		self.assertEqual([], spy.lines)

	def test_newer_input_runs_once(self):
		spy = self.spy()
		entry = self.entry(smart=True)
		self.assertEqual(0, entry.sync())
		set_mtime("a.c", 20)
		self.assertEqual(0, entry.sync())
		self.assertEqual(["gcc -c a.c -o out/a.o"], spy.lines)

	def test_missing_output_runs(self):
		os.remove("out/a.o")
		spy = self.spy()
		self.assertEqual(0, self.entry(smart=True).sync())
		self.assertEqual(1, len(spy.lines))

	def test_newer_dependency_runs(self):
		set_mtime("a.h", 20)
		spy = self.spy()
		entry = self.entry(smart=True, deps=["a.h"])
		self.assertEqual("dependency a.h is newer", entry.stale())
		self.assertEqual(0, entry.sync())
		self.assertEqual(1, len(spy.lines))

	def test_dumb_always_runs(self):
		spy = self.spy()
		self.assertEqual(0, self.entry().sync())
		self.assertEqual(0, self.entry().start().wait())
		self.assertEqual(2, len(spy.lines))

	def test_failure_status_is_returned(self):
		self.spy({"gcc": 1})
		self.assertEqual(1, self.entry().sync())

	def test_output_directory_is_created(self):
		self.spy()
		entry = CmdEntry("deep/er/a.o", ["a.c"], CC)
		self.assertEqual(0, entry.sync())
		self.assertTrue(os.path.isdir("deep/er"))


class TestText(unittest.TestCase):

	def setUp(self):
		self.entry = CmdEntry(
			"build/obj/a.o",
			["a.c"],
			CC,
			deps=["a.h"],
			flags={"zz": ["1"], "mod": ["app"], "cc": ["gcc"], "~FRESH": ["0"]},
		)

	def test_ninja(self):
		expected = "build build/obj/a.o: cc a.c | a.h\n  mod = app\n  zz = 1\n"
		self.assertEqual(expected, self.entry.ninja(shared={"cc": ("gcc",)}))

	def test_ninja_without_shared(self):
		text = self.entry.ninja(rule="compile")
		self.assertTrue(text.startswith("build build/obj/a.o: compile a.c | a.h\n"))
		self.assertIn("  cc = gcc\n", text)

	def test_ninja_escapes_paths(self):
		entry = CmdEntry("out dir/a:b.o", ["a$.c"], CC)
		self.assertEqual("build out$ dir/a$:b.o: cc a$$.c\n", entry.ninja())

	def test_ninja_leaves_out_empty_values(self):
		entry = CmdEntry("o", [], CmdTmpl("t", ["echo", "${x}", "${y}", "${out}"]), flags={"x": [""], "y": ["", "a"]})
		self.assertEqual(("echo", "a", "o"), entry.compile().args)
		self.assertEqual("build o: t\n  x = \n  y = a\n", entry.ninja())

	def test_make(self):
		expected = "build/obj/a.o: a.c a.h | build/obj\n\tgcc -c a.c -o build/obj/a.o\n"
		self.assertEqual(expected, self.entry.make())

	def test_make_escapes_dollar(self):
		entry = CmdEntry("a.o", ["a.c"], CmdTmpl("echo", ["echo", "$$HOME", "${out}"]))
		self.assertEqual("a.o: a.c\n\techo '$$HOME' a.o\n", entry.make())


class TestMakeMatchesDirectRun(WorkdirTestCase):
	"""Running an entry and running the recipe from its make() text make the same file"""

	def test_same_artifact(self):
		write("in.txt", "some content\n")
		entry = CmdEntry("out/copy.txt", ["in.txt"], CmdTmpl("copy", ["cp", "${in}", "${out}"]))
		self.assertEqual(0, entry.sync())
		with open("out/copy.txt") as f:
			direct = f.read()
		os.remove("out/copy.txt")

		header, recipe = entry.make().splitlines()
		self.assertEqual("out/copy.txt: in.txt | out", header)
		self.assertTrue(recipe.startswith("\t"))
		subprocess.check_call(recipe[1:].replace("$$", "$"), shell=True)
		with open("out/copy.txt") as f:
			self.assertEqual(direct, f.read())


if __name__ == "__main__":
	unittest.main()
