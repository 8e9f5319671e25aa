"""Test cases for template resolution"""

import unittest

from bro.template import Template


class TestResolve(unittest.TestCase):

	def test_fan_out(self):
		self.assertEqual(["a-1-b", "a-2-b"], Template("a-${x}-b").resolve({"x": ["1", "2"]}))

	def test_escape(self):
		self.assertEqual(["price: $5"], Template("price: $$5").resolve({}))
		self.assertEqual(["price: $5"], Template("price: $$5").resolve({"5": ["x"]}))

	def test_missing_variable_is_dropped(self):
		self.assertEqual(["-tail"], Template("${missing}-tail").resolve({}))

	def test_empty_binding_is_dropped(self):
		self.assertEqual(["a  b"], Template("a ${x} b").resolve({"x": []}))

	def test_cartesian_product(self):
		result = Template("${a}${b}").resolve({"a": ["1", "2"], "b": ["x", "y"]})
		self.assertEqual(["1x", "1y", "2x", "2y"], result)

	def test_unterminated_placeholder_is_literal(self):
		self.assertEqual(["keep ${this"], Template("keep ${this").resolve({"this": ["no"]}))

	def test_values_are_not_rescanned(self):
		result = Template("${x}").resolve({"x": ["${y}", "$$"], "y": ["no"]})
		self.assertEqual(["${y}", "$$"], result)

	def test_escaped_placeholder(self):
		self.assertEqual(["${x}"], Template("$${x}").resolve({"x": ["no"]}))

	def test_string_binding_is_one_value(self):
		self.assertEqual(["-Iinclude"], Template("-I${inc}").resolve({"inc": "include"}))

	def test_lone_dollar_is_literal(self):
		self.assertEqual(["a$b"], Template("a$b").resolve({"b": ["no"]}))

	def test_resolve_does_not_change_template(self):
		template = Template("${x}")
		template.resolve({"x": ["1"]})
		self.assertEqual("${x}", str(template))


class TestVariables(unittest.TestCase):

	def test_variables(self):
		self.assertEqual({"a", "c"}, Template("${a} $${b} ${c} ${a}").variables())

	def test_no_variables(self):
		self.assertEqual(set(), Template("plain $$ text").variables())

	def test_ninja(self):
		self.assertEqual("-I${inc} $$HOME", Template("-I${inc} $$HOME").ninja())
		self.assertEqual("a$$b", Template("a$b").ninja())


if __name__ == "__main__":
	unittest.main()
