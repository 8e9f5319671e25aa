"""Template strings with ${name} placeholders.

A template is resolved against a dict of bindings {name: [value, ...]}.
	$$: a literal "$"
	${name}: replaced by each value bound to name. A name bound to N values gives N variants
		of the whole string, so two multi-valued placeholders give their cartesian product,
		left to right. A name that is unbound (or bound to nothing) is deleted.
	${name with no closing brace: left as literal text.
Inserted values are never scanned for placeholders themselves.
"""

import re

PLACEHOLDER = re.compile(r"\$(\$|\{([^}]*)\})")


def as_values(value):
	"""Normalize a binding to a list of strings. A bare string is one value."""
	if value is None:
		return []
	if isinstance(value, str):
		return [value]
	return [str(v) for v in value]


class Template:
	"""An immutable string which may contain ${name} placeholders."""

	def __init__(self, text):
		if isinstance(text, Template):
			text = text.text
		self.text = str(text)

	def __repr__(self):
		return f"Template({self.text!r})"

	def __str__(self):
		return self.text

	def __eq__(self, other):
		return isinstance(other, Template) and self.text == other.text

	def __hash__(self):
		return hash(self.text)

	def resolve(self, bindings=None):
		"""Returns the list of strings this template expands to under the given bindings."""
		return _resolve(self.text, 0, bindings or {})

	def variables(self):
		"""The set of names referenced by ${name} placeholders"""
		return {
			match.group(2) for match in PLACEHOLDER.finditer(self.text)
			if match.group(2)
		}

	def has_variables(self):
		return bool(self.variables())

	def literal(self):
		"""The text with every placeholder removed and escapes collapsed"""
		return _resolve(self.text, 0, {})[0]

	def ninja(self):
		"""Render as a ninja fragment: literal $ doubled, placeholders left as ninja's ${name}."""
		def replace(match):
			return "$$" if match.group(2) is None else "${" + match.group(2) + "}"
		parts = []
		last = 0
		for match in PLACEHOLDER.finditer(self.text):
			parts.append(self.text[last:match.start()].replace("$", "$$"))
			parts.append(replace(match))
			last = match.end()
		parts.append(self.text[last:].replace("$", "$$"))
		return "".join(parts)


def _resolve(text, start, bindings):
	"""Resolve text from index start onwards. Everything before start is already final."""
	i = text.find("$", start)
	while i != -1:
		following = text[i+1:i+2]
		if following == "$":
			text = text[:i] + text[i+1:]
			i = text.find("$", i + 1)
			continue
		if following == "{":
			end = text.find("}", i + 2)
			if end == -1:
				# unterminated, the rest is literal
				break
			values = as_values(bindings.get(text[i+2:end]))
			if not values:
				text = text[:i] + text[end+1:]
				i = text.find("$", i)
				continue
			results = []
			for value in values:
				head = text[:i] + value
				results.extend(_resolve(head + text[end+1:], len(head), bindings))
			return results
		i = text.find("$", i + 1)
	return [text]
