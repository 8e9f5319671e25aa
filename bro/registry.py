"""An ordered collection of named things that can be looked up by index or by name."""

# Returned instead of an index when a name is unknown or already taken
NOT_FOUND = -1


class Registry:
	"""Entries keep the index they were added at, and iterate in that order.
	Names are unique: adding a name a second time does nothing and returns NOT_FOUND.
	"""
	def __init__(self):
		self._values = []
		self._names = []
		self._indexes = {}

	def __repr__(self):
		return f"<Registry {self._names}>"

	def __len__(self):
		return len(self._values)

	def __iter__(self):
		return iter(self._values)

	def __contains__(self, key):
		return self.index(key) != NOT_FOUND

	def __getitem__(self, key):
		index = self.index(key)
		if index == NOT_FOUND:
			raise KeyError(key)
		return self._values[index]

	def add(self, name, value):
		if name in self._indexes:
			return NOT_FOUND
		self._indexes[name] = len(self._values)
		self._names.append(name)
		self._values.append(value)
		return self._indexes[name]

	def index(self, key):
		"""Index for a name, or for an index (checking it is in range). NOT_FOUND if there is none."""
		if isinstance(key, int) and not isinstance(key, bool):
			return key if 0 <= key < len(self._values) else NOT_FOUND
		return self._indexes.get(key, NOT_FOUND)

	def get(self, key, default=None):
		index = self.index(key)
		return default if index == NOT_FOUND else self._values[index]

	def name(self, index):
		return self._names[index]

	def names(self):
		return list(self._names)

	def items(self):
		return list(zip(self._names, self._values))
