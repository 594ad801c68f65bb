"""
The run-time value model that generated code builds and takes apart.

Records are plain dictionaries, in field order. Tuples are tuples.
A case of a closed sum is a Case; a tag of an open sum is a Tag.
Generated modules do `from deriving.runtime import *`, so mind __all__.
"""
from typing import Any

__all__ = ["Case", "Tag", "DecodeError", "decode_error", "GenerationFailed"]

class _Tagged:
	"""
	The payload is a tuple for positional cases, or a dictionary
	for cases with named fields. Cases without payload have ().
	"""
	__slots__ = ("tag", "payload")
	__match_args__ = ("tag", "payload")
	def __init__(self, tag:str, payload:Any=()):
		self.tag = tag
		self.payload = payload
	def __eq__(self, other):
		return type(self) is type(other) and self.tag == other.tag and self.payload == other.payload
	def __repr__(self):
		if self.payload == (): return "%s(%r)" % (type(self).__name__, self.tag)
		return "%s(%r, %r)" % (type(self).__name__, self.tag, self.payload)

class Case(_Tagged):
	""" A value of a closed sum type """

class Tag(_Tagged):
	""" A value of an open sum type """

class DecodeError(ValueError):
	pass

def decode_error(message:str):
	""" A function, so generated code can fail in the middle of an expression. """
	raise DecodeError(message)

class GenerationFailed(Exception):
	""" Generated modules raise this at import when derivation failed. """
