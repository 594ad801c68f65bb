"""
These most-fundamental classes in the syntax class hierarchy
are separate from the rest to avoid various circular-import
scenarios. Both the raw declaration syntax and the canonical
shapes refer back to them, as does the error hierarchy.
"""
from typing import Optional
from .location import Span

class Phrase:
	def span(self) -> Optional[Span]:
		""" Return the source span of this phrase, if known """
		raise NotImplementedError(type(self))

class Nom(Phrase):
	""" Representing the occurrence of a name anywhere. """
	def __init__(self, text:str, where:Optional[Span]=None):
		assert isinstance(text, str)
		assert isinstance(where, Span) or where is None, type(where)
		self.text, self._where = text, where
	def __repr__(self): return "<Name %r>" % self.text
	def span(self): return self._where

class Symbol(Phrase):
	"""
	Any named-and-defined thing: declarations, cases, fields, parameters.
	"""
	nom: Nom

	def __init__(self, nom:Nom): self.nom = nom
	def __repr__(self): return "{%s:%s}" % (self.nom.text, type(self).__name__)
	def span(self): return self.nom.span()

class TypeSymbol(Symbol):
	""" Declarations, their parameters, and their cases """

class TypeExpression(Phrase):
	pass

# The principal type of a declaration batch goes by this name.
# Derivations applied to it take the bare derivation name.
SELF = Nom("t")

class DerivationError(Exception):
	"""
	The first argument is the guilty phrase (or None), the second a message.
	Everything the engine refuses to do raises one of these.
	"""
	def __init__(self, phrase:Optional[Phrase], message:str):
		super().__init__(phrase, message)
		self.phrase, self.message = phrase, message

	def span(self) -> Optional[Span]:
		return None if self.phrase is None else self.phrase.span()

	def __str__(self):
		where = self.span()
		return self.message if where is None else "%s: %s" % (where, self.message)
