"""
A light-weight way to pass around points and spans within a collection of files.
The front end that builds declarations decides what a span covers;
the engine only carries spans along so diagnostics can point at them.
"""
from pathlib import Path
from typing import NamedTuple, Optional

class Span(NamedTuple):
	""" Aimed at whatever prints error messages """
	path: Optional[Path]
	slice: slice

	def __str__(self):
		where = "<declarations>" if self.path is None else str(self.path)
		return "%s[%d:%d]" % (where, self.slice.start, self.slice.stop)

def covering(left:Optional[Span], right:Optional[Span]) -> Optional[Span]:
	""" The smallest span containing both, when they share a file. """
	if left is None: return right
	if right is None: return left
	if left.path != right.path: return left
	return Span(left.path, slice(min(left.slice.start, right.slice.start), max(left.slice.stop, right.slice.stop)))
