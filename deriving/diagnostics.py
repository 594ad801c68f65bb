import sys, random
from functools import lru_cache
from typing import Sequence, Any, Optional
from pathlib import Path
from boozetools.support.failureprone import SourceText, illustration

from .ontology import Phrase
from .engines import Diagnostic

class TooManyIssues(Exception):
	pass

def _outburst():
	particle = ["Oh, ", "Well, ", "Aw, ", "", ""]

	minced_oaths = [
		'Ack', 'ARGH', 'Blargh', 'Confound it', 'Crud', 'Curses',
		'Dag Nabbit', 'Drat', 'Fiddlesticks', 'Good Grief', "Great Scott",
		'Heavens', 'Jeepers', 'Nuts', 'Rats', 'SNAP',
	]

	resignations = [
		'I cannot derive that.',
		'Some of these types are beyond me.',
		'I have no idea what the right code is.',
		'I need to ask for help.',
	]

	return "%s%s! %s"%tuple(map(random.choice, (particle, minced_oaths, resignations)))

class Report:
	""" Collects the issues a run of the command line runs into, and says so at the end. """
	_issues : list["Pic"]

	def __init__(self, *, verbose:int, max_issues=3):
		self._verbose = verbose or 0   # Because None is incomparable.
		self._issues = []
		self._max_issues = max_issues

	def sick(self): return bool(self._issues)

	def issue(self, it:Any):
		self._issues.append(it)
		if len(self._issues) == self._max_issues:
			raise TooManyIssues(self)

	def info(self, *args):
		if self._verbose:
			print(*args, file=sys.stderr)

	def error(self, guilty: Sequence[Phrase], msg: str):
		""" Actually make an entry of an issue """
		for g in guilty: assert isinstance(g, Phrase), g
		problem = [Annotation(g, "") for g in guilty]
		self.issue(Pic(msg, problem))

	def complain_to_console(self):
		""" Emit all the issues to the console. """
		_bemoan(self._issues)

	# Methods the command line invokes:

	def bad_declarations(self, where:str, why:str):
		intro = "I could not get declarations from %s" % where
		self.issue(Pic(intro, [], [why]))

	def unknown_derivation(self, why:str):
		self.issue(Pic("Unknown derivation", [], [why]))

	def derivation_failed(self, derivation:str, diagnostic:Diagnostic):
		intro = "Cannot derive %s: %s" % (derivation, diagnostic.message)
		problem = [] if diagnostic.loc is None else [Annotation(diagnostic.loc, diagnostic.message)]
		self.issue(Pic(intro, problem))

class Annotation:
	path: Optional[Path]
	slice: Optional[slice]
	caption: str
	def __init__(self, node:Phrase, caption:str=""):
		span = node.span()
		self.path = None if span is None else span.path
		self.slice = None if span is None else span.slice
		self.caption = caption
	def illustrate(self):
		if self.path is None or self.slice is None:
			return "       | " + self.caption
		source = _fetch(self.path)
		row, col = source.find_row_col(self.slice.start)
		single_line = source.line_of_text(row)
		width = self.slice.stop - self.slice.start
		return illustration(single_line, col, width, prefix='% 6d |' % row, caption=self.caption)

class Pic:
	def __init__(self, intro:str, anns:list[Annotation], footer=()):
		self._intro, self._anns, self._footer = intro, anns, footer
	def as_text(self):
		lines = [self._intro, ""]
		path = None
		for ann in self._anns:
			if ann.path != path:
				path = ann.path
				lines.append(str(path))
			lines.append(ann.illustrate())
		lines.extend(self._footer)
		return '\n'.join(lines)

@lru_cache(5)
def _fetch(path) -> SourceText:
	with open(path, "r", encoding="utf-8") as fh:
		return SourceText(fh.read(), filename=str(path))

def _bemoan(issues):
	""" Emit all the issues to the console. """
	if issues:
		print("*"*60, file=sys.stderr)
		print(_outburst(), file=sys.stderr)
	for i in issues:
		print("  -"*20, file=sys.stderr)
		print(i.as_text(), file=sys.stderr)
	sys.stderr.flush()
