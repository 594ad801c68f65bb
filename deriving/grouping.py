"""
Splitting a batch of declarations into groups which refer to each other.

Each group is a smallest set of declarations which mention each other,
directly or through others in the same set. A group is a fine batch.
"""
from typing import Sequence
from boozetools.support.foundation import Visitor, strongly_connected_components_hashable
from . import syntax

class References(Visitor):
	""" Collects the names a declaration mentions, plainly or as itself """
	def __init__(self, enclosing:str):
		self._enclosing = enclosing
		self.found = set()

	def visit_RecordSymbol(self, td:syntax.RecordSymbol): self._spec(td.spec)
	def visit_VariantSymbol(self, td:syntax.VariantSymbol):
		for case in td.type_cases: self.visit(case)
	def visit_TypeAliasSymbol(self, td:syntax.TypeAliasSymbol): self.visit(td.type_expr)
	def visit_OpaqueSymbol(self, td): pass
	def visit_OpenSymbol(self, td): pass

	def visit_EnumTag(self, case): pass
	def visit_TupleTag(self, case:syntax.TupleTag): self._all(case.type_exprs)
	def visit_RecordTag(self, case:syntax.RecordTag): self._spec(case.spec)

	def visit_TypeCall(self, tc:syntax.TypeCall):
		if isinstance(tc.ref, syntax.SelfReference): self.found.add(self._enclosing)
		elif isinstance(tc.ref, syntax.PlainReference): self.found.add(tc.ref.nom.text)
		self._all(tc.arguments)

	def visit_TypeVariable(self, tv): pass
	def visit_TupleSpec(self, it:syntax.TupleSpec): self._all(it.members)
	def visit_PolyVariantSpec(self, it:syntax.PolyVariantSpec): self._all(it.fields)
	def visit_PolyTag(self, tag:syntax.PolyTag): self._all(tag.type_exprs)
	def visit_PolyInherit(self, it:syntax.PolyInherit): self.visit(it.type_expr)

	# The reflector rejects the rest; they refer to nothing of interest here.
	def visit_ArrowSpec(self, it): pass
	def visit_FreeType(self, it): pass
	def visit_ObjectSpec(self, it): pass
	def visit_ClassSpec(self, it): pass
	def visit_ForAllSpec(self, it): pass
	def visit_PackageSpec(self, it): pass
	def visit_ExtensionSpec(self, it): pass
	def visit_AliasSpec(self, it): pass

	def _all(self, items):
		for item in items: self.visit(item)

	def _spec(self, spec:syntax.RecordSpec):
		for f in spec.fields: self.visit(f.type_expr)

def references(td:syntax.TypeDefinition) -> set[str]:
	finder = References(td.nom.text)
	finder.visit(td)
	return finder.found

def declaration_groups(definitions:Sequence[syntax.TypeDefinition]) -> list[list[syntax.TypeDefinition]]:
	"""
	Within a group, declarations keep their original order.
	References to names outside the batch are not considered.
	"""
	by_name = {td.nom.text: td for td in definitions}
	position = {td: i for i, td in enumerate(definitions)}
	graph = {
		td: [by_name[n] for n in references(td) if n in by_name]
		for td in definitions
	}
	return [
		sorted(scc, key=position.__getitem__)
		for scc in strongly_connected_components_hashable(graph)
	]
