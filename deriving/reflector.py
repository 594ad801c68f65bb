"""
The shape reflector turns raw declarations into the canonical shape model.

This is the single validation boundary: anything the engines could not
model gets rejected here, with the guilty phrase and a fixed category,
so that no derivation ever meets a shape it does not understand.
"""
from typing import Optional, Sequence
from boozetools.support.foundation import Visitor
from . import syntax, shapes
from .ontology import DerivationError, Phrase

class UnsupportedShape(DerivationError):
	def __init__(self, phrase:Optional[Phrase], category:str):
		super().__init__(phrase, "%s are not supported" % category)
		self.category = category

class Reflector(Visitor):
	"""
	One of these reflects one declaration (or one bare type expression).
	It knows the enclosing declaration's name, which is what a
	self-reference means, and its formal parameters, if any.
	"""
	def __init__(self, enclosing:Optional[str]=None, params:Optional[Sequence[str]]=None):
		self._enclosing = enclosing
		self._params = params

	def reflect(self, te:syntax.TypeExpression) -> shapes.TypeExpr:
		return shapes.TypeExpr(te, self.visit(te))

	def _reflect_all(self, type_exprs) -> tuple[shapes.TypeExpr, ...]:
		return tuple(self.reflect(te) for te in type_exprs)

	def _fields(self, spec:syntax.RecordSpec) -> tuple[shapes.Field, ...]:
		return tuple(
			shapes.Field(f.nom.text, f.attributes, self.reflect(f.type_expr))
			for f in spec.fields
		)

	# Declarations:

	def visit_RecordSymbol(self, td:syntax.RecordSymbol):
		return shapes.RecordShape(self._fields(td.spec))

	def visit_VariantSymbol(self, td:syntax.VariantSymbol):
		return shapes.VariantShape(tuple(self.visit(case) for case in td.type_cases))

	def visit_TypeAliasSymbol(self, td:syntax.TypeAliasSymbol):
		return shapes.ExprShape(self.reflect(td.type_expr))

	def visit_OpaqueSymbol(self, td:syntax.OpaqueSymbol):
		raise UnsupportedShape(td, "abstract types")

	def visit_OpenSymbol(self, td:syntax.OpenSymbol):
		raise UnsupportedShape(td, "open types")

	def visit_EnumTag(self, case:syntax.EnumTag):
		return shapes.TupleCase(case.nom.text, case.attributes, ())

	def visit_TupleTag(self, case:syntax.TupleTag):
		return shapes.TupleCase(case.nom.text, case.attributes, self._reflect_all(case.type_exprs))

	def visit_RecordTag(self, case:syntax.RecordTag):
		return shapes.RecordCase(case.nom.text, case.attributes, self._fields(case.spec))

	# Type expressions we can model:

	def visit_TypeCall(self, tc:syntax.TypeCall):
		if isinstance(tc.ref, syntax.SelfReference):
			if self._enclosing is None:
				raise UnsupportedShape(tc, "self references outside a declaration")
			path = (self._enclosing,)
		else:
			path = tc.ref.path()
		return shapes.Opaque(path, self._reflect_all(tc.arguments))

	def visit_TypeVariable(self, tv:syntax.TypeVariable):
		if self._params is not None and tv.nom.text not in self._params:
			raise UnsupportedShape(tv, "unbound type variables")
		return shapes.Var(tv.nom.text)

	def visit_TupleSpec(self, it:syntax.TupleSpec):
		return shapes.Tuple(self._reflect_all(it.members))

	def visit_PolyVariantSpec(self, it:syntax.PolyVariantSpec):
		if not it.closed or it.lower is not None:
			raise UnsupportedShape(it, "non closed polyvariants")
		return shapes.PolyVariant(tuple(self.visit(field) for field in it.fields))

	def visit_PolyTag(self, tag:syntax.PolyTag):
		return shapes.Construct(tag.nom.text, tag.attributes, self._reflect_all(tag.type_exprs))

	def visit_PolyInherit(self, it:syntax.PolyInherit):
		te = it.type_expr
		if not isinstance(te, syntax.TypeCall):
			raise UnsupportedShape(it, "this polyvariant inherit")
		opaque = self.visit_TypeCall(te)
		return shapes.Inherit(opaque.ref, opaque.args)

	# Type expressions we cannot:

	def visit_ArrowSpec(self, it): raise UnsupportedShape(it, "function types")
	def visit_FreeType(self, it): raise UnsupportedShape(it, "type placeholders")
	def visit_ObjectSpec(self, it): raise UnsupportedShape(it, "object types")
	def visit_ClassSpec(self, it): raise UnsupportedShape(it, "class types")
	def visit_ForAllSpec(self, it): raise UnsupportedShape(it, "polymorphic type expressions")
	def visit_PackageSpec(self, it): raise UnsupportedShape(it, "packaged module types")
	def visit_ExtensionSpec(self, it): raise UnsupportedShape(it, "extension nodes")
	def visit_AliasSpec(self, it): raise UnsupportedShape(it, "type aliases")

def of_type_expression(te:syntax.TypeExpression) -> shapes.TypeExpr:
	""" Reflect a bare type expression, as for applying a derivation inline. """
	return Reflector().reflect(te)

def of_type_definition(td:syntax.TypeDefinition) -> shapes.TypeDecl:
	params = tuple(p.nom.text for p in td.type_params)
	if len(set(params)) < len(params):
		raise UnsupportedShape(td, "duplicated type parameters")
	shape = Reflector(td.nom.text, params).visit(td)
	return shapes.TypeDecl(td.nom.text, params, shape, td, td.attributes)

def reflect_batch(definitions:Sequence[syntax.TypeDefinition]) -> list[shapes.TypeDecl]:
	""" All or nothing: the first unsupported shape anywhere aborts the batch. """
	return [of_type_definition(td) for td in definitions]
