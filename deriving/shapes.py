"""
The canonical shape model.

Whatever the front end hands over, the reflector turns it into these few
immutable structures, and the derivation engines only ever look at these.
Each TypeExpr keeps the raw syntax it came from, which serves for locations
and for rendering annotations in generated signatures.
"""
from typing import NamedTuple, Optional, Union
from .ontology import Phrase
from .syntax import Attribute, TypeExpression

Attrs = tuple[Attribute, ...]

class Opaque(NamedTuple):
	""" Reference to a named type, possibly applied to type arguments. """
	ref: tuple[str, ...]
	args: tuple["TypeExpr", ...]

class Var(NamedTuple):
	name: str

class Tuple(NamedTuple):
	elements: tuple["TypeExpr", ...]

class PolyVariant(NamedTuple):
	""" An inline open sum. """
	cases: tuple["PolyVariantCase", ...]

TypeNode = Union[Opaque, Var, Tuple, PolyVariant]

class TypeExpr(NamedTuple):
	syntax: Optional[TypeExpression]
	node: TypeNode
	def span(self):
		return None if self.syntax is None else self.syntax.span()

class Field(NamedTuple):
	name: str
	attrs: Attrs
	type_expr: TypeExpr

class TupleCase(NamedTuple):
	name: str
	attrs: Attrs
	types: tuple[TypeExpr, ...]

class RecordCase(NamedTuple):
	name: str
	attrs: Attrs
	fields: tuple[Field, ...]

VariantCase = Union[TupleCase, RecordCase]

class Construct(NamedTuple):
	name: str
	attrs: Attrs
	types: tuple[TypeExpr, ...]

class Inherit(NamedTuple):
	""" Brings in every tag of another open sum. """
	ref: tuple[str, ...]
	args: tuple[TypeExpr, ...]

PolyVariantCase = Union[Construct, Inherit]

class RecordShape(NamedTuple):
	fields: tuple[Field, ...]

class VariantShape(NamedTuple):
	cases: tuple[VariantCase, ...]

class ExprShape(NamedTuple):
	type_expr: TypeExpr

TypeDeclShape = Union[RecordShape, VariantShape, ExprShape]

class TypeDecl(NamedTuple):
	name: str
	params: tuple[str, ...]
	shape: TypeDeclShape
	loc: Phrase
	attrs: Attrs = ()

	def is_open_sum(self) -> bool:
		return isinstance(self.shape, ExprShape) and isinstance(self.shape.type_expr.node, PolyVariant)

###############################################################################

def te_opaque(ref:tuple[str, ...], args=()) -> TypeExpr:
	return TypeExpr(None, Opaque(tuple(ref), tuple(args)))

def te_var(name:str) -> TypeExpr:
	return TypeExpr(None, Var(name))

def decl_to_te_expr(decl:TypeDecl) -> TypeExpr:
	""" The type expression by which a declaration refers to itself. """
	return te_opaque((decl.name,), [te_var(p) for p in decl.params])

def is_variant_enum(cases) -> bool:
	return all(
		not (case.types if isinstance(case, TupleCase) else case.fields)
		for case in cases
	)

def is_polyvariant_enum(cases) -> bool:
	return all(
		not (case.types if isinstance(case, Construct) else case.args)
		for case in cases
	)

def render_type(te:TypeExpr) -> str:
	""" Annotation text for a type expression, as used in generated signatures. """
	node = te.node
	if isinstance(node, Var): return node.name
	if isinstance(node, Tuple): return "tuple[%s]" % ", ".join(map(render_type, node.elements))
	if isinstance(node, PolyVariant): return "Tag"
	head = ".".join(node.ref)
	if node.args: return "%s[%s]" % (head, ", ".join(map(render_type, node.args)))
	return head
