"""
The raw declarations, in simple form.
Some front end (a parser, a schema loader, or plain Python code) calls these
constructors to describe a batch of type declarations. The shape reflector
then decides which of them it can model; several classes here exist only so
that the reflector has something definite to reject.
"""
from typing import Optional, Any, Sequence, NamedTuple
from .location import covering
from .ontology import TypeExpression, Phrase, Nom, Symbol, TypeSymbol

class Attribute(NamedTuple):
	""" Free-form annotation on a declaration, field, or case. Callbacks interpret these. """
	nom: Nom
	payload: Any = None

def attribute(attrs:Sequence[Attribute], key:str, default=None):
	""" Payload of the last attribute called `key`, or the default. """
	for attr in reversed(attrs):
		if attr.nom.text == key:
			return attr.payload
	return default

class Reference(Phrase):
	nom:Nom
	def __init__(self, nom:Nom): self.nom = nom
	def span(self): return self.nom.span()
	def path(self) -> tuple[str, ...]:
		raise NotImplementedError(type(self))

class PlainReference(Reference):
	def __repr__(self): return "<ref:%s>"%self.nom.text
	def path(self): return (self.nom.text,)

class SelfReference(Reference):
	""" Refers to whichever declaration encloses it. The reflector works out which. """
	def __repr__(self): return "<SELF>"

class QualifiedReference(Reference):
	space: tuple[Nom, ...]
	def __init__(self, nom:Nom, space:Sequence[Nom]):
		super().__init__(nom)
		self.space = tuple(space)
	def __repr__(self): return "<ref:%s>"%'.'.join(self.path())
	def path(self): return tuple(s.text for s in self.space) + (self.nom.text,)

class TypeParameter(TypeSymbol):
	pass

class TypeDefinition(TypeSymbol):
	type_params: tuple[TypeParameter, ...] = ()
	attributes: tuple[Attribute, ...] = ()
	def __init__(self, nom: Nom, param_names, attributes=()):
		super().__init__(nom)
		self.type_params = type_parameters(param_names)
		self.attributes = tuple(attributes)

def type_parameters(param_names) -> tuple[TypeParameter, ...]:
	return tuple(TypeParameter(n) for n in param_names or ())

class FieldDefinition(Symbol):
	def __init__(self, nom:Nom, type_expr:TypeExpression, attributes=()):
		super().__init__(nom)
		self.type_expr = type_expr
		self.attributes = tuple(attributes)
	def __repr__(self): return "<:%s:%s>"%(self.nom.text, self.type_expr)

class RecordSpec:
	def __init__(self, fields: Sequence[FieldDefinition]):
		assert all(isinstance(f, FieldDefinition) for f in fields)
		self.fields = list(fields)

class RecordSymbol(TypeDefinition):
	spec: RecordSpec
	def __init__(self, nom: Nom, param_names, spec:RecordSpec, attributes=()):
		super().__init__(nom, param_names, attributes)
		self.spec = spec

class TypeAliasSymbol(TypeDefinition):
	type_expr: TypeExpression
	def __init__(self, nom: Nom, param_names, type_expr:TypeExpression, attributes=()):
		super().__init__(nom, param_names, attributes)
		self.type_expr = type_expr

class OpaqueSymbol(TypeDefinition):
	""" Declared without any manifest or structure. """
	pass

class OpenSymbol(TypeDefinition):
	""" A sum to which other places may add cases later. """
	pass

class TypeCase(TypeSymbol):
	variant: "VariantSymbol"  # Variant constructor fills this in.
	attributes: tuple[Attribute, ...] = ()
	def __repr__(self): return "<%s>"%self.nom.text

class EnumTag(TypeCase):
	def __init__(self, nom:Nom, attributes=()):
		super().__init__(nom)
		self.attributes = tuple(attributes)

class TupleTag(TypeCase):
	def __init__(self, nom:Nom, type_exprs:Sequence[TypeExpression], attributes=()):
		super().__init__(nom)
		self.type_exprs = tuple(type_exprs)
		self.attributes = tuple(attributes)

class RecordTag(TypeCase):
	spec: RecordSpec
	def __init__(self, nom:Nom, spec: RecordSpec, attributes=()):
		super().__init__(nom)
		self.spec = spec
		self.attributes = tuple(attributes)

class VariantSymbol(TypeDefinition):
	def __init__(self, nom, param_names, type_cases: Sequence[TypeCase], attributes=()):
		super().__init__(nom, param_names, attributes)
		self.type_cases = list(type_cases)
		for st in type_cases:
			st.variant = self

###############################################################################

class TypeCall(TypeExpression):
	def __init__(self, ref: Reference, arguments: Optional[Sequence[TypeExpression]] = ()):
		assert isinstance(ref, Reference)
		self.ref, self.arguments = ref, tuple(arguments or ())
	def span(self):
		return covering(self.ref.span(), self.arguments[-1].span() if self.arguments else None)
	def __repr__(self):
		return "%s[%s]"%(self.ref, self.arguments) if self.arguments else repr(self.ref)

class TypeVariable(TypeExpression):
	def __init__(self, nom:Nom):
		self.nom = nom
	def span(self): return self.nom.span()
	def __repr__(self): return "'%s" % self.nom.text

class TupleSpec(TypeExpression):
	def __init__(self, members:Sequence[TypeExpression]):
		self.members = tuple(members)
	def span(self):
		if not self.members: return None
		return covering(self.members[0].span(), self.members[-1].span())

class PolyTag(Symbol):
	def __init__(self, nom:Nom, type_exprs:Sequence[TypeExpression]=(), attributes=()):
		super().__init__(nom)
		self.type_exprs = tuple(type_exprs)
		self.attributes = tuple(attributes)

class PolyInherit(Phrase):
	def __init__(self, type_expr:TypeExpression):
		self.type_expr = type_expr
	def span(self): return self.type_expr.span()

class PolyVariantSpec(TypeExpression):
	"""
	An inline sum of tags, which may include every tag of other such sums.
	Only the closed form without bounds is something we can derive from.
	"""
	def __init__(self, head:Nom, fields:Sequence[Phrase], closed=True, lower:Optional[Sequence[Nom]]=None):
		self._head = head
		self.fields = tuple(fields)
		self.closed = closed
		self.lower = lower
	def span(self): return self._head.span()

class ArrowSpec(TypeExpression):
	def __init__(self, lhs:Sequence[TypeExpression], rhs:TypeExpression):
		self.lhs = tuple(lhs)
		self.rhs = rhs
	def span(self):
		return covering(self.lhs[0].span() if self.lhs else None, self.rhs.span())

class FreeType(TypeExpression):
	def __init__(self, head:Nom):
		self._head = head
	def span(self): return self._head.span()

class ObjectSpec(TypeExpression):
	def __init__(self, head:Nom, members:Sequence[FieldDefinition]):
		self._head = head
		self.members = tuple(members)
	def span(self): return self._head.span()

class ClassSpec(TypeExpression):
	def __init__(self, ref:Reference, arguments:Sequence[TypeExpression]=()):
		self.ref, self.arguments = ref, tuple(arguments)
	def span(self): return self.ref.span()

class ForAllSpec(TypeExpression):
	def __init__(self, params:Sequence[Nom], body:TypeExpression):
		self.params = tuple(params)
		self.body = body
	def span(self):
		return covering(self.params[0].span() if self.params else None, self.body.span())

class PackageSpec(TypeExpression):
	def __init__(self, ref:Reference):
		self.ref = ref
	def span(self): return self.ref.span()

class ExtensionSpec(TypeExpression):
	def __init__(self, nom:Nom, payload:Any=None):
		self.nom, self.payload = nom, payload
	def span(self): return self.nom.span()

class AliasSpec(TypeExpression):
	def __init__(self, type_expr:TypeExpression, nom:Nom):
		self.type_expr, self.nom = type_expr, nom
	def span(self): return covering(self.type_expr.span(), self.nom.span())
