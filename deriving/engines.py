"""
The generic derivation engines.

Each engine walks the canonical shapes of a batch and asks its hooks what
to generate at every tuple, record, variant, and open sum. The engines
themselves take care of everything else: naming, references to other
declarations, type parameters, signatures, and the helper functions that
`match` statements must live in.

There are three:
	Arity0 makes a function of no input per declaration, such as a default value.
	Arity1 makes a function of exactly one input, such as an encoder or decoder.
	TypeLevel makes a type alias per declaration, mirroring its shape.

Hooks are plain functions stored in a NamedTuple. They take the engine
as their first argument, so they can recurse through it. A derivation
gets what it wants by `_replace`-ing the defaults, which all complain.
"""
import ast
from typing import NamedTuple, Callable, Optional, Union, Sequence
from boozetools.support.foundation import Visitor
from .ontology import DerivationError, Phrase
from . import shapes
from .shapes import TypeExpr, TypeDecl
from .helper import name, call, function, returns, lambda_, generic, derive_of_label, ederiver, match

class CallbackNotProvided(DerivationError):
	pass

def unsupported(what:str):
	def hook(engine, loc:Optional[Phrase], *args):
		raise CallbackNotProvided(loc, "%s does not support %s" % (engine.name, what))
	return hook

class Unit(NamedTuple):
	""" One generated item, named according to the naming contract """
	name: str
	signature: str
	node: ast.stmt

class Diagnostic(NamedTuple):
	""" Stands in for the whole output of a batch that could not be derived. """
	loc: Optional[Phrase]
	message: str

	def __str__(self):
		where = None if self.loc is None else self.loc.span()
		return self.message if where is None else "%s: %s" % (where, self.message)

Output = Union[Unit, Diagnostic]

def _unit(ident:str, signature:str, node:ast.stmt) -> Unit:
	""" A unit stands alone, so its tree gets source locations of its own. """
	return Unit(ident, signature, ast.fix_missing_locations(node))

class Inline(NamedTuple):
	""" What comes of applying a derivation to a bare type expression """
	helpers: tuple[ast.stmt, ...]
	expr: ast.expr

	def bind(self, ident:str) -> list[ast.stmt]:
		""" Statements which assign the derived thing to `ident` """
		if self.helpers:
			maker = "_make_" + ident
			value = call(maker)
			prefix = [function(maker, [], [*self.helpers, *returns(self.expr)])]
		else:
			value = self.expr
			prefix = []
		return prefix + [ast.Assign(targets=[ast.Name(id=ident, ctx=ast.Store())], value=value)]

class Scope:
	"""
	Helper functions for the unit under construction.
	A `match` is a statement, but hooks must produce expressions,
	so each match goes in a little function local to the unit.
	Engines working together on one derivation share a scope.
	"""
	def __init__(self):
		self._helpers = None

	def open(self):
		assert self._helpers is None, "Units do not nest"
		self._helpers = []

	def close(self) -> list[ast.stmt]:
		helpers, self._helpers = self._helpers, None
		return helpers

	def hoist(self, stem:str, params:Sequence[str], body:list[ast.stmt]) -> ast.Name:
		assert self._helpers is not None, "Hoisting outside of any unit"
		ident = "_%s_%d" % (stem, len(self._helpers))
		self._helpers.append(function(ident, params, body))
		return name(ident)

	def match(self, subject:ast.expr, build_cases:Callable[[ast.expr], list[ast.match_case]]) -> ast.Call:
		"""
		The build_cases function gets the expression for the subject
		as seen from inside the helper, and returns the match-cases.
		"""
		x = name("x")
		helper = self.hoist("match", ["x"], [match(x, build_cases(x))])
		return call(helper, subject)

def _type_ref_name(derivation:str, ref:tuple[str, ...]) -> ast.expr:
	return ederiver(derivation, ref)

def _callable(params:Sequence[str], result:str) -> str:
	return "Callable[[%s], %s]" % (", ".join(params), result)

class Engine(Visitor):
	""" What the three engines have in common """
	def __init__(self, hooks, scope:Optional[Scope]=None):
		self.hooks = hooks
		self.scope = scope or Scope()

	@property
	def name(self) -> str:
		return self.hooks.name

	def label(self, type_name:str) -> str:
		return derive_of_label(self.name, type_name)

	def generate(self, decls:Sequence[TypeDecl]) -> list[Unit]:
		return [unit for decl in decls for unit in self.derive_type_decl(decl)]

	def derive_type_decl(self, decl:TypeDecl) -> list[Unit]:
		if self.hooks.type_decl is None: return self.default_type_decl(decl)
		else: return self.hooks.type_decl(self, decl)

	def default_type_decl(self, decl:TypeDecl) -> list[Unit]:
		raise NotImplementedError(type(self))

	def derive_of_type_expr(self, loc, te:TypeExpr, *x):
		raise NotImplementedError(type(self))

	def derive_of_polyvariant(self, loc, te:TypeExpr, *x):
		raise NotImplementedError(type(self))

	# The shape of a declaration is the top of the walk.
	# Value-level engines pass along the input expression, if any.

	def visit_RecordShape(self, shape:shapes.RecordShape, decl:TypeDecl, *x):
		return self.hooks.of_record(self, decl.loc, shape.fields, *x)

	def visit_VariantShape(self, shape:shapes.VariantShape, decl:TypeDecl, *x):
		return self.hooks.of_variant(self, decl.loc, shape.cases, *x)

	def visit_ExprShape(self, shape:shapes.ExprShape, decl:TypeDecl, *x):
		te = shape.type_expr
		# An open sum as the whole declaration answers to the declaration's name.
		if isinstance(te.node, shapes.PolyVariant): return self.derive_of_polyvariant(decl.loc, te, *x)
		return self.derive_of_type_expr(decl.loc, te, *x)

	def _build(self, build:Callable):
		self.scope.open()
		try: expr = build()
		finally: helpers = self.scope.close()
		return helpers, expr

###############################################################################

class Hooks0(NamedTuple):
	name: str
	signature: Callable[[str], str]   # Type annotation text -> result annotation text
	of_tuple: Callable = unsupported("tuple types")
	of_record: Callable = unsupported("record types")
	of_variant: Callable = unsupported("variant types")
	of_polyvariant: Callable = unsupported("polyvariant types")
	type_decl: Optional[Callable] = None
	abstract_params: bool = True

class Arity0(Engine):
	"""
	Generates `def D_T(D_a, ...): return <expr>`. A reference to another
	declaration is a call to its unit, passing values for type arguments;
	a type variable is the value passed in for it.
	"""
	hooks: Hooks0

	def derive_of_type_expr(self, loc, te:TypeExpr):
		return self.visit(te.node, te)

	def derive_type_ref(self, loc, derivation:str, ref, args:Sequence[TypeExpr]) -> ast.expr:
		return call(_type_ref_name(derivation, ref), *[self.derive_of_type_expr(loc, a) for a in args])

	def visit_Tuple(self, node:shapes.Tuple, te:TypeExpr):
		return self.hooks.of_tuple(self, te.syntax, node.elements)

	def visit_Var(self, node:shapes.Var, te:TypeExpr):
		return name(self.label(node.name))

	def visit_Opaque(self, node:shapes.Opaque, te:TypeExpr):
		return self.derive_type_ref(te.syntax, self.name, node.ref, node.args)

	def visit_PolyVariant(self, node:shapes.PolyVariant, te:TypeExpr):
		return self.derive_of_polyvariant(te.syntax, te)

	def derive_of_polyvariant(self, loc, te:TypeExpr):
		return self.hooks.of_polyvariant(self, loc, te.node.cases, te)

	def default_type_decl(self, decl:TypeDecl) -> list[Unit]:
		return [self.function_unit(decl, self.label(decl.name), lambda: self.visit(decl.shape, decl))]

	def function_unit(self, decl:TypeDecl, ident:str, build:Callable[[], ast.expr]) -> Unit:
		helpers, expr = self._build(build)
		result = self.hooks.signature(shapes.render_type(shapes.decl_to_te_expr(decl)))
		if self.hooks.abstract_params:
			params = [self.label(p) for p in decl.params]
			annotations = [self.hooks.signature(p) for p in decl.params]
		else:
			params, annotations = [], []
		node = function(ident, params, [*helpers, *returns(expr)], annotations, result)
		return _unit(ident, _callable(annotations, result), node)

	def extension(self, te:TypeExpr) -> Inline:
		helpers, expr = self._build(lambda: self.derive_of_type_expr(te.syntax, te))
		return Inline(tuple(helpers), expr)

###############################################################################

class AsFun(NamedTuple):
	""" A deriver known as a way to build an expression from its input """
	fn: Callable[[ast.expr], ast.expr]

class AsVal(NamedTuple):
	""" A deriver known as an expression denoting a function """
	expr: ast.expr

Deriver = Union[AsFun, AsVal]

def as_val(deriver:Deriver, x:ast.expr) -> ast.expr:
	if isinstance(deriver, AsFun): return deriver.fn(x)
	else: return call(deriver.expr, x)

def as_fun(deriver:Deriver) -> ast.expr:
	if isinstance(deriver, AsFun): return lambda_(["x"], deriver.fn(name("x")))
	else: return deriver.expr

class Hooks1(NamedTuple):
	name: str
	signature: Callable[[str], tuple[str, str]]   # Type annotation text -> (input, output) annotation text
	of_tuple: Callable = unsupported("tuple types")
	of_record: Callable = unsupported("record types")
	of_variant: Callable = unsupported("variant types")
	of_polyvariant: Callable = unsupported("polyvariant types")
	type_decl: Optional[Callable] = None

class Arity1(Engine):
	"""
	Generates `def D_T(D_a, ..., x): return <expr>`.
	A type variable `a` means the function `D_a`, passed in first.
	A reference `R[args]` means `D_R` applied to derivers for the args.
	"""
	hooks: Hooks1

	def deriver(self, te:TypeExpr) -> Deriver:
		return self.visit(te.node, te)

	def derive_of_type_expr(self, loc, te:TypeExpr, x:ast.expr) -> ast.expr:
		return as_val(self.deriver(te), x)

	def type_ref_deriver(self, loc, derivation:str, ref, args:Sequence[TypeExpr]) -> Deriver:
		fn = _type_ref_name(derivation, ref)
		if not args: return AsVal(fn)
		handlers = [as_fun(self.deriver(a)) for a in args]
		return AsFun(lambda x: call(fn, *handlers, x))

	def derive_type_ref(self, loc, derivation:str, ref, args:Sequence[TypeExpr], x:ast.expr) -> ast.expr:
		return as_val(self.type_ref_deriver(loc, derivation, ref, args), x)

	def visit_Tuple(self, node:shapes.Tuple, te:TypeExpr):
		return AsFun(lambda x: self.hooks.of_tuple(self, te.syntax, node.elements, x))

	def visit_Var(self, node:shapes.Var, te:TypeExpr):
		return AsVal(name(self.label(node.name)))

	def visit_Opaque(self, node:shapes.Opaque, te:TypeExpr):
		return self.type_ref_deriver(te.syntax, self.name, node.ref, node.args)

	def visit_PolyVariant(self, node:shapes.PolyVariant, te:TypeExpr):
		return AsFun(lambda x: self.derive_of_polyvariant(te.syntax, te, x))

	def derive_of_polyvariant(self, loc, te:TypeExpr, x:ast.expr) -> ast.expr:
		return self.hooks.of_polyvariant(self, loc, te.node.cases, te, x)

	def default_type_decl(self, decl:TypeDecl) -> list[Unit]:
		return [self.function_unit(decl, self.label(decl.name), lambda x: self.visit(decl.shape, decl, x))]

	def function_unit(self, decl:TypeDecl, ident:str, build:Callable[[ast.expr], ast.expr], signature=None) -> Unit:
		"""
		The build function gets the input expression and returns the result.
		The signature function defaults to the one in the hooks.
		"""
		signature = signature or self.hooks.signature
		helpers, expr = self._build(lambda: build(name("x")))
		in_t, out_t = signature(shapes.render_type(shapes.decl_to_te_expr(decl)))
		params = [self.label(p) for p in decl.params] + ["x"]
		annotations = [_callable([a], b) for a, b in map(self.hooks.signature, decl.params)] + [in_t]
		node = function(ident, params, [*helpers, *returns(expr)], annotations, out_t)
		return _unit(ident, _callable(annotations, out_t), node)

	def extension(self, te:TypeExpr) -> Inline:
		helpers, expr = self._build(lambda: as_fun(self.deriver(te)))
		return Inline(tuple(helpers), expr)

###############################################################################

class TypeHooks(NamedTuple):
	name: str
	of_tuple: Callable = unsupported("tuple types")
	of_record: Callable = unsupported("record types")
	of_variant: Callable = unsupported("variant types")
	of_polyvariant: Callable = unsupported("polyvariant types")
	type_decl: Optional[Callable] = None

class TypeLevel(Engine):
	"""
	Generates `type D_T[a, ...] = <annotation>`, a shadow of each declaration.
	References mean the shadow of whatever they refer to;
	type variables mean the alias's own type parameters.
	"""
	hooks: TypeHooks

	def derive_of_type_expr(self, loc, te:TypeExpr) -> ast.expr:
		return self.visit(te.node, te)

	def derive_type_ref(self, loc, derivation:str, ref, args:Sequence[TypeExpr]) -> ast.expr:
		return generic(_type_ref_name(derivation, ref), [self.derive_of_type_expr(loc, a) for a in args])

	def visit_Tuple(self, node:shapes.Tuple, te:TypeExpr):
		return self.hooks.of_tuple(self, te.syntax, node.elements)

	def visit_Var(self, node:shapes.Var, te:TypeExpr):
		return name(node.name)

	def visit_Opaque(self, node:shapes.Opaque, te:TypeExpr):
		return self.derive_type_ref(te.syntax, self.name, node.ref, node.args)

	def visit_PolyVariant(self, node:shapes.PolyVariant, te:TypeExpr):
		return self.derive_of_polyvariant(te.syntax, te)

	def derive_of_polyvariant(self, loc, te:TypeExpr) -> ast.expr:
		return self.hooks.of_polyvariant(self, loc, te.node.cases)

	def default_type_decl(self, decl:TypeDecl) -> list[Unit]:
		ident = self.label(decl.name)
		node = ast.TypeAlias(
			name=ast.Name(id=ident, ctx=ast.Store()),
			type_params=[ast.TypeVar(name=p, bound=None) for p in decl.params],
			value=self.visit(decl.shape, decl),
		)
		header = "type %s[%s]" % (ident, ", ".join(decl.params)) if decl.params else "type " + ident
		return [_unit(ident, header, node)]

	def extension(self, te:TypeExpr) -> Inline:
		return Inline((), self.derive_of_type_expr(te.syntax, te))
