"""
Ready-made derivations built from small case-generation callbacks.

	deriving_to       makes encoders from typed values to some representation.
	deriving_of       makes decoders which test one case after another.
	deriving_of_match makes decoders as a single `match` statement.
	combined          runs several derivations over the same batch.

Decoders also get a probe for each open sum: `D_poly_T` returns the decoded
value, or None if the input carries none of that sum's tags. This is how an
open sum which includes another gets to try the other's tags in turn.
Encoders get a tag set `D_tags_T` for each open sum, for the same reason.

There is also a registry of derivations by name, for the command line.
"""
import ast
from typing import NamedTuple, Callable, Optional, Sequence, Union
from .ontology import Symbol
from .syntax import TypeDefinition, TypeExpression
from .reflector import UnsupportedShape, reflect_batch, of_type_expression
from .shapes import (
	TypeDecl, TupleCase, RecordCase, Construct, Inherit,
	is_variant_enum, is_polyvariant_enum, te_var,
)
from .engines import (
	Engine, Arity0, Arity1, TypeLevel, Hooks0, Hooks1, TypeHooks,
	Unit, Diagnostic, Output, Inline, CallbackNotProvided,
)
from .helper import (
	name, const, call, method, member, etuple, let_in, present_or, is_present,
	case, pwild, pvalue, psequence, pclass, gen_pat_tuple, gen_pat_record,
	raises, derive_of_label, ederiver, contained_in,
)

class Derivation:
	"""
	A named derivation, ready to apply to batches of declarations.
	Every request gets a fresh engine, so nothing carries over between batches.
	The prelude names modules whose exports the generated code refers to.
	"""
	def __init__(self, name:str, make_engine:Optional[Callable[[], Engine]], prelude:Sequence[str]=()):
		self.name = name
		self._make_engine = make_engine
		self.prelude = tuple(prelude)

	def __repr__(self): return "<Derivation %s>" % self.name

	def generate(self, definitions:Sequence[TypeDefinition], report=None) -> list[Output]:
		"""
		Either one unit (or a few) per declaration,
		or else exactly one diagnostic and nothing more.
		"""
		try: decls = reflect_batch(definitions)
		except UnsupportedShape as ex:
			if report is not None: report.info("Cannot derive %s: %s" % (self.name, ex))
			return [Diagnostic(ex.phrase, ex.message)]
		if report is not None: report.info("Deriving %s for %s" % (self.name, ", ".join(d.name for d in decls)))
		return self.derive(decls)

	def derive(self, decls:Sequence[TypeDecl]) -> list[Unit]:
		return self._make_engine().generate(decls)

	def extension(self, te:TypeExpression) -> Inline:
		""" Apply this derivation to a bare type expression. """
		return self._make_engine().extension(of_type_expression(te))

# A derivation is normally known by the stem of the names it generates.
# The known_as parameter lets two derivations share a stem.

def deriving0(hooks:Hooks0, prelude=(), known_as=None) -> Derivation:
	return Derivation(known_as or hooks.name, lambda: Arity0(hooks), prelude)

def deriving1(hooks:Hooks1, prelude=(), known_as=None) -> Derivation:
	return Derivation(known_as or hooks.name, lambda: Arity1(hooks), prelude)

def deriving_type(hooks:TypeHooks, prelude=(), known_as=None) -> Derivation:
	return Derivation(known_as or hooks.name, lambda: TypeLevel(hooks), prelude)

def describe(loc) -> str:
	""" Words for the messages generated code produces on failure """
	if isinstance(loc, Symbol): return loc.nom.text
	where = None if loc is None else loc.span()
	if where is None: return "an inline type"
	return "the type at %s" % where

def _maker(constructor:str, tag:str):
	""" Builds the run-time value for a case, given its payload expression (or None) """
	def make(payload:Optional[ast.expr]) -> ast.expr:
		if payload is None: return call(constructor, const(tag))
		return call(constructor, const(tag), payload)
	return make

###############################################################################
# Encoding

class Encoder:
	"""
	Hooks for an arity-one derivation from typed values to a representation.
	Every structural hook destructures its input with a `match` statement,
	so a value of the wrong shape raises TypeError.
	"""
	def __init__(self, name:str, representation:str, of_tuple, of_record, of_variant_case, of_variant_case_record, of_enum_variant_case=None):
		self.name = name
		self.tags = name + "_tags"
		self.representation = representation
		self._of_tuple = of_tuple
		self._of_record = of_record
		self._of_variant_case = of_variant_case
		self._of_variant_case_record = of_variant_case_record
		self._of_enum_variant_case = of_enum_variant_case

	def hooks(self) -> Hooks1:
		return Hooks1(
			self.name, self.signature,
			of_tuple=self.tuple, of_record=self.record,
			of_variant=self.variant, of_polyvariant=self.polyvariant,
			type_decl=self.type_decl,
		)

	def signature(self, type_text:str):
		return type_text, self.representation

	def tags_hooks(self) -> Hooks0:
		return Hooks0(self.tags, lambda type_text: "frozenset[str]", of_polyvariant=self.tag_set, abstract_params=False)

	@staticmethod
	def _mismatch(loc) -> ast.match_case:
		return ast.match_case(pattern=pwild(), guard=None, body=raises("TypeError", "not a value of %s" % describe(loc)))

	def tuple(self, engine:Arity1, loc, types, x):
		def build(subject):
			pattern, xs = gen_pat_tuple("x", len(types))
			body = self._of_tuple(loc, engine.derive_of_type_expr, types, xs)
			return [case(pattern, body), self._mismatch(loc)]
		return engine.scope.match(x, build)

	def record(self, engine:Arity1, loc, fields, x):
		def build(subject):
			pattern, xs = gen_pat_record("x", fields)
			body = self._of_record(loc, engine.derive_of_type_expr, fields, xs)
			return [case(pattern, body), self._mismatch(loc)]
		return engine.scope.match(x, build)

	def _tagged_case(self, engine:Arity1, loc, constructor:str, c, enum:bool) -> ast.match_case:
		derive = engine.derive_of_type_expr
		if isinstance(c, RecordCase):
			pattern, xs = gen_pat_record("x", c.fields)
			body = self._of_variant_case_record(loc, c.attrs, derive, c.name, c.fields, xs)
		elif c.types:
			pattern, xs = gen_pat_tuple("x", len(c.types))
			body = self._of_variant_case(loc, c.attrs, derive, c.name, c.types, xs)
		else:
			body = self._of_enum_variant_case(loc, c.attrs, c.name) if enum else self._of_variant_case(loc, c.attrs, derive, c.name, (), [])
			return case(pclass(constructor, tag=pvalue(c.name), payload=psequence([])), body)
		return case(pclass(constructor, tag=pvalue(c.name), payload=pattern), body)

	def variant(self, engine:Arity1, loc, cases, x):
		enum = self._of_enum_variant_case is not None and is_variant_enum(cases)
		def build(subject):
			return [self._tagged_case(engine, loc, "Case", c, enum) for c in cases] + [self._mismatch(loc)]
		return engine.scope.match(x, build)

	def polyvariant(self, engine:Arity1, loc, cases, te, x):
		enum = self._of_enum_variant_case is not None and is_polyvariant_enum(cases)
		def build(subject):
			out = []
			for c in cases:
				if isinstance(c, Inherit):
					guard = contained_in(member(subject, "tag"), call(ederiver(self.tags, c.ref)))
					out.append(case(pclass("Tag"), engine.derive_type_ref(loc, engine.name, c.ref, c.args, subject), guard))
				else:
					out.append(self._tagged_case(engine, loc, "Tag", c, enum))
			out.append(self._mismatch(loc))
			return out
		return engine.scope.match(x, build)

	def tag_set(self, engine:Arity0, loc, cases, te):
		""" Every tag of an open sum, including those of the sums it includes """
		mine = etuple([const(c.name) for c in cases if isinstance(c, Construct)])
		theirs = [call(ederiver(engine.name, c.ref)) for c in cases if isinstance(c, Inherit)]
		if theirs: return method(call("frozenset", mine), "union", *theirs)
		return call("frozenset", mine)

	def type_decl(self, engine:Arity1, decl:TypeDecl) -> list[Unit]:
		if not decl.is_open_sum(): return engine.default_type_decl(decl)
		tags = Arity0(self.tags_hooks(), engine.scope)
		return tags.default_type_decl(decl) + engine.default_type_decl(decl)

def deriving_to(name:str, *, representation:str, of_tuple, of_record, of_variant_case, of_variant_case_record, of_enum_variant_case=None, prelude=(), known_as=None) -> Derivation:
	"""
	Callbacks get the location, a `derive(loc, type_expr, x)` function for the
	parts, the parts' types, and expressions for the parts, already bound:
		of_tuple(loc, derive, types, xs)
		of_record(loc, derive, fields, xs)
		of_variant_case(loc, attrs, derive, name, types, xs)
		of_variant_case_record(loc, attrs, derive, name, fields, xs)
		of_enum_variant_case(loc, attrs, name)  -- optional; for sums without payloads.
	"""
	encoder = Encoder(name, representation, of_tuple, of_record, of_variant_case, of_variant_case_record, of_enum_variant_case)
	return deriving1(encoder.hooks(), prelude, known_as)

###############################################################################
# Decoding

class Local(NamedTuple):
	""" A case the decoder recognizes directly """
	case: Union[TupleCase, RecordCase, Construct]
	make: Callable[[Optional[ast.expr]], ast.expr]

class Probe(NamedTuple):
	""" An included open sum, which gets a chance to recognize the input """
	fn: Callable[[ast.expr], ast.expr]

Alternative = Union[Local, Probe]

class Cascade(NamedTuple):
	"""
	Renders the alternatives as one conditional expression per case,
	each falling through to the next, and the last to the fallback.
		of_variant(loc, derive, body, x) -- wraps the cascade, typically binding names it uses.
		of_variant_case(loc, attrs, derive, make, name, types, next)
		of_variant_case_record(loc, attrs, derive, make, name, fields, next)
		of_enum_variant(loc, derive, body, x)  -- optional
		of_enum_variant_case(loc, attrs, make, name, next)  -- optional
	"""
	of_variant: Callable
	of_variant_case: Callable
	of_variant_case_record: Callable
	of_enum_variant: Optional[Callable] = None
	of_enum_variant_case: Optional[Callable] = None

	def render(self, engine:Arity1, loc, alternatives:Sequence[Alternative], x:ast.expr, fallback:ast.expr, enum:bool) -> ast.expr:
		derive = engine.derive_of_type_expr
		probing = any(isinstance(alt, Probe) for alt in alternatives)
		# Probes need the original input, which the callbacks' bindings could shadow.
		subject = name("_subject") if probing else x
		body = fallback
		for alt in reversed(alternatives):
			if isinstance(alt, Probe):
				body = present_or(alt.fn(subject), body)
			elif isinstance(alt.case, RecordCase):
				body = self.of_variant_case_record(loc, alt.case.attrs, derive, alt.make, alt.case.name, alt.case.fields, body)
			elif enum and self.of_enum_variant_case is not None:
				body = self.of_enum_variant_case(loc, alt.case.attrs, alt.make, alt.case.name, body)
			else:
				body = self.of_variant_case(loc, alt.case.attrs, derive, alt.make, alt.case.name, alt.case.types, body)
		wrap = self.of_enum_variant if enum and self.of_enum_variant is not None else self.of_variant
		expr = wrap(loc, derive, body, subject)
		return let_in(["_subject"], [x], expr) if probing else expr

class Match(NamedTuple):
	"""
	Renders the alternatives as the cases of one `match` statement,
	in the same order, with a catch-all case for the fallback.
		of_variant_case(loc, attrs, derive, make, name, types) -> match_case
		of_variant_case_record(loc, attrs, derive, make, name, fields) -> match_case
		of_enum_variant_case(loc, attrs, make, name) -> match_case  -- optional
	"""
	of_variant_case: Callable
	of_variant_case_record: Callable
	of_enum_variant_case: Optional[Callable] = None

	def render(self, engine:Arity1, loc, alternatives:Sequence[Alternative], x:ast.expr, fallback:ast.expr, enum:bool) -> ast.expr:
		derive = engine.derive_of_type_expr
		def build(subject):
			cases = []
			for alt in alternatives:
				if isinstance(alt, Probe):
					cases.append(case(pwild(), name("_r"), guard=is_present(alt.fn(subject))))
				elif isinstance(alt.case, RecordCase):
					cases.append(self.of_variant_case_record(loc, alt.case.attrs, derive, alt.make, alt.case.name, alt.case.fields))
				elif enum and self.of_enum_variant_case is not None:
					cases.append(self.of_enum_variant_case(loc, alt.case.attrs, alt.make, alt.case.name))
				else:
					cases.append(self.of_variant_case(loc, alt.case.attrs, derive, alt.make, alt.case.name, alt.case.types))
			cases.append(case(pwild(), fallback))
			return cases
		return engine.scope.match(x, build)

class Decoder:
	"""
	Hooks for an arity-one derivation from a representation to typed values.
	Tuples and records go straight to the callbacks. Sums go through the
	renderer, which is what distinguishes the two styles of decoder.
	"""
	def __init__(self, name:str, representation:str, of_tuple, of_record, renderer:Union[Cascade, Match], error):
		self.name = name
		self.poly = name + "_poly"
		self.representation = representation
		self._of_tuple = of_tuple
		self._of_record = of_record
		self.renderer = renderer
		self.error = error

	def hooks(self) -> Hooks1:
		return Hooks1(
			self.name, self.signature,
			of_tuple=self.tuple, of_record=self.record,
			of_variant=self.variant, of_polyvariant=self.polyvariant,
			type_decl=self.type_decl,
		)

	def signature(self, type_text:str):
		return self.representation, type_text

	def probe_signature(self, type_text:str):
		return self.representation, "Optional[%s]" % type_text

	def tuple(self, engine:Arity1, loc, types, x):
		return self._of_tuple(loc, engine.derive_of_type_expr, types, x)

	def record(self, engine:Arity1, loc, fields, x):
		return self._of_record(loc, engine.derive_of_type_expr, fields, x)

	def variant(self, engine:Arity1, loc, cases, x):
		alternatives = [Local(c, _maker("Case", c.name)) for c in cases]
		return self.renderer.render(engine, loc, alternatives, x, self.error(loc), is_variant_enum(cases))

	def alternatives(self, engine:Arity1, loc, cases) -> list[Alternative]:
		""" In declared order: that is the order of trying. """
		def probe(c:Inherit):
			return Probe(lambda x: engine.derive_type_ref(loc, self.poly, c.ref, c.args, x))
		return [probe(c) if isinstance(c, Inherit) else Local(c, _maker("Tag", c.name)) for c in cases]

	def polyvariant(self, engine:Arity1, loc, cases, te, x):
		alternatives = self.alternatives(engine, loc, cases)
		return self.renderer.render(engine, loc, alternatives, x, self.error(loc), is_polyvariant_enum(cases))

	def type_decl(self, engine:Arity1, decl:TypeDecl) -> list[Unit]:
		if not decl.is_open_sum(): return engine.default_type_decl(decl)
		loc, cases = decl.loc, decl.shape.type_expr.node.cases
		enum = is_polyvariant_enum(cases)
		def probe_body(x):
			return self.renderer.render(engine, loc, self.alternatives(engine, loc, cases), x, const(None), enum)
		def main_body(x):
			args = [te_var(p) for p in decl.params]
			return present_or(engine.derive_type_ref(loc, self.poly, (decl.name,), args, x), self.error(loc))
		probe_unit = engine.function_unit(decl, derive_of_label(self.poly, decl.name), probe_body, self.probe_signature)
		main_unit = engine.function_unit(decl, engine.label(decl.name), main_body)
		return [probe_unit, main_unit]

def deriving_of(name:str, *, representation:str, of_tuple, of_record, of_variant, of_variant_case, of_variant_case_record, error, of_enum_variant=None, of_enum_variant_case=None, prelude=(), known_as=None) -> Derivation:
	"""
	Decoders in cascade style. Tuples and records get the input expression:
		of_tuple(loc, derive, types, x)
		of_record(loc, derive, fields, x)
	For sums, see Cascade. The `make` function the case callbacks get
	builds the typed value from a payload expression, or None for no payload.
	The error(loc) callback gives an expression to evaluate when nothing fits.
	"""
	renderer = Cascade(of_variant, of_variant_case, of_variant_case_record, of_enum_variant, of_enum_variant_case)
	decoder = Decoder(name, representation, of_tuple, of_record, renderer, error)
	return deriving1(decoder.hooks(), prelude, known_as)

def deriving_of_match(name:str, *, representation:str, of_tuple, of_record, of_variant_case, of_variant_case_record, error, of_enum_variant_case=None, prelude=(), known_as=None) -> Derivation:
	""" Decoders in match style. Like deriving_of, but see Match. """
	renderer = Match(of_variant_case, of_variant_case_record, of_enum_variant_case)
	decoder = Decoder(name, representation, of_tuple, of_record, renderer, error)
	return deriving1(decoder.hooks(), prelude, known_as)

###############################################################################

class Combined(Derivation):
	""" Reflects once, then runs each constituent in turn. """
	def __init__(self, name:str, parts:Sequence[Derivation]):
		prelude = []
		for part in parts:
			prelude.extend(m for m in part.prelude if m not in prelude)
		super().__init__(name, None, prelude)
		self.parts = tuple(parts)

	def derive(self, decls:Sequence[TypeDecl]) -> list[Unit]:
		return [unit for part in self.parts for unit in part.derive(decls)]

	def extension(self, te:TypeExpression) -> Inline:
		raise CallbackNotProvided(te, "%s is a combination, which does not apply inline" % self.name)

def combined(name:str, *derivations:Derivation) -> Combined:
	return Combined(name, derivations)

###############################################################################

_registry : dict[str, Derivation] = {}

def register(derivation:Derivation) -> Derivation:
	known = _registry.setdefault(derivation.name, derivation)
	if known is not derivation:
		raise ValueError("A different derivation is already registered as %r" % derivation.name)
	return derivation

def lookup(name:str) -> Derivation:
	try: return _registry[name]
	except KeyError:
		raise KeyError("No derivation is called %r. Try one of: %s" % (name, ", ".join(registered()))) from None

def registered() -> list[str]:
	return sorted(_registry)
