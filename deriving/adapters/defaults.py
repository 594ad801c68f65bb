"""
A default value for each declared type: zeros, empty strings, and the first case of every sum.
Generated code star-imports this module for the default values of primitive types.
"""
from ..ontology import DerivationError
from ..shapes import Inherit, RecordCase
from ..engines import Hooks0
from ..combinators import deriving0, register
from ..helper import call, const, etuple, edict

__all__ = ["default_int", "default_float", "default_str", "default_bool", "default_list", "default_option"]

def default_int(): return 0
def default_float(): return 0.0
def default_str(): return ""
def default_bool(): return False
def default_list(default_a): return []
def default_option(default_a): return None

def _tuple(engine, loc, types):
	return etuple([engine.derive_of_type_expr(loc, t) for t in types])

def _record(engine, loc, fields):
	return edict((f.name, engine.derive_of_type_expr(loc, f.type_expr)) for f in fields)

def _first(constructor, engine, loc, c):
	if isinstance(c, RecordCase): return call(constructor, const(c.name), _record(engine, loc, c.fields))
	if c.types: return call(constructor, const(c.name), _tuple(engine, loc, c.types))
	return call(constructor, const(c.name))

def _variant(engine, loc, cases):
	if not cases: raise DerivationError(loc, "a sum without cases has no default")
	return _first("Case", engine, loc, cases[0])

def _polyvariant(engine, loc, cases, te):
	if not cases: raise DerivationError(loc, "a sum without cases has no default")
	c = cases[0]
	if isinstance(c, Inherit): return engine.derive_type_ref(loc, engine.name, c.ref, c.args)
	return _first("Tag", engine, loc, c)

default = register(deriving0(Hooks0(
	"default", lambda type_text: type_text,
	of_tuple=_tuple,
	of_record=_record,
	of_variant=_variant,
	of_polyvariant=_polyvariant,
), prelude=("deriving.adapters.defaults",)))
