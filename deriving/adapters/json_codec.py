"""
JSON encoders, decoders, and shadow types, by way of the combinators.

The representation:
	Tuples are arrays, in order.
	Records are objects, in field order. Attribute "json.key" renames a field.
	A case with a payload is an array: the tag, then the payload.
	A case with named fields is an array: the tag, then an object.
	In a sum where no case has a payload, each case is just its tag.
	Attribute "json.name" renames a tag.

Importing this module registers to_json, of_json, of_json_match, json, and json_type.
"""
from ..syntax import attribute
from ..shapes import Construct, Inherit, RecordCase, is_variant_enum, is_polyvariant_enum
from ..engines import TypeHooks
from ..combinators import deriving_to, deriving_of, deriving_of_match, deriving_type, combined, register, describe
from ..helper import (
	name, const, call, subscript, generic, starred, elist, etuple, edict, let_in, if_else, equals, conjunction,
	case, pvalue, pcapture, psequence, pclass, por, gen_bindings,
)

PRELUDE = ("deriving.adapters.json_prims",)

def json_key(f) -> str:
	return attribute(f.attrs, "json.key", f.name)

def json_tag(attrs, case_name:str) -> str:
	return attribute(attrs, "json.name", case_name)

###############################################################################
# Encoding

def _encode_tuple(loc, derive, types, xs):
	return elist([derive(loc, t, x) for t, x in zip(types, xs)])

def _encode_fields(loc, derive, fields, xs):
	return edict((json_key(f), derive(loc, f.type_expr, x)) for f, x in zip(fields, xs))

def _encode_case(loc, attrs, derive, case_name, types, xs):
	return elist([const(json_tag(attrs, case_name)), *(derive(loc, t, x) for t, x in zip(types, xs))])

def _encode_case_record(loc, attrs, derive, case_name, fields, xs):
	return elist([const(json_tag(attrs, case_name)), _encode_fields(loc, derive, fields, xs)])

def _encode_enum_case(loc, attrs, case_name):
	return const(json_tag(attrs, case_name))

to_json = register(deriving_to(
	"to_json", representation="Json",
	of_tuple=_encode_tuple,
	of_record=_encode_fields,
	of_variant_case=_encode_case,
	of_variant_case_record=_encode_case_record,
	of_enum_variant_case=_encode_enum_case,
	prelude=PRELUDE,
))

###############################################################################
# Decoding, in either style. Tuples and records decode the same way in both.

def _decode_tuple(loc, derive, types, x):
	elements = [derive(loc, t, subscript(name("x"), i)) for i, t in enumerate(types)]
	return let_in(["x"], [call("expect_array", x, const(len(types)))], etuple(elements))

def _decode_record(loc, derive, fields, x):
	values = [(f.name, derive(loc, f.type_expr, call("field", name("x"), const(json_key(f))))) for f in fields]
	return let_in(["x"], [call("expect_object", x)], edict(values))

def _error(loc):
	return call("decode_error", const("invalid JSON for %s" % describe(loc)))

def _decode_variant(loc, derive, body, x):
	return let_in(["tag", "args"], [starred(call("split_tag", x))], body)

def _fits(attrs, case_name, size):
	""" The tag is right and so is the number of things after it. """
	return conjunction(
		equals(name("tag"), const(json_tag(attrs, case_name))),
		equals(call("len", name("args")), const(size)),
	)

def _decode_case(loc, attrs, derive, make, case_name, types, next_case):
	payload = etuple([derive(loc, t, subscript(name("args"), i)) for i, t in enumerate(types)])
	return if_else(_fits(attrs, case_name, len(types)), make(payload if types else None), next_case)

def _decode_case_record(loc, attrs, derive, make, case_name, fields, next_case):
	value = make(_decode_record(loc, derive, fields, subscript(name("args"), 0)))
	return if_else(_fits(attrs, case_name, 1), value, next_case)

of_json = register(deriving_of(
	"of_json", representation="Json",
	of_tuple=_decode_tuple,
	of_record=_decode_record,
	of_variant=_decode_variant,
	of_variant_case=_decode_case,
	of_variant_case_record=_decode_case_record,
	error=_error,
	prelude=PRELUDE,
))

def _array(*patterns):
	""" Patterns for JSON arrays, which are lists and never tuples """
	return pclass("list", psequence(patterns))

def _match_case(loc, attrs, derive, make, case_name, types):
	tag = json_tag(attrs, case_name)
	if not types:
		return case(por(pvalue(tag), _array(pvalue(tag))), make(None))
	idents, xs = gen_bindings("x", len(types))
	pattern = _array(pvalue(tag), *map(pcapture, idents))
	return case(pattern, make(etuple([derive(loc, t, x) for t, x in zip(types, xs)])))

def _match_case_record(loc, attrs, derive, make, case_name, fields):
	pattern = _array(pvalue(json_tag(attrs, case_name)), pcapture("fields"))
	return case(pattern, make(_decode_record(loc, derive, fields, name("fields"))))

of_json_match = register(deriving_of_match(
	"of_json", representation="Json",
	of_tuple=_decode_tuple,
	of_record=_decode_record,
	of_variant_case=_match_case,
	of_variant_case_record=_match_case_record,
	error=_error,
	prelude=PRELUDE,
	known_as="of_json_match",
))

json = register(combined("json", to_json, of_json))

###############################################################################
# Shadow types: what the JSON for each declaration looks like.

def _union(members):
	members = list(members)
	if not members: return name("Any")
	if len(members) == 1: return members[0]
	return subscript(name("Union"), etuple(members))

def _literal(tags):
	return subscript(name("Literal"), etuple([const(t) for t in tags]))

def _type_tuple(engine, loc, types):
	return generic(name("list"), [_union(engine.derive_of_type_expr(loc, t) for t in types)])

def _type_record(engine, loc, fields):
	return generic(name("dict"), [name("str"), _union(engine.derive_of_type_expr(loc, f.type_expr) for f in fields)])

def _payload_types(engine, loc, c):
	if isinstance(c, RecordCase): return [_type_record(engine, loc, c.fields)]
	return [engine.derive_of_type_expr(loc, t) for t in c.types]

def _tagged(engine, loc, cases):
	""" Array-shaped cases: a tag, then whatever payloads there are """
	tags = _literal([json_tag(c.attrs, c.name) for c in cases])
	payloads = [t for c in cases for t in _payload_types(engine, loc, c)]
	return generic(name("list"), [_union([tags, *payloads])])

def _cases(engine, loc, cases, enum:bool):
	if enum: return _literal([json_tag(c.attrs, c.name) for c in cases])
	return _tagged(engine, loc, cases)

def _type_variant(engine, loc, cases):
	return _cases(engine, loc, cases, is_variant_enum(cases))

def _type_polyvariant(engine, loc, cases):
	local = [c for c in cases if isinstance(c, Construct)]
	members = [engine.derive_type_ref(loc, engine.name, c.ref, c.args) for c in cases if isinstance(c, Inherit)]
	if local:
		members.insert(0, _cases(engine, loc, local, is_polyvariant_enum(cases)))
	return _union(members)

json_type = register(deriving_type(TypeHooks(
	"json_type",
	of_tuple=_type_tuple,
	of_record=_type_record,
	of_variant=_type_variant,
	of_polyvariant=_type_polyvariant,
), prelude=PRELUDE))
