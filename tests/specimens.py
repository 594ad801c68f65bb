"""
Declarations for the tests to chew on, built the way a front end would build them.
"""
from deriving.ontology import Nom
from deriving import syntax

def ref(text, *args):
	*space, last = text.split(".")
	if space: r = syntax.QualifiedReference(Nom(last), [Nom(s) for s in space])
	else: r = syntax.PlainReference(Nom(last))
	return syntax.TypeCall(r, args)

def me(*args): return syntax.TypeCall(syntax.SelfReference(Nom("t")), args)
def var(a): return syntax.TypeVariable(Nom(a))
def tup(*members): return syntax.TupleSpec(members)
def attr(key, payload=None): return syntax.Attribute(Nom(key), payload)
def fld(name, te, *attrs): return syntax.FieldDefinition(Nom(name), te, attrs)

def _params(params): return [Nom(p) for p in params]

def record(name, *fields, params=()):
	return syntax.RecordSymbol(Nom(name), _params(params), syntax.RecordSpec(fields))

def alias(name, te, params=()):
	return syntax.TypeAliasSymbol(Nom(name), _params(params), te)

def variant(name, *cases, params=()):
	return syntax.VariantSymbol(Nom(name), _params(params), cases)

def enum(name, *attrs): return syntax.EnumTag(Nom(name), attrs)
def tag(name, *types): return syntax.TupleTag(Nom(name), types)
def rtag(name, *fields): return syntax.RecordTag(Nom(name), syntax.RecordSpec(fields))

def poly(*fields, closed=True, lower=None): return syntax.PolyVariantSpec(Nom("["), fields, closed, lower)
def ptag(name, *types, attrs=()): return syntax.PolyTag(Nom(name), types, attrs)
def inherit(te): return syntax.PolyInherit(te)

INT, FLOAT, STR = ref("int"), ref("float"), ref("str")

def good_batch():
	""" Fresh declarations for every test that wants them """
	return [
		record("point", fld("x", INT), fld("y", INT)),
		variant("shape", tag("Circle", FLOAT), rtag("Rect", fld("w", FLOAT), fld("h", FLOAT)), enum("Empty")),
		variant("color", enum("Red"), enum("Green"), enum("Blue", attr("json.name", "blue"))),
		alias("pair", tup(INT, STR)),
		record("box", fld("contents", var("a")), params=["a"]),
		record("person", fld("name", STR, attr("json.key", "Name")), fld("age", ref("option", INT))),
		variant("t", enum("Leaf"), tag("Node", me(), INT, me())),
		record("crate", fld("boxes", ref("list", ref("box", ref("pair")))), fld("corner", tup(INT, tup(STR, FLOAT)))),
		alias("other", poly(ptag("Cyan"), ptag("Magenta"))),
		alias("hue", poly(ptag("Red"), inherit(ref("other")), ptag("Amber", INT))),
		alias("a", poly(ptag("a1"), inherit(ref("b")), ptag("a2"))),
		alias("b", poly(ptag("b1"))),
		alias("c", poly(inherit(ref("b")), inherit(ref("d")))),
		alias("d", poly(ptag("d1"))),
		alias("e", poly(inherit(ref("b")), ptag("b1", INT))),
		record("palette", fld("main", poly(ptag("Dark"), inherit(ref("other")))), fld("count", INT)),
	]

GOOD = good_batch()

BAD = [
	record("point", fld("x", INT), fld("y", INT)),
	record("handler", fld("callback", syntax.ArrowSpec([INT], STR))),
]
