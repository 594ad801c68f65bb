"""
Conveniences for building generated code as Python `ast` nodes.

The engines use these, and so do the case-generation callbacks that
concrete derivations supply. Everything here builds fresh nodes;
nothing keeps state between calls.
"""
import ast
from typing import Optional, Sequence
from .ontology import SELF

def name(ident:str) -> ast.Name:
	return ast.Name(id=ident, ctx=ast.Load())

def const(value) -> ast.Constant:
	return ast.Constant(value=value)

def dotted(path:Sequence[str]) -> ast.expr:
	""" A possibly-qualified name, as `a.b.c` """
	expr = name(path[0])
	for part in path[1:]:
		expr = member(expr, part)
	return expr

def call(fn, *args:ast.expr) -> ast.Call:
	if isinstance(fn, str): fn = name(fn)
	return ast.Call(func=fn, args=list(args), keywords=[])

def method(receiver:ast.expr, selector:str, *args:ast.expr) -> ast.Call:
	return call(member(receiver, selector), *args)

def starred(x:ast.expr) -> ast.Starred:
	return ast.Starred(value=x, ctx=ast.Load())

def arguments(params:Sequence[str], annotations:Optional[Sequence[str]]=None) -> ast.arguments:
	annotations = annotations or [None] * len(params)
	return ast.arguments(
		posonlyargs=[],
		args=[ast.arg(arg=p, annotation=None if a is None else const(a)) for p, a in zip(params, annotations)],
		vararg=None, kwonlyargs=[], kw_defaults=[], kwarg=None, defaults=[],
	)

def lambda_(params:Sequence[str], body:ast.expr) -> ast.Lambda:
	return ast.Lambda(args=arguments(params), body=body)

def let_in(params:Sequence[str], values:Sequence[ast.expr], body:ast.expr) -> ast.Call:
	"""
	Bind fresh names for the duration of one expression: `(lambda p: body)(v)`.
	A starred value spreads over several parameters.
	"""
	return call(lambda_(params, body), *values)

def if_else(test:ast.expr, body:ast.expr, orelse:ast.expr) -> ast.IfExp:
	return ast.IfExp(test=test, body=body, orelse=orelse)

def equals(left:ast.expr, right:ast.expr) -> ast.Compare:
	return ast.Compare(left=left, ops=[ast.Eq()], comparators=[right])

def conjunction(*tests:ast.expr) -> ast.BoolOp:
	return ast.BoolOp(op=ast.And(), values=list(tests))

def contained_in(item:ast.expr, collection:ast.expr) -> ast.Compare:
	return ast.Compare(left=item, ops=[ast.In()], comparators=[collection])

def is_present(value:ast.expr, temp:str="_r") -> ast.Compare:
	""" `(temp := value) is not None` """
	probe = ast.NamedExpr(target=ast.Name(id=temp, ctx=ast.Store()), value=value)
	return ast.Compare(left=probe, ops=[ast.IsNot()], comparators=[const(None)])

def present_or(value:ast.expr, absent:ast.expr, temp:str="_r") -> ast.IfExp:
	""" `temp if (temp := value) is not None else absent`, which evaluates `value` once. """
	return if_else(is_present(value, temp), name(temp), absent)

def member(value:ast.expr, ident:str) -> ast.Attribute:
	return ast.Attribute(value=value, attr=ident, ctx=ast.Load())

def elist(xs:Sequence[ast.expr]) -> ast.List:
	return ast.List(elts=list(xs), ctx=ast.Load())

def etuple(xs:Sequence[ast.expr]) -> ast.Tuple:
	return ast.Tuple(elts=list(xs), ctx=ast.Load())

def edict(pairs) -> ast.Dict:
	""" From (key, expression) pairs, in order. Keys become string constants. """
	pairs = list(pairs)
	return ast.Dict(keys=[const(k) for k, _ in pairs], values=[v for _, v in pairs])

def subscript(value:ast.expr, index) -> ast.Subscript:
	if not isinstance(index, ast.expr): index = const(index)
	return ast.Subscript(value=value, slice=index, ctx=ast.Load())

def generic(head:ast.expr, args:Sequence[ast.expr]) -> ast.expr:
	""" Apply a generic type to arguments: `head[a]` or `head[a, b]`. """
	if not args: return head
	return subscript(head, args[0] if len(args) == 1 else etuple(args))

def returns(expr:ast.expr) -> list[ast.stmt]:
	return [ast.Return(value=expr)]

def raises(exception:str, message:str) -> list[ast.stmt]:
	return [ast.Raise(exc=call(exception, const(message)), cause=None)]

def function(ident:str, params:Sequence[str], body:list[ast.stmt], annotations=None, result:Optional[str]=None) -> ast.FunctionDef:
	return ast.FunctionDef(
		name=ident,
		args=arguments(params, annotations),
		body=body,
		decorator_list=[],
		returns=None if result is None else const(result),
		type_params=[],
	)

###############################################################################
# Patterns and match-cases

def pwild() -> ast.MatchAs:
	return ast.MatchAs(pattern=None, name=None)

def pcapture(ident:str) -> ast.MatchAs:
	return ast.MatchAs(pattern=None, name=ident)

def pvalue(value) -> ast.MatchValue:
	return ast.MatchValue(value=const(value))

def psequence(patterns:Sequence[ast.pattern]) -> ast.MatchSequence:
	return ast.MatchSequence(patterns=list(patterns))

def pmapping(keys:Sequence[str], patterns:Sequence[ast.pattern]) -> ast.MatchMapping:
	return ast.MatchMapping(keys=[const(k) for k in keys], patterns=list(patterns), rest=None)

def por(*patterns:ast.pattern) -> ast.MatchOr:
	return ast.MatchOr(patterns=list(patterns))

def pclass(cls:str, *patterns:ast.pattern, **keywords:ast.pattern) -> ast.MatchClass:
	return ast.MatchClass(cls=name(cls), patterns=list(patterns), kwd_attrs=list(keywords), kwd_patterns=list(keywords.values()))

def case(pattern:ast.pattern, expr:ast.expr, guard:Optional[ast.expr]=None) -> ast.match_case:
	""" The usual kind of match-case, which returns the value of one expression. """
	return ast.match_case(pattern=pattern, guard=guard, body=returns(expr))

def match(subject:ast.expr, cases:Sequence[ast.match_case]) -> ast.Match:
	return ast.Match(subject=subject, cases=list(cases))

###############################################################################
# Fresh names for the parts of a value

def gen_bindings(prefix:str, n:int) -> tuple[list[str], list[ast.expr]]:
	idents = ["%s_%d" % (prefix, i) for i in range(n)]
	return idents, [name(i) for i in idents]

def gen_pat_tuple(prefix:str, n:int) -> tuple[ast.pattern, list[ast.expr]]:
	""" A pattern matching a sequence of size n, and expressions for the names it binds. """
	idents, exprs = gen_bindings(prefix, n)
	return psequence([pcapture(i) for i in idents]), exprs

def gen_pat_record(prefix:str, fields) -> tuple[ast.pattern, list[ast.expr]]:
	""" A pattern matching a record with these fields, and expressions for the names it binds. """
	idents = ["%s_%s" % (prefix, f.name) for f in fields]
	pattern = pmapping([f.name for f in fields], [pcapture(i) for i in idents])
	return pattern, [name(i) for i in idents]

###############################################################################
# The naming contract

def derive_of_label(derivation:str, label:str) -> str:
	"""
	derive_of_label("json", "t") is just "json";
	derive_of_label("json", "point") is "json_point".
	"""
	if label == SELF.text: return derivation
	return "%s_%s" % (derivation, label)

def derive_of_longident(derivation:str, path:Sequence[str]) -> tuple[str, ...]:
	""" Qualified names keep their qualifier. """
	return tuple(path[:-1]) + (derive_of_label(derivation, path[-1]),)

def ederiver(derivation:str, path:Sequence[str]) -> ast.expr:
	return dotted(derive_of_longident(derivation, path))
