"""
From generated units to a Python module: as a tree, as text, or as a namespace.
A diagnostic in the output becomes a statement which raises GenerationFailed,
so a module derived from a bad batch cannot be used by accident.
"""
import ast
from typing import Sequence, Optional
from .engines import Unit, Diagnostic, Output
from .helper import call, const

RUNTIME = "deriving.runtime"

def _star_import(module:str) -> ast.ImportFrom:
	return ast.ImportFrom(module=module, names=[ast.alias(name="*", asname=None)], level=0)

def _statement(item:Output) -> ast.stmt:
	if isinstance(item, Unit): return item.node
	assert isinstance(item, Diagnostic), item
	return ast.Raise(exc=call("GenerationFailed", const(str(item))), cause=None)

def module(outputs:Sequence[Output], preludes:Sequence[str]=()) -> ast.Module:
	imports = [RUNTIME] + [p for p in dict.fromkeys(preludes) if p != RUNTIME]
	body = [_star_import(m) for m in imports] + [_statement(item) for item in outputs]
	return ast.fix_missing_locations(ast.Module(body=body, type_ignores=[]))

def render(outputs:Sequence[Output], preludes:Sequence[str]=()) -> str:
	return ast.unparse(module(outputs, preludes))

def materialize(outputs:Sequence[Output], preludes:Sequence[str]=(), namespace:Optional[dict]=None, filename="<derived>") -> dict:
	""" Compile and run the generated module in the given (or a fresh) namespace, and return that. """
	namespace = {} if namespace is None else namespace
	exec(compile(module(outputs, preludes), filename, "exec"), namespace)
	return namespace
