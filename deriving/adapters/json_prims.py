"""
What code generated by the JSON derivations refers to, besides the runtime.
Generated modules star-import this, so mind __all__.

JSON here means what the standard `json` module reads and writes:
None, booleans, numbers, strings, lists, and dictionaries with string keys.
"""
from typing import Any, Optional, Union, Literal
from ..runtime import decode_error

__all__ = [
	"Any", "Optional", "Union", "Literal",
	"split_tag", "expect_array", "expect_object", "field",
	"to_json_int", "of_json_int", "json_type_int",
	"to_json_float", "of_json_float", "json_type_float",
	"to_json_str", "of_json_str", "json_type_str",
	"to_json_bool", "of_json_bool", "json_type_bool",
	"to_json_list", "of_json_list", "json_type_list",
	"to_json_option", "of_json_option", "json_type_option",
	"to_json_json", "of_json_json", "json_type_json",
]

Json = Union[None, bool, int, float, str, list, dict]

def split_tag(x) -> tuple[Optional[str], list]:
	"""
	A case is either "Name" alone, or a list beginning with "Name".
	Anything else has no tag, so it fits no case.
	"""
	if isinstance(x, str): return x, []
	if isinstance(x, list) and x and isinstance(x[0], str): return x[0], x[1:]
	return None, []

def expect_array(x, size:int) -> list:
	if isinstance(x, list) and len(x) == size: return x
	decode_error("expected an array of %d; got %r" % (size, x))

def expect_object(x) -> dict:
	if isinstance(x, dict): return x
	decode_error("expected an object; got %r" % (x,))

def field(x:dict, key:str):
	try: return x[key]
	except KeyError: decode_error("missing field %r" % key)

def _is_int(x): return isinstance(x, int) and not isinstance(x, bool)

def to_json_int(x:int):
	if _is_int(x): return x
	raise TypeError("not an int: %r" % (x,))

def of_json_int(x) -> int:
	if _is_int(x): return x
	decode_error("expected an integer; got %r" % (x,))

def to_json_float(x:float):
	if isinstance(x, float) or _is_int(x): return float(x)
	raise TypeError("not a float: %r" % (x,))

def of_json_float(x) -> float:
	if isinstance(x, float) or _is_int(x): return float(x)
	decode_error("expected a number; got %r" % (x,))

def to_json_str(x:str):
	if isinstance(x, str): return x
	raise TypeError("not a str: %r" % (x,))

def of_json_str(x) -> str:
	if isinstance(x, str): return x
	decode_error("expected a string; got %r" % (x,))

def to_json_bool(x:bool):
	if isinstance(x, bool): return x
	raise TypeError("not a bool: %r" % (x,))

def of_json_bool(x) -> bool:
	if isinstance(x, bool): return x
	decode_error("expected true or false; got %r" % (x,))

def to_json_list(to_json_a, x:list):
	if isinstance(x, list): return [to_json_a(item) for item in x]
	raise TypeError("not a list: %r" % (x,))

def of_json_list(of_json_a, x) -> list:
	if isinstance(x, list): return [of_json_a(item) for item in x]
	decode_error("expected an array; got %r" % (x,))

def to_json_option(to_json_a, x):
	return None if x is None else to_json_a(x)

def of_json_option(of_json_a, x):
	return None if x is None else of_json_a(x)

def to_json_json(x): return x
def of_json_json(x): return x

json_type_int = int
json_type_float = float
json_type_str = str
json_type_bool = bool
json_type_list = list
json_type_option = Optional
json_type_json = Json
