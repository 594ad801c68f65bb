import unittest

from deriving import emit
from deriving.runtime import Case, Tag, DecodeError
from deriving.adapters.json_codec import to_json, of_json, of_json_match, json_type

from specimens import *

def _load(*derivations, batch=None):
	batch = good_batch() if batch is None else batch
	outputs = [item for d in derivations for item in d.generate(batch)]
	preludes = [m for d in derivations for m in d.prelude]
	return emit.materialize(outputs, preludes)

CASCADE = _load(to_json, of_json)
MATCH = _load(to_json, of_json_match)
STYLES = {"cascade": CASCADE, "match": MATCH}

SAMPLES = {
	"point": [{"x": 1, "y": 2}],
	"shape": [Case("Circle", (1.5,)), Case("Rect", {"w": 1.0, "h": 2.0}), Case("Empty")],
	"color": [Case("Red"), Case("Green"), Case("Blue")],
	"pair": [(1, "one")],
	"person": [{"name": "Ada", "age": 36}, {"name": "Bob", "age": None}],
	"crate": [{"boxes": [{"contents": (1, "a")}, {"contents": (2, "b")}], "corner": (3, ("c", 4.5))}],
	"other": [Tag("Cyan"), Tag("Magenta")],
	"hue": [Tag("Red"), Tag("Cyan"), Tag("Amber", (7,))],
	"a": [Tag("a1"), Tag("b1"), Tag("a2")],
	"c": [Tag("b1"), Tag("d1")],
	"palette": [{"main": Tag("Dark"), "count": 1}, {"main": Tag("Magenta"), "count": 2}],
}

class RoundTripTests(unittest.TestCase):
	""" Decoding what was encoded gives back the original, in either style. """

	def test_declarations(self):
		for style, ns in STYLES.items():
			for type_name, values in SAMPLES.items():
				encode, decode = ns["to_json_"+type_name], ns["of_json_"+type_name]
				for value in values:
					with self.subTest(style=style, value=value):
						self.assertEqual(value, decode(encode(value)))

	def test_generic_declaration(self):
		for style, ns in STYLES.items():
			with self.subTest(style):
				value = {"contents": (5, "five")}
				encoded = ns["to_json_box"](ns["to_json_pair"], value)
				self.assertEqual({"contents": [5, "five"]}, encoded)
				self.assertEqual(value, ns["of_json_box"](ns["of_json_pair"], encoded))

	def test_self_type(self):
		tree = Case("Node", (Case("Leaf"), 1, Case("Node", (Case("Leaf"), 2, Case("Leaf")))))
		for style, ns in STYLES.items():
			with self.subTest(style):
				self.assertEqual(tree, ns["of_json"](ns["to_json"](tree)))

class RepresentationTests(unittest.TestCase):
	""" What the JSON actually looks like """

	def test_records_follow_declared_field_order(self):
		encoded = CASCADE["to_json_point"]({"y": 2, "x": 1})
		self.assertEqual(["x", "y"], list(encoded))

	def test_cases(self):
		encode = CASCADE["to_json_shape"]
		self.assertEqual(["Circle", 1.5], encode(Case("Circle", (1.5,))))
		self.assertEqual(["Rect", {"w": 1.0, "h": 2.0}], encode(Case("Rect", {"w": 1.0, "h": 2.0})))
		self.assertEqual(["Empty"], encode(Case("Empty")))

	def test_enumerations_are_bare_tags(self):
		self.assertEqual("Red", CASCADE["to_json_color"](Case("Red")))
		self.assertEqual("Cyan", CASCADE["to_json_hue"](Tag("Cyan")))
		self.assertEqual(["Red"], CASCADE["to_json_hue"](Tag("Red")))

	def test_renaming_attributes(self):
		self.assertEqual("blue", CASCADE["to_json_color"](Case("Blue")))
		self.assertEqual({"Name": "Ada", "age": None}, CASCADE["to_json_person"]({"name": "Ada", "age": None}))
		for style, ns in STYLES.items():
			with self.subTest(style):
				self.assertEqual(Case("Blue"), ns["of_json_color"]("blue"))
				with self.assertRaises(DecodeError):
					ns["of_json_color"]("Blue")

	def test_tuples_are_arrays(self):
		self.assertEqual([3, ["c", 4.5]], CASCADE["to_json_crate"]({"boxes": [], "corner": (3, ("c", 4.5))})["corner"])

	def test_wrong_shape_for_encoder(self):
		for type_name, bogus in [("point", "nope"), ("shape", Case("Square", (1,))), ("pair", 7), ("hue", Tag("Blue"))]:
			with self.subTest(type_name):
				with self.assertRaises(TypeError):
					CASCADE["to_json_"+type_name](bogus)

class OpenSumTests(unittest.TestCase):
	""" Probing included sums in declared order """

	def test_declared_order(self):
		for style, ns in STYLES.items():
			with self.subTest(style):
				self.assertEqual(Tag("a2"), ns["of_json_a"]("a2"))
				self.assertEqual(Tag("b1"), ns["of_json_a"]("b1"))

	def test_failed_probe_does_not_interfere(self):
		for style, ns in STYLES.items():
			with self.subTest(style):
				self.assertIsNone(ns["of_json_poly_b"]("d1"))
				self.assertEqual(Tag("d1"), ns["of_json_c"]("d1"))

	def test_first_match_wins(self):
		for style, ns in STYLES.items():
			with self.subTest(style):
				self.assertEqual(Tag("b1"), ns["of_json_e"]("b1"))
				self.assertEqual(Tag("b1", (3,)), ns["of_json_e"](["b1", 3]))

	def test_unknown_tag(self):
		for style, ns in STYLES.items():
			for type_name in "a", "hue", "palette":
				with self.subTest(style=style, type_name=type_name):
					with self.assertRaises(DecodeError):
						ns["of_json_"+type_name]({"main": "Blue", "count": 1} if type_name == "palette" else "Blue")
				self.assertIsNone(ns["of_json_poly_hue"]("Blue"))

	def test_tag_sets(self):
		self.assertEqual(frozenset({"Red", "Amber", "Cyan", "Magenta"}), CASCADE["to_json_tags_hue"]())

	def test_failures_name_the_declaration(self):
		with self.assertRaisesRegex(TypeError, "not a value of hue"):
			CASCADE["to_json_hue"](Tag("Blue"))
		for style, ns in STYLES.items():
			with self.subTest(style):
				with self.assertRaisesRegex(DecodeError, "invalid JSON for hue"):
					ns["of_json_hue"]("Blue")
				with self.assertRaisesRegex(DecodeError, "invalid JSON for an inline type"):
					ns["of_json_palette"]({"main": "Blue", "count": 1})

GENERIC = [
	alias("f", poly(ptag("F", var("a")), ptag("G")), params=["a"]),
	alias("h", poly(ptag("H"), inherit(ref("f", INT)))),
]

SELF_NAMED = [
	alias("b", poly(ptag("b1"))),
	alias("t", poly(ptag("Leaf"), inherit(ref("b")), ptag("Node", me(), INT))),
]

class IncludedSumTests(unittest.TestCase):
	""" Including a generic open sum, and an open sum going by the self name """

	def test_generic_inclusion(self):
		cascade = _load(to_json, of_json, batch=GENERIC)
		match = _load(to_json, of_json_match, batch=GENERIC)
		self.assertEqual(frozenset({"H", "F", "G"}), cascade["to_json_tags_h"]())
		self.assertEqual(["F", 3], cascade["to_json_h"](Tag("F", (3,))))
		for style, ns in {"cascade": cascade, "match": match}.items():
			for value in Tag("H"), Tag("F", (3,)), Tag("G"):
				with self.subTest(style=style, value=value):
					self.assertEqual(value, ns["of_json_h"](ns["to_json_h"](value)))
			with self.subTest(style=style):
				self.assertEqual(Tag("F", (4,)), ns["of_json_poly_f"](ns["of_json_int"], ["F", 4]))
				with self.assertRaises(DecodeError):
					ns["of_json_h"](["F", "three"])

	def test_self_named_open_sum(self):
		self.assertEqual(
			["of_json_poly_b", "of_json_b", "of_json_poly", "of_json"],
			[unit.name for unit in of_json.generate(SELF_NAMED)],
		)
		self.assertEqual(
			["to_json_tags_b", "to_json_b", "to_json_tags", "to_json"],
			[unit.name for unit in to_json.generate(SELF_NAMED)],
		)
		cascade = _load(to_json, of_json, batch=SELF_NAMED)
		match = _load(to_json, of_json_match, batch=SELF_NAMED)
		self.assertEqual(frozenset({"Leaf", "b1", "Node"}), cascade["to_json_tags"]())
		tree = Tag("Node", (Tag("Node", (Tag("b1"), 1)), 2))
		for style, ns in {"cascade": cascade, "match": match}.items():
			for value in Tag("Leaf"), Tag("b1"), tree:
				with self.subTest(style=style, value=value):
					self.assertEqual(value, ns["of_json"](ns["to_json"](value)))
			with self.subTest(style=style):
				self.assertIsNone(ns["of_json_poly"](["Node"]))

class MalformedInputTests(unittest.TestCase):
	""" Bad JSON makes a DecodeError, whichever the style. """

	def test_malformed(self):
		for type_name, bogus in [
			("point", [1, 2]),
			("point", {"x": 1}),
			("point", {"x": "1", "y": 2}),
			("shape", ["Circle"]),
			("shape", ["Circle", 1.0, 2.0]),
			("shape", ["Rect", [1.0, 2.0]]),
			("shape", {"Circle": 1.0}),
			("shape", ["Hexagon"]),
			("pair", [1]),
			("pair", "1,one"),
			("color", ["Red", 1]),
		]:
			for style, ns in STYLES.items():
				with self.subTest(style=style, type_name=type_name, bogus=bogus):
					with self.assertRaises(DecodeError):
						ns["of_json_"+type_name](bogus)

def _outcome(decode, data):
	try: return decode(data)
	except DecodeError: return DecodeError

class AgreementTests(unittest.TestCase):
	""" The two styles of decoder accept and reject exactly the same things. """

	def check(self, type_name, inputs):
		for data in inputs:
			with self.subTest(type_name=type_name, data=data):
				self.assertEqual(_outcome(CASCADE[type_name], data), _outcome(MATCH[type_name], data))

	def test_closed_sums(self):
		self.check("of_json_shape", [
			["Circle", 1.5], ("Circle", 1.5), "Empty", ["Empty"], ("Empty",),
			["Rect", {"w": 1.0, "h": 2.0}], ("Rect", {"w": 1.0, "h": 2.0}),
			{"Circle": 1.0}, 5, None, [], [1.5, "Circle"],
		])
		self.check("of_json_color", ["Red", ["Red"], ("Red",), ["Red", 1], 0])

	def test_tuples_are_never_arrays(self):
		for style, ns in STYLES.items():
			with self.subTest(style):
				with self.assertRaises(DecodeError):
					ns["of_json_shape"](("Circle", 1.5))
				with self.assertRaises(DecodeError):
					ns["of_json_pair"]((1, "one"))

	def test_probes_decline_what_is_not_a_tag(self):
		self.check("of_json_poly_b", [5, None, {"b1": 1}, ("b1",), ["b1"], "b1", ["b1", 3], [3, "b1"]])
		for style, ns in STYLES.items():
			with self.subTest(style):
				self.assertIsNone(ns["of_json_poly_b"](5))
				self.assertIsNone(ns["of_json_poly_hue"]({"Red": []}))

class ShadowTypeTests(unittest.TestCase):

	def test_shadow_types(self):
		from typing import Union, Literal
		ns = _load(json_type)
		self.assertEqual(dict[str, int], ns["json_type_point"].__value__)
		self.assertEqual(Literal["Red", "Green", "blue"], ns["json_type_color"].__value__)
		self.assertEqual(list[Union[int, str]], ns["json_type_pair"].__value__)
		self.assertEqual(("a",), tuple(p.__name__ for p in ns["json_type_box"].__type_params__))

if __name__ == '__main__':
	unittest.main()
