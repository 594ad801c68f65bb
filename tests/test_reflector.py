import unittest

from deriving import syntax, shapes
from deriving.ontology import Nom
from deriving.reflector import UnsupportedShape, of_type_definition, of_type_expression, reflect_batch
from deriving.engines import Diagnostic
from deriving.adapters.json_codec import json, to_json

from specimens import *

class ReflectionTests(unittest.TestCase):
	""" What comes out of the reflector for what goes in """

	def test_record_keeps_field_order(self):
		decl = of_type_definition(record("point", fld("y", INT), fld("x", INT)))
		self.assertIsInstance(decl.shape, shapes.RecordShape)
		self.assertEqual(["y", "x"], [f.name for f in decl.shape.fields])
		self.assertEqual(shapes.Opaque(("int",), ()), decl.shape.fields[0].type_expr.node)

	def test_variant_cases(self):
		decl = of_type_definition(variant("shape", tag("Circle", FLOAT), rtag("Rect", fld("w", FLOAT)), enum("Empty")))
		circle, rect, empty = decl.shape.cases
		self.assertIsInstance(circle, shapes.TupleCase)
		self.assertEqual(1, len(circle.types))
		self.assertIsInstance(rect, shapes.RecordCase)
		self.assertEqual(("w",), tuple(f.name for f in rect.fields))
		self.assertEqual(shapes.TupleCase("Empty", (), ()), empty)

	def test_self_reference_resolves_to_enclosing_declaration(self):
		decl = of_type_definition(variant("tree", enum("Leaf"), tag("Node", me(), me())))
		for te in decl.shape.cases[1].types:
			self.assertEqual(shapes.Opaque(("tree",), ()), te.node)

	def test_parameters_and_variables(self):
		decl = of_type_definition(record("box", fld("contents", var("a")), params=["a"]))
		self.assertEqual(("a",), decl.params)
		self.assertEqual(shapes.Var("a"), decl.shape.fields[0].type_expr.node)

	def test_qualified_reference(self):
		te = of_type_expression(ref("geometry.vector", INT))
		self.assertEqual(("geometry", "vector"), te.node.ref)
		self.assertEqual(shapes.Opaque(("int",), ()), te.node.args[0].node)

	def test_open_sum_declaration(self):
		decl = of_type_definition(alias("hue", poly(ptag("Red"), inherit(ref("other")), ptag("Amber", INT))))
		self.assertTrue(decl.is_open_sum())
		red, other, amber = decl.shape.type_expr.node.cases
		self.assertEqual(shapes.Construct("Red", (), ()), red)
		self.assertEqual(shapes.Inherit(("other",), ()), other)
		self.assertEqual(1, len(amber.types))

	def test_plain_alias_is_not_an_open_sum(self):
		self.assertFalse(of_type_definition(alias("pair", tup(INT, STR))).is_open_sum())

	def test_reflection_is_deterministic(self):
		batch = good_batch()
		self.assertEqual(reflect_batch(batch), reflect_batch(batch))

class RejectionTests(unittest.TestCase):
	""" Every shape the engines cannot model gets its own complaint. """

	def expect(self, category, decl):
		with self.assertRaises(UnsupportedShape) as cm:
			of_type_definition(decl)
		self.assertEqual(category, cm.exception.category)
		self.assertEqual(category + " are not supported", cm.exception.message)

	def test_type_expressions(self):
		for category, te in [
			("function types", syntax.ArrowSpec([INT], STR)),
			("type placeholders", syntax.FreeType(Nom("_"))),
			("object types", syntax.ObjectSpec(Nom("<"), [])),
			("class types", syntax.ClassSpec(syntax.PlainReference(Nom("widget")))),
			("polymorphic type expressions", syntax.ForAllSpec([Nom("a")], var("a"))),
			("packaged module types", syntax.PackageSpec(syntax.PlainReference(Nom("S")))),
			("extension nodes", syntax.ExtensionSpec(Nom("ext"))),
			("type aliases", syntax.AliasSpec(INT, Nom("a"))),
			("non closed polyvariants", poly(ptag("A"), closed=False)),
			("non closed polyvariants", poly(ptag("A"), lower=[Nom("A")])),
			("this polyvariant inherit", poly(inherit(tup(INT, INT)))),
		]:
			with self.subTest(category):
				self.expect(category, record("wrapper", fld("inside", te)))

	def test_declarations(self):
		self.expect("abstract types", syntax.OpaqueSymbol(Nom("secret"), ()))
		self.expect("open types", syntax.OpenSymbol(Nom("extensible"), ()))
		self.expect("duplicated type parameters", record("twice", fld("x", var("a")), params=["a", "a"]))
		self.expect("unbound type variables", record("loose", fld("x", var("b")), params=["a"]))

	def test_nested_rejection_is_found(self):
		self.expect("function types", variant("deep", tag("Case", tup(INT, syntax.ArrowSpec([INT], INT)))))

	def test_bare_self_reference(self):
		with self.assertRaises(UnsupportedShape):
			of_type_expression(me())

	def test_batch_failure_is_one_diagnostic(self):
		for derivation in to_json, json:
			with self.subTest(derivation.name):
				outputs = derivation.generate(BAD)
				self.assertEqual(1, len(outputs))
				self.assertIsInstance(outputs[0], Diagnostic)
				self.assertEqual("function types are not supported", outputs[0].message)

class EnumerationTests(unittest.TestCase):
	""" A sum is enumerated exactly when no case carries anything. """

	def test_variants(self):
		bare, full = shapes.TupleCase("A", (), ()), shapes.TupleCase("B", (), (shapes.te_var("a"),))
		no_fields = shapes.RecordCase("C", (), ())
		self.assertTrue(shapes.is_variant_enum([bare, no_fields]))
		self.assertFalse(shapes.is_variant_enum([bare, full]))
		self.assertTrue(shapes.is_variant_enum([]))

	def test_polyvariants(self):
		bare, full = shapes.Construct("A", (), ()), shapes.Construct("B", (), (shapes.te_var("a"),))
		plain, applied = shapes.Inherit(("x",), ()), shapes.Inherit(("y",), (shapes.te_var("a"),))
		self.assertTrue(shapes.is_polyvariant_enum([bare, plain]))
		self.assertFalse(shapes.is_polyvariant_enum([bare, applied]))
		self.assertFalse(shapes.is_polyvariant_enum([full, plain]))

if __name__ == '__main__':
	unittest.main()
