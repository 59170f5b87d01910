import unittest

from artefact.core.field import FieldBuilder, field
from artefact.core.types import FieldType


class TestFieldBuilder(unittest.TestCase):

    def test_one_constructor_per_type(self):
        for ftype in FieldType:
            with self.subTest(type=ftype):
                prop = getattr(field, ftype.value)("col")
                self.assertEqual(prop.type, ftype)
                self.assertEqual(prop.name, "col")
                self.assertIsNone(prop.config)
                self.assertFalse(prop.has_default)

    def test_config_is_kept(self):
        config = {"mode": "timestamp"}
        self.assertEqual(field.integer("ts", config).config, config)

    def test_each_call_returns_a_fresh_property(self):
        a = field.text("c").unique()
        b = field.text("c")
        self.assertTrue(a.is_unique)
        self.assertFalse(b.is_unique)

    def test_make_accepts_type_names(self):
        prop = FieldBuilder.make("text", "c")
        self.assertEqual(prop.type, FieldType.text)

    def test_from_typename(self):
        self.assertIs(FieldType.from_typename("json"), FieldType.json)
        self.assertEqual(str(FieldType.enum), "enum")
        with self.assertRaises(ValueError):
            FieldType.from_typename("uuid")


if __name__ == '__main__':
    unittest.main()
