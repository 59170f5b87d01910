import datetime
import unittest

from sqlalchemy.dialects import sqlite

from artefact.core.sqltypes import EnumCode, JSONText, Timestamp

dialect = sqlite.dialect()
UTC = datetime.timezone.utc


class TestTimestamp(unittest.TestCase):

    def setUp(self):
        self.type = Timestamp()

    def test_bind(self):
        self.assertEqual(self.type.process_bind_param(10, dialect), 10)
        self.assertEqual(self.type.process_bind_param(datetime.datetime(1970, 1, 1, 0, 1, tzinfo=UTC), dialect), 60)
        self.assertEqual(self.type.process_bind_param(datetime.datetime(1970, 1, 1, 0, 1), dialect), 60)
        self.assertEqual(self.type.process_bind_param("1970-01-01T00:02:00Z", dialect), 120)
        self.assertIsNone(self.type.process_bind_param(None, dialect))

    def test_bind_rejects_other_values(self):
        for value in (True, 1.5, object()):
            with self.subTest(value=value):
                with self.assertRaises(ValueError):
                    self.type.process_bind_param(value, dialect)

    def test_result(self):
        self.assertEqual(self.type.process_result_value(60, dialect), datetime.datetime(1970, 1, 1, 0, 1, tzinfo=UTC))
        self.assertEqual(self.type.process_result_value("2024-01-02 03:04:05", dialect),
                         datetime.datetime(2024, 1, 2, 3, 4, 5, tzinfo=UTC))
        self.assertIsNone(self.type.process_result_value(None, dialect))


class TestJSONText(unittest.TestCase):

    def test_bind_and_result(self):
        t = JSONText()
        self.assertEqual(t.process_bind_param({"a": [1, 2]}, dialect), '{"a":[1,2]}')
        self.assertEqual(t.process_result_value('{"a":[1,2]}', dialect), {"a": [1, 2]})
        self.assertIsNone(t.process_bind_param(None, dialect))


class TestEnumCode(unittest.TestCase):

    def setUp(self):
        self.type = EnumCode({"blob": 100644, "directory": 40000})

    def test_codes(self):
        self.assertEqual(self.type.codes, {100644, 40000})

    def test_bind_label_or_code(self):
        self.assertEqual(self.type.process_bind_param("directory", dialect), 40000)
        self.assertEqual(self.type.process_bind_param(100644, dialect), 100644)

    def test_bind_rejects_values_outside_the_mapping(self):
        for value in ("symlink", 1, True):
            with self.subTest(value=value):
                with self.assertRaises(ValueError):
                    self.type.process_bind_param(value, dialect)

    def test_result(self):
        self.assertEqual(self.type.process_result_value(40000, dialect), "directory")
        self.assertEqual(self.type.process_result_value(7, dialect), 7)


if __name__ == '__main__':
    unittest.main()
