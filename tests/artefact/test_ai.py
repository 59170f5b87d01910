import json
import unittest
from unittest.mock import MagicMock

from artefact import ai
from artefact.core import Schema
from artefact.core.host import HostCapabilityMissing, bind, unbind


class TestAI(unittest.IsolatedAsyncioTestCase):

    def tearDown(self):
        unbind()

    def test_categorise(self):
        classifier = MagicMock(return_value="bug")
        self.assertEqual(ai.categorise("it crashes", ("bug", "feature"), classifier), "bug")
        classifier.assert_called_once_with("it crashes", ["bug", "feature"])

    def test_categorise_uses_bound_host(self):
        bind(categorise=MagicMock(return_value="feature"))
        self.assertEqual(ai.categorise("add a button", ["bug", "feature"]), "feature")

    def test_categorise_without_host(self):
        with self.assertRaises(HostCapabilityMissing):
            ai.categorise("x", ["a"])

    def test_predict_returns_raw_text(self):
        predictor = MagicMock(return_value='{"a": 1}')
        self.assertEqual(ai.predict("p", '{"type": "object"}', predictor), '{"a": 1}')
        predictor.assert_called_once_with("p", '{"type": "object"}')

    def test_predict_serializes_schema(self):
        predictor = MagicMock(return_value="ok")
        ai.predict("p", {"type": "object"}, predictor)
        self.assertEqual(json.loads(predictor.call_args[0][1]), {"type": "object"})
        schema = Schema("users", lambda prop: {"id": prop.integer("id")})
        ai.predict("p", schema, predictor)
        self.assertEqual(predictor.call_args[0][1], schema.to_json())

    def test_host_errors_propagate(self):
        bind(predict=MagicMock(side_effect=RuntimeError("model not loaded")))
        with self.assertRaisesRegex(RuntimeError, "model not loaded"):
            ai.predict("p", "{}")

    async def test_async(self):
        bind(categorise=MagicMock(return_value="a"), predict=MagicMock(return_value="{}"))
        self.assertEqual(await ai.categorise_async("x", ["a", "b"]), "a")
        self.assertEqual(await ai.predict_async("x", "{}"), "{}")


if __name__ == '__main__':
    unittest.main()
