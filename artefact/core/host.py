"""Host capabilities injected into the runtime.

The storage engine and the inference engine live outside this package, behind
three synchronous single-shot call contracts:

- `QueryExecutor`: ``executor(payload_json) -> reply_json``
- `Classifier`: ``classifier(content, choices) -> label``
- `Predictor`: ``predictor(content, schema_json) -> text``

Any callable with the matching signature satisfies a contract; the base
classes below exist for implementations that prefer to subclass. The
process-wide binding is set with `bind()` and read with `get_host()`.

Usage:
    from artefact.core.host import bind
    from artefact.host.sqlite_host import SQLiteHost

    bind(query=SQLiteHost(":memory:"))
"""

import logging

logger = logging.getLogger(__name__)


class HostCapabilityMissing (RuntimeError):
    pass


class QueryExecutor (object):
    """Executes one serialized query request and returns the serialized reply."""

    def __call__(self, payload):
        raise NotImplementedError("Must be implemented by subclass")


class Classifier (object):
    """Chooses one label out of a list of choices for a piece of text."""

    def __call__(self, content, choices):
        raise NotImplementedError("Must be implemented by subclass")


class Predictor (object):
    """Produces JSON (or plain text) output for a prompt and a JSON schema string."""

    def __call__(self, content, schema):
        raise NotImplementedError("Must be implemented by subclass")


class Host (object):
    """A set of bound host capabilities."""

    def __init__(self, query=None, categorise=None, predict=None):
        self._query = query
        self._categorise = categorise
        self._predict = predict

    @staticmethod
    def _require(capability, name):
        if capability is None:
            raise HostCapabilityMissing("No host %s capability is bound" % name)
        return capability

    @property
    def executor(self):
        return self._require(self._query, "query")

    @property
    def classifier(self):
        return self._require(self._categorise, "categorise")

    @property
    def predictor(self):
        return self._require(self._predict, "predict")

    def merged(self, query=None, categorise=None, predict=None):
        return Host(query=query or self._query,
                    categorise=categorise or self._categorise,
                    predict=predict or self._predict)


_host = Host()


def get_host():
    return _host


def bind(query=None, categorise=None, predict=None):
    """Bind host capabilities process-wide. Capabilities not given keep their current binding."""
    global _host
    _host = _host.merged(query=query, categorise=categorise, predict=predict)
    logger.debug("Bound host capabilities: query=%s, categorise=%s, predict=%s" %
                 (_host._query is not None, _host._categorise is not None, _host._predict is not None))
    return _host


def unbind():
    global _host
    _host = Host()
