"""Remote host reached over HTTP.

`HttpHost` forwards the three host capabilities to a service exposing
``POST <url>/query``, ``POST <url>/categorise`` and ``POST <url>/predict``.
Transport errors propagate as `requests` exceptions. The session performs no
automatic retries unless the session configuration asks for them.
"""

import json
import logging

from artefact.core.host import QueryExecutor, bind
from artefact.core.utils.core_utils import DEFAULT_HEADERS, DEFAULT_SESSION_CONFIG, get_new_requests_session, \
    load_config

logger = logging.getLogger(__name__)


class HttpHost (QueryExecutor):
    """HTTP client for a remote storage and inference host.

    The instance itself is the query capability; `categorise` and `predict`
    are the inference capabilities, suitable for `artefact.core.host.bind`.
    """

    def __init__(self, url, session_config=None, headers=None):
        self.url = url.rstrip("/")
        self.session_config = dict(DEFAULT_SESSION_CONFIG)
        if session_config:
            self.session_config.update(session_config)
        self.headers = dict(DEFAULT_HEADERS)
        if headers:
            self.headers.update(headers)
        self.session = get_new_requests_session(self.url + "/", self.session_config)

    @classmethod
    def from_config(cls, config_file=None, headers=None):
        """Create a host from the ``host.url`` and ``session`` keys of the configuration file.

        Raises:
            ValueError: If no host URL is configured.
        """
        config = load_config(config_file)
        url = (config.get("host") or {}).get("url")
        if not url:
            raise ValueError("No host URL configured: set \"host\": {\"url\": ...} in the configuration file")
        return cls(url, session_config=config.get("session"), headers=headers)

    def _post(self, path, body):
        url = "%s/%s" % (self.url, path)
        logger.debug("POST %s" % url)
        r = self.session.post(url, data=body, headers=self.headers)
        r.raise_for_status()
        return r.text

    def __call__(self, payload):
        return self._post("query", payload)

    def categorise(self, content, choices):
        return self._post("categorise", json.dumps({"content": content, "choices": list(choices)}))

    def predict(self, content, schema):
        return self._post("predict", json.dumps({"content": content, "schema": schema}))

    def bind(self):
        """Bind this host's capabilities process-wide."""
        return bind(query=self, categorise=self.categorise, predict=self.predict)

    def close(self):
        self.session.close()
