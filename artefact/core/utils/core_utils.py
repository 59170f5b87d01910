import io
import os
import errno
import json
import logging
import requests
import portalocker
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry
from collections import OrderedDict


BUILD_TARGET_SQLITE = "SQLite"
BUILD_TARGET_SQLITE_DEV = "SQLite-Dev"
BUILD_TARGET_ENV = "ARTEFACT_BUILD_TARGET"

DEFAULT_HEADERS = {"Content-Type": "application/json"}
DEFAULT_CONFIG_PATH = os.path.join(os.path.expanduser('~'), '.artefact')
DEFAULT_CONFIG_FILE = os.path.join(DEFAULT_CONFIG_PATH, 'config.json')
DEFAULT_DATABASE = ":memory:"
DEFAULT_REQUESTS_TIMEOUT = (6, 63)  # (connect, read), integer in seconds
# The query bridge never retries a statement, so the transport under it does not either.
DEFAULT_SESSION_CONFIG = {
    "timeout": DEFAULT_REQUESTS_TIMEOUT,
    "retry_connect": 0,
    "retry_read": 0,
    "retry_backoff_factor": 0.0,
    "retry_status_forcelist": [],
}
DEFAULT_CONFIG = {
    "build_target": BUILD_TARGET_SQLITE_DEV,
    "database": DEFAULT_DATABASE,
    "host":
    {
        "url": None
    },
    "session": DEFAULT_SESSION_CONFIG
}
DEFAULT_LOGGER_OVERRIDES = {
    "sqlalchemy.engine": logging.WARNING,
    "urllib3": logging.WARNING,
}


def format_exception(e):
    if not isinstance(e, Exception):
        return str(e)
    exc = "".join(("[", type(e).__name__, "] "))
    if isinstance(e, requests.HTTPError) and e.response is not None:
        resp = " - Host responded: %s" % e.response.text.strip().replace('\n', ': ') if e.response.text else ""
        return "".join((exc, str(e), resp))
    return "".join((exc, str(e)))


def add_logging_level(level_name, level_num, method_name=None):
    if not method_name:
        method_name = level_name.lower()

    if hasattr(logging, level_name):
        logging.debug('{} already defined in logging module'.format(level_name))
        return
    if hasattr(logging, method_name):
        logging.debug('{} already defined in logging module'.format(method_name))
        return
    if hasattr(logging.getLoggerClass(), method_name):
        logging.debug('{} already defined in logger class'.format(method_name))
        return

    def log_for_level(self, message, *args, **kwargs):
        if self.isEnabledFor(level_num):
            self._log(level_num, message, args, **kwargs)

    def log_to_root(message, *args, **kwargs):
        logging.log(level_num, message, *args, **kwargs)

    logging.addLevelName(level_num, level_name)
    setattr(logging, level_name, level_num)
    setattr(logging.getLoggerClass(), method_name, log_for_level)
    setattr(logging, method_name, log_to_root)


def init_logging(level=logging.INFO,
                 log_format=None,
                 file_path=None,
                 file_mode='w',
                 capture_warnings=True,
                 logger_config=DEFAULT_LOGGER_OVERRIDES):
    add_logging_level("TRACE", logging.DEBUG-5)
    logging.captureWarnings(capture_warnings)
    if log_format is None:
        log_format = "[%(asctime)s - %(levelname)s - %(name)s:%(filename)s:%(lineno)s:%(funcName)s()] %(message)s" \
            if level <= logging.DEBUG else "%(asctime)s - %(levelname)s - %(message)s"
    # allow for reconfiguration of module-specific logging levels
    [logging.getLogger(name).setLevel(level) for name, level in logger_config.items()]
    if file_path:
        logging.basicConfig(filename=file_path, filemode=file_mode, level=level, format=log_format)
    else:
        logging.basicConfig(level=level, format=log_format)


def make_dirs(path, mode=0o777):
    if not os.path.isdir(path):
        try:
            os.makedirs(path, mode=mode)
        except OSError as error:
            if error.errno != errno.EEXIST:
                raise


def lock_file(file_path, mode, exclusive=True, timeout=60):
    return portalocker.Lock(file_path, mode=mode, timeout=timeout, fail_when_locked=True,
                            flags=(portalocker.LOCK_EX | portalocker.LOCK_NB) if exclusive else
                            (portalocker.LOCK_SH | portalocker.LOCK_NB))


def write_config(config_file=DEFAULT_CONFIG_FILE, config=DEFAULT_CONFIG):
    config_dir = os.path.dirname(config_file)
    make_dirs(config_dir, mode=0o750)
    with lock_file(config_file, mode='w', exclusive=True) as cf:
        config_data = json.dumps(config, ensure_ascii=False, indent=2)
        cf.write(config_data)
        cf.flush()
        os.fsync(cf.fileno())


def read_config(config_file=DEFAULT_CONFIG_FILE, create_default=False, default=DEFAULT_CONFIG):
    if not config_file:
        config_file = DEFAULT_CONFIG_FILE
    config = None
    if not os.path.isfile(config_file):
        if not create_default:
            return json.loads(json.dumps(default), object_pairs_hook=OrderedDict)
        logging.info("No default configuration file found, attempting to create one at: %s" % config_file)
        try:
            write_config(config_file, default)
        except Exception as e:
            logging.warning("Unable to create configuration file %s. Using internal defaults. %s" %
                            (config_file, format_exception(e)))
            config = json.dumps(default, ensure_ascii=False)

    if not config:
        with io.open(config_file, encoding='utf-8') as cf:
            config = cf.read()

    return json.loads(config, object_pairs_hook=OrderedDict)


def load_config(config_file=None):
    """Read the configuration file, falling back to the internal defaults when it cannot be read or parsed."""
    config_file = config_file or DEFAULT_CONFIG_FILE
    try:
        return read_config(config_file)
    except (OSError, ValueError) as e:
        logging.warning("Unable to read configuration file %s. Using internal defaults. %s" %
                        (config_file, format_exception(e)))
        return json.loads(json.dumps(DEFAULT_CONFIG), object_pairs_hook=OrderedDict)


def get_build_target(config_file=None):
    """Return the active build target.

    The ``ARTEFACT_BUILD_TARGET`` environment variable wins over the ``build_target`` key of the configuration
    file, which wins over the internal default of ``SQLite-Dev``.
    """
    target = os.getenv(BUILD_TARGET_ENV)
    if target:
        return target
    return load_config(config_file).get("build_target", BUILD_TARGET_SQLITE_DEV)


class TimeoutHTTPAdapter(HTTPAdapter):
    def __init__(self, *args, **kwargs):
        self.timeout = DEFAULT_REQUESTS_TIMEOUT
        if "timeout" in kwargs:
            timeout = kwargs["timeout"]
            self.timeout = tuple(timeout) if isinstance(timeout, list) else timeout
            del kwargs["timeout"]
        super().__init__(*args, **kwargs)

    def send(self, request, **kwargs):
        timeout = kwargs.get("timeout")
        if timeout is None:
            kwargs["timeout"] = self.timeout
        return super().send(request, **kwargs)


def get_new_requests_session(url=None, session_config=DEFAULT_SESSION_CONFIG):
    session = requests.session()
    retries = Retry(connect=session_config.get('retry_connect', 0),
                    read=session_config.get('retry_read', 0),
                    backoff_factor=session_config.get('retry_backoff_factor', 0.0),
                    status_forcelist=session_config.get('retry_status_forcelist', []),
                    allowed_methods=False,
                    raise_on_status=False)
    adapter = TimeoutHTTPAdapter(timeout=session_config.get("timeout", DEFAULT_REQUESTS_TIMEOUT), max_retries=retries)
    if url:
        session.mount(url, adapter)
    else:
        session.mount('http://', adapter)
        session.mount('https://', adapter)

    return session
