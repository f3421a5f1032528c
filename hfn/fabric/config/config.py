import copy
import json
import logging
import os

from yaml import safe_load

from hfn.fabric.config.default import DEFAULT

_logger = logging.getLogger(__name__)


def _env_name(name):
    return name.upper().replace('-', '_').replace('.', '_')


def _coerce(value, like):
    # environment values are strings, follow the type of the known setting
    if isinstance(like, bool):
        return value.lower() in ('1', 'true', 'yes', 'on')
    if isinstance(like, int):
        return int(value)
    if isinstance(like, float):
        return float(value)
    if isinstance(like, (dict, list)):
        return json.loads(value)
    return value


# config is a singleton object
class Config(object):
    """Layered settings lookup.

    Resolution order for ``get``: environment variable, value set in code,
    file stores (latest added first), then the packaged defaults.
    """

    class __Config:
        def __init__(self):
            self._fileStores = []
            self._files = {}
            self._config = {}

    instance = None

    def __init__(self):
        if not Config.instance:
            Config.instance = Config.__Config()

    def reorderFileStores(self, path, bottom=None):
        if path in self.instance._fileStores:
            self.instance._fileStores.remove(path)

        if bottom is not None:
            self.instance._fileStores.append(path)
        else:
            self.instance._fileStores.insert(0, path)

    def file(self, path, bottom=None):
        if not isinstance(path, str):
            raise Exception('The "path" parameter must be a string')

        with open(path, 'r') as f:
            file_data = f.read()

        _, file_ext = os.path.splitext(path)
        if file_ext.lower() in ('.yml', '.yaml'):
            settings = safe_load(file_data)
        else:
            settings = json.loads(file_data)

        if settings is None:
            settings = {}
        if not isinstance(settings, dict):
            raise Exception(f'Config file {path} must contain a mapping')

        _logger.debug(f'file - loaded {len(settings)} settings from {path}')
        self.instance._files[path] = settings
        self.reorderFileStores(path, bottom)

    def get(self, name, default_value=None):
        known = self._lookup(name)

        env_value = os.environ.get(_env_name(name))
        if env_value is not None:
            return _coerce(env_value, known)

        if known is not None:
            return copy.deepcopy(known)

        return default_value

    def _lookup(self, name):
        if name in self.instance._config:
            return self.instance._config[name]
        for path in self.instance._fileStores:
            settings = self.instance._files[path]
            if name in settings:
                return settings[name]
        return DEFAULT.get(name)

    def set(self, name, value):
        self.instance._config[name] = value

    def reset(self):
        Config.instance = Config.__Config()


def getConfigSetting(name, default_value=None):
    return Config().get(name, default_value)


def setConfigSetting(name, value):
    Config().set(name, value)


def addConfigFile(path):
    Config().file(path)
