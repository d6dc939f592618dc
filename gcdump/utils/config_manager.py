import copy
import json
from pathlib import Path

DEFAULT_CONFIG = {
    'serial': {
        'port': None,
        'baudrate': 19200,
        'timeout': 1,
        'protocol': 'simple',
        'cache_size': 32,
        'max_unconfirmed': 0
    },
    'logging': {
        'log_file': None,
        'error_log_file': None
    }
}


class ConfigManager:
    def __init__(self, config_file=None):
        self.config_file = Path(config_file) if config_file else None
        self.config = self.load_config()

    def load_config(self):
        default_config = copy.deepcopy(DEFAULT_CONFIG)
        if self.config_file is None:
            return default_config

        if not self.config_file.exists():
            self.config_file.parent.mkdir(parents=True, exist_ok=True)
            self.save_config(default_config)
            return default_config

        with open(self.config_file, 'r') as f:
            loaded = json.load(f)
        return _merge(default_config, loaded)

    def save_config(self, config):
        if self.config_file is None:
            return
        with open(self.config_file, 'w') as f:
            json.dump(config, f, indent=4)

    def get(self, key, default=None):
        keys = key.split('.')
        value = self.config
        try:
            for k in keys:
                value = value[k]
        except (KeyError, TypeError):
            return default
        return default if value is None else value

    def set(self, key, value):
        keys = key.split('.')
        config = self.config
        for k in keys[:-1]:
            config = config.setdefault(k, {})
        config[keys[-1]] = value
        self.save_config(self.config)


def _merge(base, override):
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(base.get(key), dict):
            _merge(base[key], value)
        else:
            base[key] = value
    return base
