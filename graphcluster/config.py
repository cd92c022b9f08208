import os

from dotenv import load_dotenv


DEFAULT_CONFIG = {
    'DATA_PATH': './data/raw/SYB66_309_202310_Education.csv',
    'N_CLUSTERS': 3,
    'POLICY': 'self_weight',
    'YEAR_SCALE': 0.001,
    'RESOLUTION': 1.0,
    'RANDOM_STATE': 42,
    'OUTPUT_DIR': './output',
    'LOG_DIR': '',
    'CREATE_VISUALIZATIONS': False,
    'PARALLEL': False,
}

_TRUE = {'1', 'true', 'yes', 'on'}
_FALSE = {'0', 'false', 'no', 'off', ''}


def _parse_bool(key, raw):
    value = raw.strip().lower()
    if value in _TRUE:
        return True
    if value in _FALSE:
        return False
    raise ValueError(f"{key} must be a boolean, got {raw!r}")


def _cast(key, raw, default):
    if isinstance(default, bool):
        return _parse_bool(key, raw)
    try:
        if isinstance(default, int):
            return int(raw)
        if isinstance(default, float):
            return float(raw)
    except ValueError as exc:
        raise ValueError(f"{key} must be a {type(default).__name__}, got {raw!r}") from exc
    return raw


def load_config(env_file="./.env"):
    """
    Returns DEFAULT_CONFIG overlaid with values from `env_file` and the
    process environment (environment wins over the file).
    """
    load_dotenv(env_file)
    config = dict(DEFAULT_CONFIG)
    for key, default in DEFAULT_CONFIG.items():
        raw = os.getenv(key)
        if raw is not None:
            config[key] = _cast(key, raw, default)
    return config
