import json
import os
from pathlib import Path

from redirects.errors import ConfigurationError
from redirects.s3_link_allocator import check_redirect_target_format

CONFIG_DIR = Path.home() / ".s3redirect"
CONFIG_FILE = CONFIG_DIR / "config.json"

_REQUIRED_KEYS = {"aws_region", "bucket_name"}
_INT_KEYS = ("identifier_length", "max_attempts")

# Environment variables win over the config file
_ENV_KEYS = {
    "bucket_name": "S3_BUCKET",
    "aws_region": "AWS_REGION",
    "endpoint_url": "S3_ENDPOINT_URL",
    "state_prefix": "S3REDIRECT_STATE_PREFIX",
    "link_prefix": "S3REDIRECT_LINK_PREFIX",
    "redirect_target_format": "S3REDIRECT_TARGET_FORMAT",
    "identifier_length": "S3REDIRECT_ID_LENGTH",
    "max_attempts": "S3REDIRECT_MAX_ATTEMPTS",
    "repair_dangling": "S3REDIRECT_REPAIR_DANGLING",
}

DEFAULTS = {
    "state_prefix": "state/",
    "link_prefix": "",
    "redirect_target_format": "%s",
    "identifier_length": 6,
    "max_attempts": 100,
    "repair_dangling": False,
}


def load_config() -> dict:
    config = dict(DEFAULTS)
    config.update(_load_file())
    for key, env_var in _ENV_KEYS.items():
        value = os.environ.get(env_var)
        if value is not None:
            config[key] = value
    if isinstance(config["repair_dangling"], str):
        config["repair_dangling"] = config["repair_dangling"].strip().lower() in ("1", "true", "yes")
    return config


def _load_file() -> dict:
    if not CONFIG_FILE.exists():
        return {}
    try:
        with open(CONFIG_FILE) as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        raise ConfigurationError(f"{CONFIG_FILE} is not valid JSON: {e}") from e
    if not isinstance(data, dict):
        raise ConfigurationError(f"{CONFIG_FILE} must contain a JSON object")
    return data


def validate_config(config: dict) -> bool:
    """Return True if config has all required keys with non-empty values."""
    if not isinstance(config, dict):
        return False
    return all(str(config.get(key, "")).strip() for key in _REQUIRED_KEYS)


def require_valid_config(config: dict) -> dict:
    """Return config with integer options coerced, or raise ConfigurationError."""
    if not validate_config(config):
        missing = sorted(k for k in _REQUIRED_KEYS if not str(config.get(k, "")).strip())
        env_names = ", ".join(_ENV_KEYS[k] for k in missing)
        raise ConfigurationError(f"Missing required setting(s): {', '.join(missing)} (set {env_names})")

    checked = dict(config)
    for key in _INT_KEYS:
        try:
            checked[key] = int(checked.get(key, DEFAULTS[key]))
        except (TypeError, ValueError):
            raise ConfigurationError(f"{key} must be an integer, got {checked.get(key)!r}") from None
        if checked[key] < 1:
            raise ConfigurationError(f"{key} must be positive, got {checked[key]}")

    check_redirect_target_format(checked.get("redirect_target_format", DEFAULTS["redirect_target_format"]))
    return checked
