# config.py

import os
import yaml
import logging
from pydantic import BaseModel, ValidationError
from typing import Dict, List, Mapping, Optional

logger = logging.getLogger(__name__)

GIT_SECTION = "hooks.slack"

REQUIRED_KEYS = ["token", "org-name", "channel"]
OPTIONAL_KEYS = [
    "username",
    "icon-url",
    "icon-emoji",
    "repos-root",
    "changeset-url-pattern",
    "announce-channel",
    "debug",
    "log-db",
    "timeout",
]

# Keys whose YAML values keep their own type; every other value is a string.
TYPED_KEYS = {"debug", "timeout"}

# Checked in order after hooks.slack.repo-prefix; the repository name is the last resort.
LEGACY_PREFIX_KEYS = ["hooks.irc.prefix", "hooks.emailprefix"]

# Environment variables that override sensitive settings (e.g., for CI/CD or gitolite rc files).
ENV_OVERRIDES = {
    "token": "SLACK_TOKEN",
    "org-name": "SLACK_ORG_NAME",
}

HELP_TEXT = """\
Required config settings:
 git config hooks.slack.token 'secret-token'
 git config hooks.slack.org-name 'org-name'
 git config hooks.slack.channel 'general'

Optional config settings:
 git config hooks.slack.username 'git'
 git config hooks.slack.icon-url 'http://imgur/icon.png'
 git config hooks.slack.icon-emoji ':twisted_rightwards_arrows:'
 git config hooks.slack.repos-root '/path/to/repos'
 git config hooks.slack.changeset-url-pattern 'http://yourserver/%repo_path%/changeset/%rev_hash%'
 git config hooks.slack.announce-channel 'releases'
 git config hooks.slack.repo-prefix 'my-project'
 git config hooks.slack.debug true
 git config hooks.slack.log-db '/var/log/git-slack-hook.db'
 git config hooks.slack.timeout 10

Settings can also be read from a YAML file (--config or SLACK_HOOK_CONFIG)
using the same key names; git config takes precedence over the file.
"""


class ConfigError(Exception):
    """Raised when configuration is missing or invalid."""

    def __init__(self, message: str, missing: Optional[List[str]] = None, config_path: Optional[str] = None):
        self.missing = missing or []
        self.config_path = config_path
        super().__init__(message)

    def __str__(self):
        msg = super().__str__()
        if self.config_path:
            msg += f" (config: {self.config_path})"
        return msg


class HookConfig(BaseModel):
    token: str
    org_name: str
    channel: str
    repo_prefix: str
    username: Optional[str] = None
    icon_url: Optional[str] = None
    icon_emoji: Optional[str] = None
    repos_root: Optional[str] = None
    changeset_url_pattern: Optional[str] = None
    announce_channel: Optional[str] = None
    debug: bool = False
    log_db: Optional[str] = None
    timeout: Optional[float] = None


def load_yaml_config(path: str) -> dict:
    """
    Load settings from a YAML file.

    Returns:
        dict: Parsed settings keyed by the git config key names.
    """
    if not os.path.exists(path):
        logger.error(f"Configuration file '{path}' not found.")
        raise ConfigError("Configuration file not found", config_path=path)

    try:
        with open(path, 'r') as f:
            data = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        logger.error(f"Error parsing YAML file '{path}': {e}")
        raise ConfigError(f"Invalid YAML: {e}", config_path=path) from e

    if not isinstance(data, dict):
        raise ConfigError("Expected a mapping of settings", config_path=path)

    logger.debug(f"Configuration loaded from '{path}'.")
    # Unquoted YAML scalars such as "token: 12345" arrive as numbers.
    return {key: value if key in TYPED_KEYS or isinstance(value, str) or value is None else str(value)
            for key, value in data.items()}


def load_config(git, repo_name: str, config_path: Optional[str] = None,
                environ: Optional[Mapping[str, str]] = None) -> HookConfig:
    """
    Assemble the hook settings from the YAML file (if any), git config and the environment.

    Args:
        git: GitQuery used to read the hooks.slack.* config section.
        repo_name: Fallback repository prefix.
        config_path: Optional YAML file; defaults to $SLACK_HOOK_CONFIG.
        environ: Environment mapping, os.environ by default.

    Raises:
        ConfigError: If a required setting is missing or the YAML file is unusable.
    """
    environ = os.environ if environ is None else environ
    config_path = config_path or environ.get("SLACK_HOOK_CONFIG")

    settings: Dict[str, object] = {}
    if config_path:
        settings.update(load_yaml_config(config_path))

    for key in REQUIRED_KEYS + OPTIONAL_KEYS:
        value = git.config_get(f"{GIT_SECTION}.{key}")
        if value is not None:
            settings[key] = value

    for key, env_name in ENV_OVERRIDES.items():
        if environ.get(env_name):
            settings[key] = environ[env_name]

    if environ.get("DEBUG"):
        settings["debug"] = True

    missing = [key for key in REQUIRED_KEYS if not settings.get(key)]
    if missing:
        raise ConfigError(f"Missing required settings: {', '.join(missing)}", missing=missing, config_path=config_path)

    repo_prefix = git.config_get(f"{GIT_SECTION}.repo-prefix") or settings.get("repo-prefix")
    for key in LEGACY_PREFIX_KEYS:
        if repo_prefix:
            break
        repo_prefix = git.config_get(key)

    values = {key.replace("-", "_"): value for key, value in settings.items()
              if key in REQUIRED_KEYS + OPTIONAL_KEYS}
    values["repo_prefix"] = repo_prefix or repo_name

    try:
        config = HookConfig(**values)
    except ValidationError as e:
        raise ConfigError(f"Invalid settings: {e}", config_path=config_path) from e

    # Log summary of key settings (without sensitive details)
    logger.debug(f"Slack org: {config.org_name}")
    logger.debug(f"Slack channel: #{config.channel}")
    logger.debug(f"Repo prefix: {config.repo_prefix}")
    return config
