import pytest

from config import ConfigError, load_config
from conftest import FakeGit

REQUIRED = {
    "hooks.slack.token": "secret-token",
    "hooks.slack.org-name": "acme",
    "hooks.slack.channel": "dev",
}


def git_with(**extra):
    settings = dict(REQUIRED)
    settings.update(extra)
    return FakeGit(config=settings)


class TestLoadConfig:
    def test_required_settings_from_git_config(self):
        config = load_config(git_with(), "proj", environ={})
        assert config.token == "secret-token"
        assert config.org_name == "acme"
        assert config.channel == "dev"
        assert config.debug is False
        assert config.username is None

    def test_optional_settings(self):
        git = git_with(**{
            "hooks.slack.username": "git",
            "hooks.slack.icon-url": "http://imgur/icon.png",
            "hooks.slack.repos-root": "/srv/git",
            "hooks.slack.changeset-url-pattern": "http://x/%repo_path%/%rev_hash%",
            "hooks.slack.announce-channel": "releases",
            "hooks.slack.debug": "true",
        })
        config = load_config(git, "proj", environ={})
        assert config.username == "git"
        assert config.icon_url == "http://imgur/icon.png"
        assert config.repos_root == "/srv/git"
        assert config.changeset_url_pattern == "http://x/%repo_path%/%rev_hash%"
        assert config.announce_channel == "releases"
        assert config.debug is True

    @pytest.mark.parametrize("key", ["token", "org-name", "channel"])
    def test_missing_required_setting(self, key):
        settings = dict(REQUIRED)
        del settings[f"hooks.slack.{key}"]
        with pytest.raises(ConfigError) as exc_info:
            load_config(FakeGit(config=settings), "proj", environ={})
        assert exc_info.value.missing == [key]
        assert key in str(exc_info.value)

    def test_nothing_configured(self):
        with pytest.raises(ConfigError) as exc_info:
            load_config(FakeGit(), "proj", environ={})
        assert exc_info.value.missing == ["token", "org-name", "channel"]

    def test_environment_overrides_token(self):
        config = load_config(git_with(), "proj", environ={"SLACK_TOKEN": "from-env"})
        assert config.token == "from-env"

    def test_debug_environment_variable(self):
        config = load_config(git_with(), "proj", environ={"DEBUG": "1"})
        assert config.debug is True


class TestRepoPrefix:
    def test_defaults_to_repo_name(self):
        assert load_config(git_with(), "proj", environ={}).repo_prefix == "proj"

    def test_repo_prefix_setting(self):
        git = git_with(**{"hooks.slack.repo-prefix": "web", "hooks.irc.prefix": "irc"})
        assert load_config(git, "proj", environ={}).repo_prefix == "web"

    def test_irc_prefix_fallback(self):
        git = git_with(**{"hooks.irc.prefix": "irc", "hooks.emailprefix": "mail"})
        assert load_config(git, "proj", environ={}).repo_prefix == "irc"

    def test_email_prefix_fallback(self):
        git = git_with(**{"hooks.emailprefix": "mail"})
        assert load_config(git, "proj", environ={}).repo_prefix == "mail"


class TestYamlConfig:
    def test_file_supplies_defaults(self, tmp_path):
        path = tmp_path / "slack.yaml"
        path.write_text("token: file-token\norg-name: acme\nchannel: general\nusername: git\n")
        git = FakeGit(config={"hooks.slack.channel": "dev"})
        config = load_config(git, "proj", config_path=str(path), environ={})
        assert config.token == "file-token"
        assert config.channel == "dev"
        assert config.username == "git"

    def test_unquoted_numbers_are_read_as_strings(self, tmp_path):
        path = tmp_path / "slack.yaml"
        path.write_text("token: 12345\norg-name: acme\nchannel: 2024\nrepo-prefix: 7\ndebug: true\ntimeout: 5\n")
        config = load_config(FakeGit(), "proj", config_path=str(path), environ={})
        assert config.token == "12345"
        assert config.channel == "2024"
        assert config.repo_prefix == "7"
        assert config.debug is True
        assert config.timeout == 5.0

    def test_path_from_environment(self, tmp_path):
        path = tmp_path / "slack.yaml"
        path.write_text("token: t\norg-name: acme\nchannel: general\n")
        config = load_config(FakeGit(), "proj", environ={"SLACK_HOOK_CONFIG": str(path)})
        assert config.channel == "general"

    def test_missing_file(self, tmp_path):
        with pytest.raises(ConfigError) as exc_info:
            load_config(git_with(), "proj", config_path=str(tmp_path / "nope.yaml"), environ={})
        assert "not found" in str(exc_info.value)

    def test_invalid_yaml(self, tmp_path):
        path = tmp_path / "slack.yaml"
        path.write_text("token: [unclosed\n")
        with pytest.raises(ConfigError):
            load_config(git_with(), "proj", config_path=str(path), environ={})
