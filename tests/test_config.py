"""Tests for gatekeeper.config: models and YAML loader."""

import pytest
from pydantic import ValidationError

from gatekeeper.config.loader import DEFAULT_CONFIG_TEMPLATE, _expand_env_vars, load_config
from gatekeeper.config.models import (
    ABACConfig,
    CacheConfig,
    GatekeeperConfig,
    PluginsConfig,
    RBACConfig,
)


# ── GatekeeperConfig defaults ──────────────────────────────────────


class TestGatekeeperConfigDefaults:
    def test_default_log_level(self, sample_config):
        assert sample_config.log_level == "info"

    def test_default_log_format(self, sample_config):
        assert sample_config.log_format == "text"

    def test_default_role_table(self, sample_config):
        assert sample_config.rbac.role_permissions is None

    def test_default_combiner(self, sample_config):
        assert sample_config.abac.combiner == "all-must-allow"

    def test_default_policies(self, sample_config):
        assert sample_config.abac.policies == [
            "EnrollmentBasedAccess",
            "Ownership",
            "TimeBasedAccess",
            "ProgressBased",
        ]

    def test_default_cache(self, sample_config):
        assert sample_config.cache.enabled is True
        assert sample_config.cache.ttl_seconds == 300
        assert sample_config.cache.max_entries == 1000

    def test_default_plugins(self, sample_config):
        assert sample_config.plugins == PluginsConfig()
        assert sample_config.plugins.combiner is None


# ── Individual config model validations ─────────────────────────────


class TestABACConfig:
    def test_unknown_combiner_rejected(self):
        with pytest.raises(ValidationError):
            ABACConfig(combiner="first-wins")

    def test_unknown_policy_rejected(self):
        with pytest.raises(ValidationError):
            ABACConfig(policies=["Ownership", "GeoFence"])

    def test_content_access_selectable(self):
        cfg = ABACConfig(policies=["ContentAccess"])
        assert cfg.policies == ["ContentAccess"]


class TestCacheConfig:
    @pytest.mark.parametrize("field", ["ttl_seconds", "max_entries"])
    def test_must_be_positive(self, field):
        with pytest.raises(ValidationError):
            CacheConfig(**{field: 0})


class TestRBACConfig:
    def test_custom_table(self):
        cfg = RBACConfig(role_permissions={"auditor": ["analytics:view"]})
        assert cfg.role_permissions == {"auditor": ["analytics:view"]}


class TestGatekeeperConfig:
    def test_invalid_log_level(self):
        with pytest.raises(ValidationError):
            GatekeeperConfig(log_level="verbose")

    def test_nested_dicts_coerced(self):
        cfg = GatekeeperConfig(cache={"ttl_seconds": 60}, plugins={"combiner": "veto"})
        assert cfg.cache.ttl_seconds == 60
        assert cfg.plugins.combiner == "veto"


# ── Env var expansion ───────────────────────────────────────────────


class TestExpandEnvVars:
    def test_string(self, monkeypatch):
        monkeypatch.setenv("GK_ROLE", "auditor")
        assert _expand_env_vars("role-${GK_ROLE}") == "role-auditor"

    def test_missing_var_becomes_empty(self, monkeypatch):
        monkeypatch.delenv("GK_MISSING", raising=False)
        assert _expand_env_vars("x${GK_MISSING}y") == "xy"

    def test_nested(self, monkeypatch):
        monkeypatch.setenv("GK_PROVIDER", "ldap")
        raw = {"plugins": {"attribute_providers": ["${GK_PROVIDER}", "static"]}, "n": 3}
        assert _expand_env_vars(raw) == {
            "plugins": {"attribute_providers": ["ldap", "static"]},
            "n": 3,
        }


# ── load_config resolution ──────────────────────────────────────────


@pytest.fixture
def isolated(tmp_path, monkeypatch):
    """Empty working directory and home so no real config is picked up."""
    home = tmp_path / "home"
    work = tmp_path / "work"
    home.mkdir()
    work.mkdir()
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.chdir(work)
    return work, home


class TestLoadConfig:
    def test_defaults_when_no_file(self, isolated):
        assert load_config() == GatekeeperConfig()

    def test_cli_path(self, isolated, tmp_path):
        path = tmp_path / "custom.yaml"
        path.write_text("abac:\n  combiner: majority-wins\n")
        assert load_config(str(path)).abac.combiner == "majority-wins"

    def test_project_local(self, isolated):
        work, _ = isolated
        (work / "gatekeeper.yaml").write_text("log_level: debug\n")
        assert load_config().log_level == "debug"

    def test_user_global(self, isolated):
        _, home = isolated
        (home / ".gatekeeper").mkdir()
        (home / ".gatekeeper" / "config.yaml").write_text("log_format: json\n")
        assert load_config().log_format == "json"

    def test_cli_beats_project_local(self, isolated, tmp_path):
        work, _ = isolated
        (work / "gatekeeper.yaml").write_text("log_level: debug\n")
        path = tmp_path / "cli.yaml"
        path.write_text("log_level: error\n")
        assert load_config(str(path)).log_level == "error"

    def test_empty_file_skipped(self, isolated):
        work, home = isolated
        (work / "gatekeeper.yaml").write_text("")
        (home / ".gatekeeper").mkdir()
        (home / ".gatekeeper" / "config.yaml").write_text("log_level: warn\n")
        assert load_config().log_level == "warn"

    def test_invalid_yaml(self, isolated):
        work, _ = isolated
        (work / "gatekeeper.yaml").write_text("abac: [unclosed\n")
        with pytest.raises(ValueError, match="Invalid YAML"):
            load_config()

    def test_invalid_config(self, isolated):
        work, _ = isolated
        (work / "gatekeeper.yaml").write_text("cache:\n  ttl_seconds: -1\n")
        with pytest.raises(ValueError, match="Invalid config"):
            load_config()

    def test_env_expansion(self, isolated, monkeypatch):
        work, _ = isolated
        monkeypatch.setenv("GK_LEVEL", "debug")
        (work / "gatekeeper.yaml").write_text('log_level: "${GK_LEVEL}"\n')
        assert load_config().log_level == "debug"

    def test_default_template_is_valid(self, isolated):
        work, _ = isolated
        (work / "gatekeeper.yaml").write_text(DEFAULT_CONFIG_TEMPLATE)
        assert load_config() == GatekeeperConfig()
