"""Tests for gatekeeper.plugins.loader: discovery, loading, built-in fallback, errors."""

from __future__ import annotations

from unittest.mock import MagicMock, patch

import pytest

from gatekeeper.abac.combiners import AnyCanAllow
from gatekeeper.abac.policies import Ownership
from gatekeeper.abac.providers import StaticAttributeProvider
from gatekeeper.config.models import GatekeeperConfig, PluginsConfig
from gatekeeper.errors import GatekeeperError
from gatekeeper.plugins.loader import PluginLoader, PluginNotFoundError


# -- Helpers ----------------------------------------------------------------


def make_entry_point(name: str, load_return=None):
    """Build a mock entry point with .name and .load()."""
    ep = MagicMock()
    ep.name = name
    ep.load.return_value = load_return or MagicMock()
    return ep


def make_loader(*, policies=(), attribute_providers=(), combiner=None) -> PluginLoader:
    plugins = PluginsConfig(
        policies=list(policies),
        attribute_providers=list(attribute_providers),
        combiner=combiner,
    )
    return PluginLoader(GatekeeperConfig(plugins=plugins))


def _ep_side_effect(mapping: dict[str, list]):
    """Return a side_effect function for entry_points(group=...).

    Unrecognized groups return [].
    """
    def _side_effect(*, group):
        return mapping.get(group, [])
    return _side_effect


# -- Discovery tests -------------------------------------------------------


@patch("gatekeeper.plugins.loader.importlib.metadata.entry_points")
def test_discover_empty(mock_eps):
    mock_eps.side_effect = _ep_side_effect({})
    result = make_loader().discover()

    assert set(result.keys()) == {"policy", "attribute_provider", "combiner"}
    for names in result.values():
        assert names == []


@patch("gatekeeper.plugins.loader.importlib.metadata.entry_points")
def test_discover_finds_registered_plugins(mock_eps):
    mock_eps.side_effect = _ep_side_effect({
        "gatekeeper.policies": [make_entry_point("geo"), make_entry_point("quota")],
        "gatekeeper.attribute_providers": [make_entry_point("ldap")],
    })
    result = make_loader().discover()

    assert result["policy"] == ["geo", "quota"]
    assert result["attribute_provider"] == ["ldap"]
    assert result["combiner"] == []


# -- Loading tests ---------------------------------------------------------


@patch("gatekeeper.plugins.loader.importlib.metadata.entry_points")
def test_load_policy_calls_factory(mock_eps):
    mock_eps.side_effect = _ep_side_effect({
        "gatekeeper.policies": [make_entry_point("ownership", Ownership)],
    })
    policy = make_loader().load_policy("ownership")
    assert isinstance(policy, Ownership)


@patch("gatekeeper.plugins.loader.importlib.metadata.entry_points")
def test_load_attribute_provider(mock_eps):
    factory = MagicMock(return_value=StaticAttributeProvider("ldap"))
    mock_eps.side_effect = _ep_side_effect({
        "gatekeeper.attribute_providers": [make_entry_point("ldap", factory)],
    })
    provider = make_loader().load_attribute_provider("ldap")
    assert provider.name == "ldap"
    factory.assert_called_once_with()


@patch("gatekeeper.plugins.loader.importlib.metadata.entry_points")
def test_load_builtin_combiner_without_entry_point(mock_eps):
    combiner = make_loader().load_combiner("any-can-allow")
    assert isinstance(combiner, AnyCanAllow)
    mock_eps.assert_not_called()


@patch("gatekeeper.plugins.loader.importlib.metadata.entry_points")
def test_load_custom_combiner(mock_eps):
    mock_eps.side_effect = _ep_side_effect({
        "gatekeeper.combiners": [make_entry_point("veto", AnyCanAllow)],
    })
    assert isinstance(make_loader().load_combiner("veto"), AnyCanAllow)


@patch("gatekeeper.plugins.loader.importlib.metadata.entry_points")
def test_missing_plugin_raises(mock_eps):
    mock_eps.side_effect = _ep_side_effect({
        "gatekeeper.policies": [make_entry_point("geo")],
    })
    with pytest.raises(PluginNotFoundError, match="No policy plugin found with name 'quota'") as exc_info:
        make_loader().load_policy("quota")
    assert isinstance(exc_info.value, GatekeeperError)
    assert exc_info.value.plugin_type == "policy"
    assert exc_info.value.name == "quota"


# -- load_configured -------------------------------------------------------


def test_load_configured_without_config():
    assert PluginLoader().load_configured() == ([], [], None)


@patch("gatekeeper.plugins.loader.importlib.metadata.entry_points")
def test_load_configured_nothing_listed(mock_eps):
    assert make_loader().load_configured() == ([], [], None)
    mock_eps.assert_not_called()


@patch("gatekeeper.plugins.loader.importlib.metadata.entry_points")
def test_load_configured_in_order(mock_eps):
    mock_eps.side_effect = _ep_side_effect({
        "gatekeeper.policies": [
            make_entry_point("b", lambda: "policy-b"),
            make_entry_point("a", lambda: "policy-a"),
        ],
        "gatekeeper.attribute_providers": [make_entry_point("crm", lambda: "provider-crm")],
    })
    loader = make_loader(policies=["a", "b"], attribute_providers=["crm"], combiner="majority-wins")
    policies, providers, combiner = loader.load_configured()

    assert policies == ["policy-a", "policy-b"]
    assert providers == ["provider-crm"]
    assert combiner.name == "MajorityWins"
