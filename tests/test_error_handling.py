"""Error handling tests: exception hierarchy, messages and chaining."""

from __future__ import annotations

import pytest

from gatekeeper.errors import (
    AuthorizationError,
    EvaluationError,
    GatekeeperError,
    PolicyAlreadyRegisteredError,
    PolicyNotFoundError,
    ProviderAlreadyRegisteredError,
    RegistrationError,
)
from gatekeeper.plugins.loader import PluginNotFoundError


# ========================================================================
# Hierarchy
# ========================================================================


@pytest.mark.parametrize(
    "exc",
    [
        PolicyAlreadyRegisteredError("p"),
        PolicyNotFoundError("p"),
        ProviderAlreadyRegisteredError("p"),
    ],
)
def test_registration_errors_share_base(exc):
    assert isinstance(exc, RegistrationError)
    assert isinstance(exc, GatekeeperError)
    assert exc.name == "p"


def test_runtime_errors_share_base():
    assert issubclass(EvaluationError, GatekeeperError)
    assert issubclass(AuthorizationError, GatekeeperError)
    assert issubclass(PluginNotFoundError, GatekeeperError)


# ========================================================================
# Messages
# ========================================================================


def test_registration_messages():
    assert str(PolicyAlreadyRegisteredError("Ownership")) == "policy with name 'Ownership' already exists"
    assert str(PolicyNotFoundError("Ownership")) == "policy with name 'Ownership' not found"
    assert (
        str(ProviderAlreadyRegisteredError("db"))
        == "attribute provider with name 'db' already exists"
    )
    assert PolicyNotFoundError("x").kind == "policy"
    assert ProviderAlreadyRegisteredError("x").kind == "attribute provider"


def test_evaluation_error_chains_cause():
    cause = RuntimeError("boom")
    err = EvaluationError("policy decision could not be combined", cause)
    assert str(err) == "policy decision could not be combined: boom"
    assert err.__cause__ is cause


def test_evaluation_error_without_cause():
    err = EvaluationError("nothing to combine")
    assert str(err) == "nothing to combine"
    assert err.__cause__ is None


def test_authorization_error_fields():
    cause = EvaluationError("broken")
    err = AuthorizationError("u1", "internship:view", cause)
    assert err.user_id == "u1"
    assert err.action == "internship:view"
    assert err.__cause__ is cause
    assert "user=u1" in str(err)
    assert "action=internship:view" in str(err)


def test_plugin_not_found_without_name():
    assert str(PluginNotFoundError("combiner")) == "No combiner plugin found"
