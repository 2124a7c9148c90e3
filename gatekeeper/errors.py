"""Exception hierarchy for Gatekeeper.

A denial is never an exception: policies and the authorizer return ``False``.
Exceptions are reserved for configuration-time mistakes (registration) and
for evaluations that could not be completed at all.
"""

from __future__ import annotations


class GatekeeperError(Exception):
    """Base class for all Gatekeeper errors."""


class RegistrationError(GatekeeperError):
    """Raised when a policy or attribute provider cannot be (un)registered."""

    def __init__(self, kind: str, name: str, problem: str) -> None:
        self.kind = kind
        self.name = name
        super().__init__(f"{kind} with name '{name}' {problem}")


class PolicyAlreadyRegisteredError(RegistrationError):
    def __init__(self, name: str) -> None:
        super().__init__("policy", name, "already exists")


class PolicyNotFoundError(RegistrationError):
    def __init__(self, name: str) -> None:
        super().__init__("policy", name, "not found")


class ProviderAlreadyRegisteredError(RegistrationError):
    def __init__(self, name: str) -> None:
        super().__init__("attribute provider", name, "already exists")


class EvaluationError(GatekeeperError):
    """The policy engine itself could not finish evaluating a request."""

    def __init__(self, message: str, cause: Exception | None = None) -> None:
        super().__init__(f"{message}: {cause}" if cause else message)
        self.__cause__ = cause


class AuthorizationError(GatekeeperError):
    """Authorization could not be determined. Callers must deny access."""

    def __init__(self, user_id: str, action: str, cause: Exception) -> None:
        self.user_id = user_id
        self.action = action
        super().__init__(f"authorization check failed for user={user_id} action={action}: {cause}")
        self.__cause__ = cause
