"""Strategies for reducing a list of policy decisions to one."""

from __future__ import annotations

from gatekeeper.abac.interfaces import PolicyCombiner
from gatekeeper.models import Decision

_EMPTY_REASON = "No policies to evaluate"


class AllMustAllow:
    """Deny on the first denial (in evaluation order), otherwise allow."""

    name = "AllMustAllow"

    def combine(self, decisions: list[Decision]) -> Decision:
        if not decisions:
            return Decision(allow=True, reason=_EMPTY_REASON)
        for decision in decisions:
            if not decision.allow:
                return decision.model_copy(deep=True)
        return Decision(allow=True, reason="All policies allowed access")


class AnyCanAllow:
    """Allow on the first grant, otherwise return the last denial."""

    name = "AnyCanAllow"

    def combine(self, decisions: list[Decision]) -> Decision:
        if not decisions:
            return Decision(allow=True, reason=_EMPTY_REASON)
        for decision in decisions:
            if decision.allow:
                return decision.model_copy(deep=True)
        # every vote was a denial; report the last one
        return decisions[-1].model_copy(deep=True)


class PriorityBased:
    """The highest-priority decision wins verbatim.

    Ties keep evaluation order (stable sort). The input list is not reordered.
    """

    name = "PriorityBased"

    def combine(self, decisions: list[Decision]) -> Decision:
        if not decisions:
            return Decision(allow=True, reason=_EMPTY_REASON)
        ranked = sorted(decisions, key=lambda d: d.priority, reverse=True)
        return ranked[0].model_copy(deep=True)


class MajorityWins:
    """Simple vote. A tie denies."""

    name = "MajorityWins"

    def combine(self, decisions: list[Decision]) -> Decision:
        if not decisions:
            return Decision(allow=True, reason=_EMPTY_REASON)
        allows = sum(1 for d in decisions if d.allow)
        denies = len(decisions) - allows
        meta = {"allow_count": allows, "deny_count": denies}
        if allows > denies:
            return Decision(allow=True, reason="Majority of policies allowed access", metadata=meta)
        if denies > allows:
            return Decision(allow=False, reason="Majority of policies denied access", metadata=meta)
        return Decision(
            allow=False,
            reason="Equal number of allow/deny decisions - defaulting to deny",
            metadata=meta,
        )


_COMBINER_MAP: dict[str, type[PolicyCombiner]] = {
    "all-must-allow": AllMustAllow,
    "any-can-allow": AnyCanAllow,
    "priority-based": PriorityBased,
    "majority-wins": MajorityWins,
}


def create_combiner(name: str) -> PolicyCombiner:
    """Build a combiner from its config name (``all-must-allow``, ...)."""
    cls = _COMBINER_MAP.get(name)
    if cls is None:
        raise ValueError(
            f"Unsupported policy combiner: {name!r}. Supported: {', '.join(_COMBINER_MAP)}"
        )
    return cls()


def combiner_names() -> list[str]:
    return list(_COMBINER_MAP)
