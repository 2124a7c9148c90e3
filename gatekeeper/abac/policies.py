"""Built-in ABAC policies.

Each policy is an independent class satisfying the ``Policy`` protocol. The
missing-data behaviour differs per policy and is deliberate to match the
deployed rules: enrollment fails closed, ownership and progress fail open.
"""

from __future__ import annotations

from collections.abc import Callable
from datetime import UTC, datetime
from numbers import Real
from typing import Any

from gatekeeper.abac.interfaces import Policy
from gatekeeper.models import AccessRequest, Decision, Permission, Role

_CONTENT_ACTIONS = frozenset(
    p.value
    for p in (
        Permission.view_lectures,
        Permission.view_assignments,
        Permission.view_resources,
        Permission.download_content,
        Permission.view_internship,
    )
)

_MODIFY_ACTIONS = frozenset(
    p.value for p in (Permission.update_internship, Permission.delete_internship)
)


class EnrollmentBasedAccess:
    """Students may only reach content of internships they are enrolled in."""

    name = "EnrollmentBasedAccess"
    priority = 100

    def applies(self, request: AccessRequest) -> bool:
        return request.subject.role == Role.student.value and request.action in _CONTENT_ACTIONS

    async def evaluate(self, request: AccessRequest) -> Decision:
        if "internship_id" not in request.resource.attributes:
            return Decision(allow=False, reason="internship_id not found in resource attributes")
        if "enrolled_internships" not in request.subject.attributes:
            return Decision(allow=False, reason="Student not enrolled in any internships")

        enrolled = request.subject.attributes["enrolled_internships"]
        if not isinstance(enrolled, (list, tuple, set, frozenset)) or not all(
            isinstance(i, str) for i in enrolled
        ):
            return Decision(allow=False, reason="Invalid enrolled_internships format")

        internship_id = request.resource.attributes["internship_id"]
        if not isinstance(internship_id, str):
            return Decision(allow=False, reason="Invalid internship_id format")

        if internship_id in enrolled:
            return Decision(allow=True, reason="Student enrolled in internship")
        return Decision(allow=False, reason="Student not enrolled in this internship")


class Ownership:
    """Only the creator (or an admin) may update or delete an internship."""

    name = "Ownership"
    priority = 200

    def applies(self, request: AccessRequest) -> bool:
        return request.action in _MODIFY_ACTIONS

    async def evaluate(self, request: AccessRequest) -> Decision:
        if request.subject.role == Role.admin.value:
            return Decision(allow=True, reason="Admin can modify any resource")

        if "created_by" not in request.resource.attributes:
            return Decision(allow=True, reason="No ownership info available")
        owner = request.resource.attributes["created_by"]
        if not isinstance(owner, str):
            return Decision(allow=True, reason="Invalid owner format")

        if request.subject.user_id == owner:
            return Decision(allow=True, reason="User owns the resource")
        return Decision(allow=False, reason="User does not own the resource")


class TimeBasedAccess:
    """Restricts access to an ``access_start_time``/``access_end_time`` window.

    Values that are not ``datetime`` instances are ignored. Timezone-aware
    bounds are compared to aware UTC now, naive bounds to naive local now.
    """

    name = "TimeBasedAccess"
    priority = 150

    def __init__(self, clock: Callable[[], datetime] | None = None) -> None:
        self._clock = clock or (lambda: datetime.now(UTC))

    def applies(self, request: AccessRequest) -> bool:
        attrs = request.resource.attributes
        return "access_start_time" in attrs or "access_end_time" in attrs

    def _now_like(self, bound: datetime) -> datetime:
        now = self._clock()
        if bound.tzinfo is None and now.tzinfo is not None:
            return now.astimezone().replace(tzinfo=None)
        if bound.tzinfo is not None and now.tzinfo is None:
            return now.astimezone(UTC)
        return now

    async def evaluate(self, request: AccessRequest) -> Decision:
        attrs = request.resource.attributes

        start = attrs.get("access_start_time")
        if isinstance(start, datetime) and self._now_like(start) < start:
            return Decision(
                allow=False,
                reason="Access not yet available",
                metadata={"available_at": start},
            )

        end = attrs.get("access_end_time")
        if isinstance(end, datetime) and self._now_like(end) > end:
            return Decision(
                allow=False,
                reason="Access period has expired",
                metadata={"expired_at": end},
            )

        return Decision(allow=True, reason="Within allowed time window")


def _as_percentage(value: Any) -> float | None:
    # bool is a Real subclass but never a meaningful percentage
    if isinstance(value, bool) or not isinstance(value, Real):
        return None
    return float(value)


class ProgressBased:
    """Students need at least ``required_progress`` percent to proceed."""

    name = "ProgressBased"
    priority = 75

    def applies(self, request: AccessRequest) -> bool:
        return (
            request.subject.role == Role.student.value
            and "required_progress" in request.resource.attributes
        )

    async def evaluate(self, request: AccessRequest) -> Decision:
        if "required_progress" not in request.resource.attributes:
            return Decision(allow=True, reason="No progress requirement")
        if "progress" not in request.subject.attributes:
            return Decision(allow=False, reason="User has no progress recorded")

        progress = _as_percentage(request.subject.attributes["progress"])
        required = _as_percentage(request.resource.attributes["required_progress"])
        if progress is None or required is None:
            return Decision(allow=True, reason="Invalid progress format, allowing access")

        metadata = {"user_progress": progress, "required_progress": required}
        if progress >= required:
            return Decision(
                allow=True,
                reason=f"Sufficient progress: {progress:.1f}% >= {required:.1f}%",
                metadata=metadata,
            )
        return Decision(
            allow=False,
            reason=f"Insufficient progress: {progress:.1f}% < {required:.1f}%",
            metadata=metadata,
        )


class ContentAccess:
    """Grants admins and instructors content access. Never denies anyone."""

    name = "ContentAccess"
    priority = 50

    def applies(self, request: AccessRequest) -> bool:
        return request.resource.type == "content"

    async def evaluate(self, request: AccessRequest) -> Decision:
        if request.subject.role in (Role.admin.value, Role.instructor.value):
            return Decision(allow=True, reason="Admin/Instructor has full content access")
        return Decision(
            allow=True,
            reason="General content access allowed (subject to other policies)",
        )


BUILTIN_POLICIES: dict[str, Callable[[], Policy]] = {
    EnrollmentBasedAccess.name: EnrollmentBasedAccess,
    Ownership.name: Ownership,
    TimeBasedAccess.name: TimeBasedAccess,
    ProgressBased.name: ProgressBased,
    ContentAccess.name: ContentAccess,
}

DEFAULT_POLICY_NAMES: list[str] = [
    EnrollmentBasedAccess.name,
    Ownership.name,
    TimeBasedAccess.name,
    ProgressBased.name,
]


def default_policies() -> list[Policy]:
    """Fresh instances of the policies registered on a new engine."""
    return [BUILTIN_POLICIES[name]() for name in DEFAULT_POLICY_NAMES]
