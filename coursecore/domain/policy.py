from dataclasses import dataclass
from typing import Any
from uuid import UUID

from coursecore.domain.entities import Course, Principal
from coursecore.domain.errors import AuthorizationError
from coursecore.rules.models import Rules


@dataclass(frozen=True)
class Target:
    """What an action is aimed at: a course, a student, or both."""

    course: Course | None = None
    student_id: UUID | None = None


class PolicyEngine:
    def __init__(self, rules: Rules):
        self.rules = rules

    def check_permission(
        self,
        principal: Principal | None,
        action: str,
        target: Target | None = None,
    ) -> bool:
        """
        Check if the principal is allowed to perform the action on the target.

        Order of precedence:
        1. Public Permissions (Global)
        2. Role-Based Access Control (RBAC)
        3. Attribute-Based Access Control (ABAC)
        """
        # 1. Public Permissions
        if action in self.rules.rbac.public_permissions:
            return True

        if not principal:
            return False

        # 2. RBAC
        allowed_actions = self.rules.rbac.roles.get(principal.role, [])
        if "*" in allowed_actions or action in allowed_actions:
            return True

        # Scoped wildcards (e.g. "course:*" matches "course:update")
        if ":" in action:
            scope = action.split(":")[0]
            if f"{scope}:*" in allowed_actions:
                return True

        # 3. ABAC
        if target:
            for rule in self.rules.abac.rules:
                if action in rule.allow and self._evaluate_rule(
                    rule.if_condition, principal, target
                ):
                    return True

        return False

    def _evaluate_rule(
        self,
        condition: dict[str, Any],
        principal: Principal,
        target: Target,
    ) -> bool:
        """
        Evaluate condition predicates from rules.yaml.
        Supported predicates:
        - role_in: list[str]
        - owns_course: bool
        - acts_on_self: bool
        """
        for predicate, args in condition.items():
            if predicate == "role_in":
                if principal.role not in args:
                    return False

            elif predicate == "owns_course":
                if args:
                    if target.course is None:
                        return False
                    if target.course.instructor_id != principal.id:
                        return False

            elif predicate == "acts_on_self":
                if args:
                    if target.student_id is None or target.student_id != principal.id:
                        return False

            else:
                # Unknown predicates never grant access
                return False

        return True


class AccessGuard:
    """
    Single entry point for authorization decisions.

    Services call ``require`` once per operation before touching storage, so a
    rejected call never has side effects.
    """

    def __init__(self, policy: PolicyEngine):
        self.policy = policy

    def allows(self, principal: Principal, action: str, target: Target | None = None) -> bool:
        return self.policy.check_permission(principal, action, target)

    def require(self, principal: Principal, action: str, target: Target | None = None) -> None:
        if not self.policy.check_permission(principal, action, target):
            raise AuthorizationError(action=action)
