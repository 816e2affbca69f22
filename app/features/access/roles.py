from enum import Enum
from typing import FrozenSet, Optional

class RoleName(str, Enum):
    SUPER_ADMIN = "Super Admin"
    ADMIN = "Admin"
    MANAGER = "Manager"
    EMPLOYEE = "Employee"

    @classmethod
    def parse(cls, value) -> Optional["RoleName"]:
        """Exact, case-sensitive lookup. Unknown names resolve to None."""
        try:
            return cls(value)
        except ValueError:
            return None

# role -> every role it dominates, itself included
DOMINATES = {
    RoleName.SUPER_ADMIN: frozenset({RoleName.SUPER_ADMIN, RoleName.ADMIN, RoleName.MANAGER, RoleName.EMPLOYEE}),
    RoleName.ADMIN: frozenset({RoleName.ADMIN, RoleName.MANAGER, RoleName.EMPLOYEE}),
    RoleName.MANAGER: frozenset({RoleName.MANAGER, RoleName.EMPLOYEE}),
    RoleName.EMPLOYEE: frozenset({RoleName.EMPLOYEE}),
}

def dominates(role: RoleName, other: RoleName) -> bool:
    return other in DOMINATES[role]

def roles_at_least(role: RoleName) -> FrozenSet[RoleName]:
    return frozenset(candidate for candidate in DOMINATES if dominates(candidate, role))

SUPER_ADMIN_ONLY = roles_at_least(RoleName.SUPER_ADMIN)
ADMIN_OR_ABOVE = roles_at_least(RoleName.ADMIN)
MANAGER_OR_ABOVE = roles_at_least(RoleName.MANAGER)

# Role a self-registered account must resolve to (compared case-insensitively)
SELF_REGISTRATION_ROLE = RoleName.EMPLOYEE
