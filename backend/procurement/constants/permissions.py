"""Central enum-like definitions to avoid typos in permission/role strings.
Extend cautiously; never rename codes silently since issued tokens carry them.
"""
from __future__ import annotations
from typing import List, Dict, Optional

ROLE_ENGINEER = 'engineer'
ROLE_MANAGER = 'manager'
ALL_ROLES = (ROLE_ENGINEER, ROLE_MANAGER)

SERVICE_ACTIONS = {
    'ORDER': ['READ', 'CREATE', 'CLAIM', 'ADVANCE'],
    'COMMENT': ['READ', 'CREATE'],
    'USER': ['APPROVE'],
}


def build_all_permission_codes() -> List[str]:
    codes: List[str] = []
    for svc, actions in SERVICE_ACTIONS.items():
        for act in actions:
            codes.append(f"{svc}.{act}")
    return codes

ALL_PERMISSION_CODES = build_all_permission_codes()

_ENGINEER_PERMS = ['ORDER.READ', 'ORDER.CREATE', 'COMMENT.READ', 'COMMENT.CREATE']

ROLE_PERMISSIONS: Dict[str, List[str]] = {
    ROLE_ENGINEER: _ENGINEER_PERMS,
    # Manager: everything an engineer can do plus the pipeline and signup actions
    ROLE_MANAGER: _ENGINEER_PERMS + ['ORDER.CLAIM', 'ORDER.ADVANCE', 'USER.APPROVE'],
}


def permissions_for_role(role: Optional[str]) -> List[str]:
    """Users awaiting approval (role None) get no permissions at all."""
    if role is None:
        return []
    return sorted(ROLE_PERMISSIONS.get(role, []))
