"""
역할 기반 접근 제어
====================

세 개의 독립된 역할 집합을 관리한다.

  - admin      : 모든 역할 검사를 통과하는 상위 역할
  - authority  : 검증기 주소 변경, authority 멤버 변경
  - maintainer : 업그레이드 실행

역할 상속 계층은 없다. 각 호출마다 "해당 역할 ∪ admin" 멤버십을
술어(predicate)로 평가한다. 검사는 상태를 바꾸지 않는다.
"""

from zkmanager.errors import AccessDenied

ADMIN = "admin"
AUTHORITY = "authority"
MAINTAINER = "maintainer"

ROLES = (ADMIN, AUTHORITY, MAINTAINER)


def to_identity(value):
    """주소/식별자를 정규화한다 (공백 제거, 소문자)."""
    if not isinstance(value, str) or not value.strip():
        raise ValueError("identity must be a non-empty string, got {!r}".format(value))
    return value.strip().lower()


class AccessControl:
    """역할 집합 스냅샷 위의 권한 술어.

    Args:
        members: {role: iterable of identity}
    """

    def __init__(self, members=None):
        members = members or {}
        self._members = {
            role: frozenset(to_identity(m) for m in members.get(role, ()))
            for role in ROLES
        }

    def members(self, role):
        return self._members[role]

    def has_role(self, role, identity):
        return to_identity(identity) in self._members[role]

    def is_admin(self, identity):
        return self.has_role(ADMIN, identity)

    def is_authority(self, identity):
        return self.has_role(AUTHORITY, identity)

    def is_maintainer(self, identity):
        return self.has_role(MAINTAINER, identity)

    def has_authority_or_admin(self, identity):
        return self.is_authority(identity) or self.is_admin(identity)

    def has_maintainer_or_admin(self, identity):
        return self.is_maintainer(identity) or self.is_admin(identity)

    # ── 검사 (실패 시 AccessDenied) ──

    def require_admin(self, caller, action):
        if not self.is_admin(caller):
            raise AccessDenied(caller, action)

    def require_authority_or_admin(self, caller, action):
        if not self.has_authority_or_admin(caller):
            raise AccessDenied(caller, action)

    def require_maintainer_or_admin(self, caller, action):
        if not self.has_maintainer_or_admin(caller):
            raise AccessDenied(caller, action)

    def with_members(self, role, members):
        """role 집합만 바꾼 새 스냅샷을 반환한다."""
        snapshot = {r: self._members[r] for r in ROLES}
        snapshot[role] = frozenset(to_identity(m) for m in members)
        return AccessControl(snapshot)
