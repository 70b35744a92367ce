"""
일회성 업그레이드 상태 기계
============================

  Active ──upgrade(target)──▶ Upgraded(target)   (종료 상태, 되돌릴 수 없음)

**2단계 상태 확인 핸드셰이크** (대상 컨트랙트는 confirm_state / import_state 제공):

  1. target.confirm_state(counter)  오류: ConfirmStateFailed
  2. True 이면 이미 같은 상태 → 4로
  3. target.import_state(counter)   오류: ImportStateFailed
     target.confirm_state(counter)  오류: PostImportConfirmFailed
                                            False: StateConfirmationMismatch
  4. Upgraded(target)

핸드셰이크가 실패하면 관리자 상태는 Active 그대로 남는다.
실패 알림은 로그로만 남긴다 (커밋된 이벤트 로그에는 기록하지 않음).
"""

import logging

from zkmanager.errors import (
    AlreadyUpgraded,
    ConfirmStateFailed,
    ImportStateFailed,
    PostImportConfirmFailed,
    StateConfirmationMismatch,
)

logger = logging.getLogger(__name__)

ACTIVE = "active"
UPGRADED = "upgraded"


class UpgradeState:
    """Active | Upgraded(target)"""

    def __init__(self, target=None):
        self.target = target

    @property
    def status(self):
        return ACTIVE if self.target is None else UPGRADED

    @property
    def is_upgraded(self):
        return self.target is not None

    def ensure_active(self):
        if self.target is not None:
            raise AlreadyUpgraded(self.target)

    def __repr__(self):
        if self.target is None:
            return "Active"
        return "Upgraded({})".format(self.target)


def _call(error_cls, address, fn, *args):
    try:
        return fn(*args)
    except Exception as exc:
        logger.warning("upgrade handshake with %s failed: %s: %s",
                       address, error_cls.__name__, exc)
        raise error_cls(address, str(exc)) from exc


def run_handshake(address, target, counter):
    """대상이 counter와 같은 상태를 갖도록 확인/이전한다.

    Returns:
        bool: import_state가 호출되었으면 True
    """
    confirmed = _call(ConfirmStateFailed, address, target.confirm_state, counter)
    if confirmed is True:
        logger.info("target %s already holds proof counter %d", address, counter)
        return False

    _call(ImportStateFailed, address, target.import_state, counter)

    confirmed = _call(PostImportConfirmFailed, address, target.confirm_state, counter)
    if confirmed is not True:
        logger.warning("upgrade handshake with %s failed: state mismatch after import", address)
        raise StateConfirmationMismatch(address, "confirm_state returned {!r}".format(confirmed))
    return True
