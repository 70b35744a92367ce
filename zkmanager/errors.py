"""
검증/관리 계층 예외 정의
==========================

모든 예외는 ZkManagerError를 상속한다.

  - 암호 연산 계층: LengthMismatch, CurveOperationFailed, InvalidProof
  - 관리자 계층: AccessDenied, AlreadyUpgraded, VerifierCallFailed, ReentrantCall
  - 업그레이드 핸드셰이크: UpgradeFailed 및 하위 4종

거부된 증명(검증 결과 False)은 예외가 아니라 정상 결과이다.
"""


class ZkManagerError(Exception):
    """패키지 공통 기반 예외."""


# ── 암호 연산 ──

class LengthMismatch(ZkManagerError):
    """페어링 곱의 G1/G2 입력 길이가 다름."""


class CurveOperationFailed(ZkManagerError):
    """곡선 위에 있지 않은 점, 좌표 범위 초과 등 연산 실패."""


class InvalidProof(ZkManagerError):
    """증명 바이트열이나 증명 점의 형식이 잘못됨 (검증 결과는 False)."""


# ── 관리자 ──

class AccessDenied(ZkManagerError):

    def __init__(self, caller, action):
        super().__init__("{} is not allowed to {}".format(caller, action))
        self.caller = caller
        self.action = action


class AlreadyUpgraded(ZkManagerError):

    def __init__(self, target):
        super().__init__("contract already upgraded to {}".format(target))
        self.target = target


class VerifierCallFailed(ZkManagerError):

    def __init__(self, address, reason):
        super().__init__("verifier call to {} failed: {}".format(address, reason))
        self.address = address
        self.reason = reason


class ReentrantCall(ZkManagerError):
    """외부 호출(검증기, 업그레이드 대상)이 진행 중인 연산 안에서 관리자를 다시 호출함."""

    def __init__(self, action, active):
        super().__init__("{} called while {} is in progress".format(action, active))
        self.action = action
        self.active = active


# ── 업그레이드 핸드셰이크 ──

class UpgradeFailed(ZkManagerError):
    message = "upgrade failed"

    def __init__(self, target, reason=None):
        text = "{} ({})".format(self.message, target)
        if reason:
            text = "{}: {}".format(text, reason)
        super().__init__(text)
        self.target = target
        self.reason = reason


class ConfirmStateFailed(UpgradeFailed):
    message = "confirm_state call failed"


class ImportStateFailed(UpgradeFailed):
    message = "import_state call failed"


class PostImportConfirmFailed(UpgradeFailed):
    message = "confirm_state after import failed"


class StateConfirmationMismatch(UpgradeFailed):
    message = "target state does not match after import"
