"""
ZK Manager: 배치 검증, 역할 관리, 일회성 업그레이드
=====================================================

**상태**:
  verifier_address : 현재 검증기 주소 (레지스트리로 해석)
  upgrade_target   : None(Active) 또는 후속 컨트랙트 주소(Upgraded, 종료)
  proof_counter    : 승인된 증명 수 (단조 증가)

**연산과 권한**:
  ┌──────────────────────────┬──────────────────────┐
  │ set_verifier             │ authority 또는 admin │
  │ add/remove_authority     │ authority 또는 admin │
  │ add/remove_maintainer    │ admin                │
  │ batch_validate           │ 누구나               │
  │ upgrade                  │ maintainer 또는 admin│
  └──────────────────────────┴──────────────────────┘
  업그레이드 이후에는 위 모든 변경 연산이 AlreadyUpgraded로 실패한다.

**원자성**:
  변경 연산은 락 아래에서 직렬 실행된다. 외부 호출 도중 같은 관리자의
  변경 연산을 다시 부르면 ReentrantCall로 거부된다. 권한 검사, 종료 상태 검사,
  외부 호출이 모두 성공한 뒤에만 store.commit()으로 상태와 이벤트를
  한 번에 기록한다. 실패한 호출은 아무것도 남기지 않는다.

**후속 컨트랙트 역할**:
  ZkManager는 confirm_state / import_state를 제공하므로 다른 관리자의
  업그레이드 대상이 될 수 있다.

사용 예시:
    >>> registry = ContractRegistry()
    >>> registry.register("0xverifier", Groth16Validator(vk))
    >>> manager = ZkManager("0xverifier", admins=["0xadmin"], registry=registry)
    >>> manager.batch_validate("0xanyone", [blob1, blob2])
    [True, False]
"""

import hashlib
import logging
import threading
from contextlib import contextmanager

from zkmanager.errors import VerifierCallFailed, ConfirmStateFailed, ReentrantCall
from zkmanager.manager import events as ev
from zkmanager.manager.access import (
    ADMIN, AUTHORITY, MAINTAINER, AccessControl, to_identity,
)
from zkmanager.manager.registry import ContractRegistry, ContractNotFound
from zkmanager.manager.store import ManagerStore
from zkmanager.manager.upgrade import UpgradeState, run_handshake

logger = logging.getLogger(__name__)


def _proof_hash(blob):
    if isinstance(blob, str):
        blob = blob.encode("utf-8")
    return hashlib.sha256(bytes(blob)).hexdigest()


class ZkManager:
    """역할로 보호되는 배치 검증 관리자.

    Args:
        verifier_address: 초기 검증기 주소
        admins: 초기 admin 식별자 목록
        registry: 주소 해석용 ContractRegistry
        authorities, maintainers: 초기 역할 멤버 (선택)
        store: ManagerStore (기본값: 메모리 저장소). 이미 초기화된 저장소면
               기존 상태를 그대로 이어서 사용한다.
    """

    def __init__(self, verifier_address, admins, registry=None,
                 authorities=(), maintainers=(), store=None):
        self._registry = registry if registry is not None else ContractRegistry()
        self._store = store if store is not None else ManagerStore()
        self._lock = threading.Lock()
        self._owner = None
        self._active = None
        self._subscribers = []

        if not self._store.is_initialized():
            self._store.commit(
                state={
                    "verifier_address": to_identity(verifier_address),
                    "upgrade_target": None,
                    "proof_counter": 0,
                },
                roles={
                    ADMIN: {to_identity(a) for a in admins},
                    AUTHORITY: {to_identity(a) for a in authorities},
                    MAINTAINER: {to_identity(m) for m in maintainers},
                },
            )
            logger.info("manager initialized with verifier %s", self.verifier_address)

    # ─────────────────────────────────────────────────────────────
    # 읽기 전용 접근자
    # ─────────────────────────────────────────────────────────────

    @property
    def registry(self):
        return self._registry

    @property
    def verifier_address(self):
        return self._store.get("verifier_address")

    @property
    def proof_counter(self):
        return self._store.get("proof_counter", 0)

    @property
    def upgrade_target(self):
        return self._store.get("upgrade_target")

    @property
    def upgrade_state(self):
        return UpgradeState(self.upgrade_target)

    @property
    def is_upgraded(self):
        return self.upgrade_target is not None

    @property
    def access(self):
        return AccessControl(self._store.roles())

    def is_admin(self, identity):
        return self.access.is_admin(identity)

    def is_authority(self, identity):
        return self.access.is_authority(identity)

    def is_maintainer(self, identity):
        return self.access.is_maintainer(identity)

    def state(self):
        return {
            "verifier_address": self.verifier_address,
            "upgrade_target": self.upgrade_target,
            "proof_counter": self.proof_counter,
            "status": self.upgrade_state.status,
        }

    def events(self, name=None):
        return self._store.events(name)

    def subscribe(self, callback):
        """커밋된 이벤트마다 callback(event)을 호출한다."""
        self._subscribers.append(callback)

    # ─────────────────────────────────────────────────────────────
    # 내부 도우미
    # ─────────────────────────────────────────────────────────────

    def _commit(self, state=None, roles=None, events=()):
        committed = self._store.commit(state=state, roles=roles, events=events)
        for event in committed:
            for callback in self._subscribers:
                try:
                    callback(event)
                except Exception:
                    logger.exception("event subscriber failed on %s", event.name)
        return committed

    @contextmanager
    def _operation(self, action):
        """변경 연산 하나를 직렬 실행한다.

        같은 스레드에서 진행 중인 연산 안으로 다시 들어오면 (검증기나 업그레이드
        대상이 관리자를 되부르는 경우) 기다리지 않고 ReentrantCall을 던진다.
        """
        if self._owner == threading.get_ident():
            raise ReentrantCall(action, self._active)
        with self._lock:
            self._owner = threading.get_ident()
            self._active = action
            try:
                yield
            finally:
                self._owner = None
                self._active = None

    def _guard(self, check, caller, action):
        """권한 검사 → 종료 상태 검사. 둘 다 상태를 바꾸지 않는다."""
        caller = to_identity(caller)
        access = self.access
        if check is not None:
            getattr(access, check)(caller, action)
        self.upgrade_state.ensure_active()
        return caller, access

    # ─────────────────────────────────────────────────────────────
    # 검증기 주소
    # ─────────────────────────────────────────────────────────────

    def set_verifier(self, caller, new_verifier):
        with self._operation("set_verifier"):
            caller, _ = self._guard("require_authority_or_admin", caller, "set_verifier")
            new_verifier = to_identity(new_verifier)
            previous = self.verifier_address
            self._commit(
                state={"verifier_address": new_verifier},
                events=[ev.Event(ev.VERIFIER_CHANGED, {
                    "caller": caller, "previous": previous, "verifier": new_verifier,
                })],
            )
        logger.info("verifier changed %s -> %s by %s", previous, new_verifier, caller)

    # ─────────────────────────────────────────────────────────────
    # 역할 변경
    # ─────────────────────────────────────────────────────────────

    def _change_role(self, caller, identities, role, adding, check, event_name, action):
        with self._operation(action):
            caller, access = self._guard(check, caller, action)
            identities = [to_identity(i) for i in identities]
            members = set(access.members(role))
            if adding:
                members.update(identities)
            else:
                members.difference_update(identities)
            updated = access.with_members(role, members)
            self._commit(
                roles={role: updated.members(role)},
                events=[ev.Event(event_name, {"caller": caller, "account": i}) for i in identities],
            )
        logger.info("%s %s by %s: %s", action, role, caller, ", ".join(identities))

    def add_authority(self, caller, identities):
        self._change_role(caller, identities, AUTHORITY, True,
                          "require_authority_or_admin", ev.AUTHORITY_ADDED, "add_authority")

    def remove_authority(self, caller, identities):
        self._change_role(caller, identities, AUTHORITY, False,
                          "require_authority_or_admin", ev.AUTHORITY_REMOVED, "remove_authority")

    def add_maintainer(self, caller, identities):
        self._change_role(caller, identities, MAINTAINER, True,
                          "require_admin", ev.MAINTAINER_ADDED, "add_maintainer")

    def remove_maintainer(self, caller, identities):
        self._change_role(caller, identities, MAINTAINER, False,
                          "require_admin", ev.MAINTAINER_REMOVED, "remove_maintainer")

    # ─────────────────────────────────────────────────────────────
    # 배치 검증
    # ─────────────────────────────────────────────────────────────

    def _call_verifier(self, address, proofs):
        try:
            verifier = self._registry.resolve(address)
            results = list(verifier.validate(list(proofs)))
        except Exception as exc:
            logger.warning("verifier call to %s failed: %s", address, exc)
            raise VerifierCallFailed(address, str(exc)) from exc

        if len(results) != len(proofs):
            raise VerifierCallFailed(
                address, "returned {} results for {} proofs".format(len(results), len(proofs)))
        if not all(isinstance(r, bool) for r in results):
            raise VerifierCallFailed(address, "returned non-boolean results")
        return results

    def batch_validate(self, caller, proofs):
        """증명 목록을 현재 검증기에 위임하고 결과를 집계한다.

        Returns:
            list[bool]: 입력 순서 그대로의 결과

        Raises:
            AlreadyUpgraded: 업그레이드 이후
            VerifierCallFailed: 위임 호출 자체가 실패 (카운터/이벤트 변화 없음)
        """
        proofs = list(proofs)
        with self._operation("batch_validate"):
            caller, _ = self._guard(None, caller, "batch_validate")
            address = self.verifier_address
            results = self._call_verifier(address, proofs)

            counter = self.proof_counter
            batch_events = []
            for index, (blob, ok) in enumerate(zip(proofs, results)):
                if ok:
                    counter += 1
                    batch_events.append(ev.Event(ev.PROOF_ACCEPTED, {
                        "caller": caller, "index": index,
                        "proof_hash": _proof_hash(blob), "proof_counter": counter,
                    }))
                else:
                    batch_events.append(ev.Event(ev.PROOF_REJECTED, {
                        "caller": caller, "index": index, "proof_hash": _proof_hash(blob),
                    }))
            self._commit(state={"proof_counter": counter}, events=batch_events)

        accepted = sum(results)
        logger.info("batch of %d from %s: %d accepted, %d rejected, counter=%d",
                    len(proofs), caller, accepted, len(proofs) - accepted, counter)
        return results

    # ─────────────────────────────────────────────────────────────
    # 업그레이드
    # ─────────────────────────────────────────────────────────────

    def upgrade(self, caller, target):
        """후속 컨트랙트로 권한을 넘긴다 (한 번만, 되돌릴 수 없음)."""
        with self._operation("upgrade"):
            caller, _ = self._guard("require_maintainer_or_admin", caller, "upgrade")
            target = to_identity(target)
            counter = self.proof_counter

            try:
                successor = self._registry.resolve(target)
            except ContractNotFound as exc:
                logger.warning("upgrade handshake with %s failed: %s", target, exc)
                raise ConfirmStateFailed(target, str(exc)) from exc
            if successor is self:
                logger.warning("upgrade handshake with %s failed: target is this manager", target)
                raise ConfirmStateFailed(target, "cannot upgrade a manager to itself")

            imported = run_handshake(target, successor, counter)
            self._commit(
                state={"upgrade_target": target},
                events=[ev.Event(ev.CONTRACT_UPGRADED, {
                    "caller": caller, "target": target, "proof_counter": counter,
                })],
            )
        logger.info("contract upgraded to %s by %s (state imported: %s)", target, caller, imported)

    # ─────────────────────────────────────────────────────────────
    # 후속 컨트랙트 쪽 핸드셰이크
    # ─────────────────────────────────────────────────────────────

    def confirm_state(self, counter):
        return self.proof_counter == int(counter)

    def import_state(self, counter):
        counter = int(counter)
        with self._operation("import_state"):
            self.upgrade_state.ensure_active()
            if counter < self.proof_counter:
                raise ValueError("proof counter cannot move backwards ({} < {})".format(
                    counter, self.proof_counter))
            self._commit(state={"proof_counter": counter})
        logger.info("imported proof counter %d", counter)
