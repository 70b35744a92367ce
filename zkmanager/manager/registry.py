"""
주소 → 컨트랙트 객체 레지스트리

관리자는 검증기 주소와 업그레이드 대상 주소를 이 레지스트리로 해석한다.
등록되지 않은 주소로의 호출은 실패한 외부 호출로 취급된다.
"""

import logging

from zkmanager.manager.access import to_identity

logger = logging.getLogger(__name__)


class ContractNotFound(LookupError):
    pass


class ContractRegistry:

    def __init__(self):
        self._contracts = {}

    def register(self, address, contract):
        address = to_identity(address)
        self._contracts[address] = contract
        logger.info("registered %s at %s", type(contract).__name__, address)
        return address

    def resolve(self, address):
        address = to_identity(address)
        try:
            return self._contracts[address]
        except KeyError:
            raise ContractNotFound("no contract registered at {}".format(address)) from None

    def __contains__(self, address):
        return to_identity(address) in self._contracts
