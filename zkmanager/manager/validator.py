"""
Groth16 배치 검증기

관리자가 위임하는 검증기 인터페이스는 하나뿐이다:

    validate(proofs) -> [bool]   # 입력과 같은 길이, 같은 순서

각 항목은 제출 블롭(증명 256바이트 + 공개 입력 32바이트)이다.
형식이 잘못된 블롭은 False로 보고하며 배치 전체를 중단시키지 않는다.
"""

import base64
import binascii
import logging

from zkmanager.errors import InvalidProof
from zkmanager.groth16.encoding import decode_submission
from zkmanager.groth16.verifying import verify

logger = logging.getLogger(__name__)


def _as_bytes(blob):
    if isinstance(blob, (bytes, bytearray, memoryview)):
        return bytes(blob)
    if isinstance(blob, str):
        try:
            return base64.b64decode(blob, validate=True)
        except (binascii.Error, ValueError) as exc:
            raise InvalidProof("submission is not valid base64") from exc
    raise InvalidProof("unsupported submission type {}".format(type(blob).__name__))


class Groth16Validator:

    def __init__(self, vk):
        self.vk = vk

    def validate_one(self, blob):
        try:
            proof, public_input = decode_submission(_as_bytes(blob))
        except InvalidProof as exc:
            logger.debug("malformed submission: %s", exc)
            return False
        return verify(self.vk, proof, public_input)

    def validate(self, proofs):
        return [self.validate_one(blob) for blob in proofs]
