"""
Groth16 바이트 인코딩
======================

모든 좌표는 32바이트 빅엔디안 정수로 인코딩한다.
G2 좌표는 (x0, x1, y0, y1) 순서 (FQ2 원소의 c0, c1 순서).

  증명(proof) 블롭      : A(64) | B(128) | C(64)                = 256 바이트
  제출(submission) 블롭 : proof(256) | public_input(32)        = 288 바이트
  검증 키(vk)           : α(64) | β(128) | γ(128) | δ(128)
                          | IC₀(64) | IC₁(64)                  = 576 바이트

검증 키는 base64 문자열로도 내보낸다 (외부 배포용 형식).
"""

import base64
import binascii
import json

from zkmanager.errors import CurveOperationFailed, InvalidProof
from zkmanager.groth16 import curve
from zkmanager.groth16.verifying import Proof, VerifyingKey, check_proof, verify

WORD = 32
G1_SIZE = 2 * WORD
G2_SIZE = 4 * WORD
PROOF_SIZE = G1_SIZE + G2_SIZE + G1_SIZE
SUBMISSION_SIZE = PROOF_SIZE + WORD
VK_SIZE = G1_SIZE + 3 * G2_SIZE + 2 * G1_SIZE


def _words(data):
    return [int.from_bytes(data[i:i + WORD], "big") for i in range(0, len(data), WORD)]


def _pack(values):
    return b"".join(int(v).to_bytes(WORD, "big") for v in values)


def _g1_words(point):
    return list(point)


def _g2_words(point):
    (x0, x1), (y0, y1) = point
    return [x0, x1, y0, y1]


def _g1_from(words):
    return (words[0], words[1])


def _g2_from(words):
    return ((words[0], words[1]), (words[2], words[3]))


# ─── Proof ───

def proof_to_bytes(proof):
    return _pack(_g1_words(proof.a) + _g2_words(proof.b) + _g1_words(proof.c))


def proof_from_bytes(data):
    """256바이트 블롭 → Proof. 길이/좌표/곡선 검사 실패 시 InvalidProof."""
    data = bytes(data)
    if len(data) != PROOF_SIZE:
        raise InvalidProof("proof must be {} bytes, got {}".format(PROOF_SIZE, len(data)))
    w = _words(data)
    proof = Proof(_g1_from(w[0:2]), _g2_from(w[2:6]), _g1_from(w[6:8]))
    check_proof(proof)
    return proof


def encode_submission(proof, public_input):
    """증명 + 공개 입력 → 배치 검증기에 넘기는 288바이트 블롭."""
    return proof_to_bytes(proof) + _pack([curve.scalar(public_input)])


def decode_submission(data):
    """288바이트 블롭 → (Proof, public_input)."""
    data = bytes(data)
    if len(data) != SUBMISSION_SIZE:
        raise InvalidProof("submission must be {} bytes, got {}".format(SUBMISSION_SIZE, len(data)))
    proof = proof_from_bytes(data[:PROOF_SIZE])
    public_input = int.from_bytes(data[PROOF_SIZE:], "big")
    if public_input >= curve.CURVE_ORDER:
        raise InvalidProof("public input is not a scalar field element")
    return proof, public_input


def proof_to_base64(proof):
    return base64.b64encode(proof_to_bytes(proof)).decode("ascii")


def proof_from_base64(text):
    try:
        raw = base64.b64decode(text, validate=True)
    except (binascii.Error, ValueError, TypeError) as exc:
        raise InvalidProof("proof is not valid base64") from exc
    return proof_from_bytes(raw)


def verify_proof_string(proof_base64, public_input, vk):
    """base64 증명 문자열을 디코딩하여 검증한다. 디코딩 실패는 False."""
    try:
        proof = proof_from_base64(proof_base64)
    except InvalidProof:
        return False
    return verify(vk, proof, public_input)


# ─── Verifying key ───

def vk_to_bytes(vk):
    words = (_g1_words(vk.alpha) + _g2_words(vk.beta) + _g2_words(vk.gamma)
             + _g2_words(vk.delta) + _g1_words(vk.gamma_abc[0]) + _g1_words(vk.gamma_abc[1]))
    return _pack(words)


def vk_from_bytes(data):
    data = bytes(data)
    if len(data) != VK_SIZE:
        raise CurveOperationFailed("verifying key must be {} bytes, got {}".format(VK_SIZE, len(data)))
    w = _words(data)
    return VerifyingKey(
        alpha=_g1_from(w[0:2]),
        beta=_g2_from(w[2:6]),
        gamma=_g2_from(w[6:10]),
        delta=_g2_from(w[10:14]),
        gamma_abc=[_g1_from(w[14:16]), _g1_from(w[16:18])],
    )


def vk_to_base64(vk):
    return base64.b64encode(vk_to_bytes(vk)).decode("ascii")


def vk_from_base64(text):
    try:
        raw = base64.b64decode(text, validate=True)
    except (binascii.Error, ValueError, TypeError) as exc:
        raise CurveOperationFailed("verifying key is not valid base64") from exc
    return vk_from_bytes(raw)


def vk_params(vk):
    """온체인 검증기 생성자 인자 형태로 검증 키를 펼친다 (값은 십진 문자열)."""
    (bx, by), (gx, gy), (dx, dy) = vk.beta, vk.gamma, vk.delta
    (a0x, a0y), (a1x, a1y) = vk.gamma_abc
    return {
        "alpha_x": str(vk.alpha[0]),
        "alpha_y": str(vk.alpha[1]),
        "beta_x": [str(c) for c in bx],
        "beta_y": [str(c) for c in by],
        "gamma_x": [str(c) for c in gx],
        "gamma_y": [str(c) for c in gy],
        "delta_x": [str(c) for c in dx],
        "delta_y": [str(c) for c in dy],
        "gamma_abc0_x": str(a0x),
        "gamma_abc0_y": str(a0y),
        "gamma_abc1_x": str(a1x),
        "gamma_abc1_y": str(a1y),
    }


def load_vk(path):
    """JSON 파일 {"vk": base64}에서 검증 키를 읽는다."""
    with open(path, "r") as f:
        data = json.load(f)
    if not isinstance(data, dict) or not isinstance(data.get("vk"), str):
        raise CurveOperationFailed("{} does not hold a base64 verifying key".format(path))
    return vk_from_base64(data["vk"])


def save_vk(vk, path):
    with open(path, "w") as f:
        json.dump({"vk": vk_to_base64(vk)}, f)
