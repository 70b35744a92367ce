"""
Groth16 Verifier (공개 입력 1개)
==================================

**검증 방정식**:
  e(A, B) = e(α, β) · e(X, γ) · e(C, δ)
  X = gamma_abc[0] + input · gamma_abc[1]

  한 번의 페어링 곱 검사로 바꿔 쓰면:
  e(A, B) · e(-α, β) · e(-X, γ) · e(-C, δ) == 1

**키 구조**:
  gamma_abc는 정확히 2개: [0]은 상수항(wire "one"),
  [1]은 공개 입력의 계수이다.

증명 점이 잘못된 경우(범위 초과, 곡선 밖)는 예외 대신 False를 반환한다.

사용 예시:
    >>> vk = VerifyingKey(alpha, beta, gamma, delta, [abc0, abc1])
    >>> verify(vk, Proof(a, b, c), 30)
"""

import logging

from zkmanager.errors import CurveOperationFailed, InvalidProof
from zkmanager.groth16 import curve

logger = logging.getLogger(__name__)


class VerifyingKey:
    """Groth16 검증 키. 생성 시 모든 점을 검사하며 이후 변경하지 않는다.

    속성:
        alpha: G1 점 [α]₁
        beta, gamma, delta: G2 점 [β]₂, [γ]₂, [δ]₂
        gamma_abc: [IC₀, IC₁] G1 점 2개
    """

    __slots__ = ("alpha", "beta", "gamma", "delta", "gamma_abc")

    def __init__(self, alpha, beta, gamma, delta, gamma_abc):
        gamma_abc = tuple(gamma_abc)
        if len(gamma_abc) != 2:
            raise CurveOperationFailed(
                "verifying key must have exactly 2 gamma_abc points, got {}".format(len(gamma_abc)))

        values = {
            "alpha": curve.from_ecc_g1(curve.to_ecc_g1(alpha)),
            "beta": curve.from_ecc_g2(curve.to_ecc_g2(beta)),
            "gamma": curve.from_ecc_g2(curve.to_ecc_g2(gamma)),
            "delta": curve.from_ecc_g2(curve.to_ecc_g2(delta)),
            "gamma_abc": tuple(curve.from_ecc_g1(curve.to_ecc_g1(p)) for p in gamma_abc),
        }
        for name, value in values.items():
            object.__setattr__(self, name, value)

    def __setattr__(self, name, value):
        raise AttributeError("VerifyingKey is immutable")

    def __eq__(self, other):
        if not isinstance(other, VerifyingKey):
            return NotImplemented
        return all(getattr(self, k) == getattr(other, k) for k in self.__slots__)

    def __hash__(self):
        return hash(tuple(getattr(self, k) for k in self.__slots__))

    def __repr__(self):
        return "VerifyingKey(alpha={})".format(self.alpha)


class Proof:
    """Groth16 증명 (A ∈ G1, B ∈ G2, C ∈ G1)."""

    def __init__(self, a, b, c):
        self.a = a
        self.b = b
        self.c = c

    def __eq__(self, other):
        if not isinstance(other, Proof):
            return NotImplemented
        return (self.a, self.b, self.c) == (other.a, other.b, other.c)

    def __repr__(self):
        return "Proof(a={}, b={}, c={})".format(self.a, self.b, self.c)


def check_proof(proof):
    """증명 점을 검사하고 정규화된 (A, B, C)를 반환한다.

    Raises:
        InvalidProof: 좌표 범위 초과, 곡선 밖, G2 부분군 밖의 점
    """
    try:
        a = curve.from_ecc_g1(curve.to_ecc_g1(proof.a))
        b = curve.from_ecc_g2(curve.to_ecc_g2(proof.b))
        c = curve.from_ecc_g1(curve.to_ecc_g1(proof.c))
    except CurveOperationFailed as exc:
        raise InvalidProof(str(exc)) from exc
    return a, b, c


def public_linear_combination(vk, public_input):
    """X = gamma_abc[0] + input · gamma_abc[1]"""
    return curve.add(vk.gamma_abc[0], curve.scalar_mul(vk.gamma_abc[1], public_input))


def verify(vk, proof, public_input):
    """단일 공개 입력 Groth16 증명을 검증한다.

    Args:
        vk: VerifyingKey
        proof: Proof
        public_input: 공개 입력 (정수 또는 FR, r로 환원)

    Returns:
        bool: 페어링 방정식이 성립하면 True
    """
    try:
        a, b, c = check_proof(proof)
    except InvalidProof as exc:
        logger.debug("rejecting malformed proof: %s", exc)
        return False

    x = public_linear_combination(vk, curve.scalar(public_input))

    ok = curve.pairing_product(
        [a, curve.negate(vk.alpha), curve.negate(x), curve.negate(c)],
        [b, vk.beta, vk.gamma, vk.delta],
    )
    if not ok:
        logger.debug("pairing check failed for public input %s", int(public_input))
    return ok
