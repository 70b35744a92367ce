import sys
import os
import pytest

# 프로젝트 루트를 sys.path에 추가
project_root = os.path.abspath(os.path.join(os.path.dirname(__file__), '..'))
if project_root not in sys.path:
    sys.path.insert(0, project_root)

from py_ecc import bn128

from zkmanager.groth16 import curve
from zkmanager.groth16.curve import FR
from zkmanager.groth16.encoding import encode_submission
from zkmanager.groth16.verifying import Proof, VerifyingKey


# ── 테스트 상수 ──
# 회로: a + b = c  (c 공개, a·b 비공개)
#   wire = [one, c, a, b]
#   단일 게이트 (a + b) · one = c
#   u_a = u_b = 1, v_one = 1, w_c = 1, h(x) = 0
WITNESS_A = 10
WITNESS_B = 20
PUBLIC_INPUT = 30

TOXIC_ALPHA = 3926
TOXIC_BETA = 3604
TOXIC_GAMMA = 2971
TOXIC_DELTA = 1357

PROVER_R = 4106
PROVER_S = 4565


def g1(k):
    return curve.scalar_mul(curve.G1_GENERATOR, int(k))


def g2(k):
    return curve.from_ecc_g2(bn128.multiply(bn128.G2, int(k)))


def make_proof(a, b, r=PROVER_R, s=PROVER_S):
    """위 toxic waste로 만든 키에 대한 Groth16 증명 (공개 입력 c = a + b)."""
    alpha, beta, delta = FR(TOXIC_ALPHA), FR(TOXIC_BETA), FR(TOXIC_DELTA)
    r, s = FR(r), FR(s)
    wires = FR(a) + FR(b)

    a_val = alpha + wires + r * delta
    b_val = beta + FR(1) + s * delta
    c_val = beta * wires / delta + s * a_val + r * b_val - r * s * delta
    return Proof(g1(a_val), g2(b_val), g1(c_val))


@pytest.fixture(scope="session")
def toxic():
    return {
        "alpha": FR(TOXIC_ALPHA), "beta": FR(TOXIC_BETA),
        "gamma": FR(TOXIC_GAMMA), "delta": FR(TOXIC_DELTA),
    }


@pytest.fixture(scope="session")
def vk(toxic):
    """검증 키: IC₀ = α/γ (wire one), IC₁ = 1/γ (wire c)."""
    alpha, gamma = toxic["alpha"], toxic["gamma"]
    return VerifyingKey(
        alpha=g1(alpha),
        beta=g2(toxic["beta"]),
        gamma=g2(gamma),
        delta=g2(toxic["delta"]),
        gamma_abc=[g1(alpha / gamma), g1(FR(1) / gamma)],
    )


@pytest.fixture(scope="session")
def proof():
    return make_proof(WITNESS_A, WITNESS_B)


@pytest.fixture(scope="session")
def valid_submission(proof):
    return encode_submission(proof, PUBLIC_INPUT)


@pytest.fixture(scope="session")
def wrong_input_submission(proof):
    return encode_submission(proof, PUBLIC_INPUT + 1)
