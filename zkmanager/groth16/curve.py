"""
Groth16 곡선 연산: bn128 (BN254) 위의 군 연산과 페어링 곱
==========================================================

검증기가 사용하는 모든 타원곡선 연산을 정의한다.

**점 표현**:
  외부 데이터 모델은 정수 좌표를 쓴다.
  - G1 점: (x, y)                (0, 0)은 항등원(무한원점)
  - G2 점: ((x0, x1), (y0, y1))  모두 0이면 항등원
  G2 좌표는 FQ2 원소 c0 + c1·i 를 (c0, c1) 순서로 적는다.
  내부적으로는 py_ecc.bn128의 아핀 좌표 튜플로 변환하며, py_ecc에서
  항등원은 None이다.

**검증 규칙**:
  - 좌표는 반드시 [0, p) 범위 (p: 기저체 위수)
  - G1/G2 점은 각자의 곡선 위에 있어야 함
  - G2 점은 위수 r 부분군에 속해야 함 (BN254 twist는 cofactor가 1이 아님)
  위반 시 CurveOperationFailed. 기본값으로 대체하지 않는다.

**페어링 곱**:
  ∏ e(P_i, Q_i) == 1 (GT의 항등원) 인지 검사한다.
  py_ecc.bn128.pairing은 최종 거듭제곱까지 마친 GT 원소를 돌려주므로
  각 쌍의 페어링 값을 그대로 곱해서 FQ12.one()과 비교한다.

사용 예시:
    >>> P = scalar_mul(G1_GENERATOR, 5)
    >>> add(P, negate(P)) == G1_IDENTITY   # True
    >>> pairing_product([P, negate(P)], [G2_GENERATOR, G2_GENERATOR])   # True
"""

from functools import lru_cache

from py_ecc import bn128
from py_ecc.fields import bn128_FQ as FQ
from py_ecc.fields import bn128_FQ2 as FQ2
from py_ecc.fields import bn128_FQ12 as FQ12

from zkmanager.errors import CurveOperationFailed, LengthMismatch


# ─────────────────────────────────────────────────────────────────────
# 상수
# ─────────────────────────────────────────────────────────────────────

# 기저체 위수 p (254비트 소수)
FIELD_MODULUS = bn128.field_modulus

# 스칼라체 위수 r (군의 위수)
CURVE_ORDER = bn128.curve_order

G1_IDENTITY = (0, 0)
G2_IDENTITY = ((0, 0), (0, 0))


class FR(FQ):
    """bn128 스칼라 필드 원소 (공개 입력, 스칼라)."""
    field_modulus = bn128.curve_order


def field_element(value):
    """정수를 기저체 원소로 환원한다: [0, p)."""
    return int(value) % FIELD_MODULUS


def scalar(value):
    """정수를 스칼라체 원소로 환원한다: [0, r)."""
    return int(value) % CURVE_ORDER


# ─────────────────────────────────────────────────────────────────────
# py_ecc 표현과의 변환
# ─────────────────────────────────────────────────────────────────────

def _coord(value):
    v = int(value)
    if v < 0 or v >= FIELD_MODULUS:
        raise CurveOperationFailed("coordinate out of field range: {}".format(v))
    return v


def _as_g1(point):
    try:
        x, y = point
        return (int(x), int(y))
    except (TypeError, ValueError) as exc:
        raise CurveOperationFailed("malformed G1 point: {!r}".format(point)) from exc


def _as_g2(point):
    try:
        (x0, x1), (y0, y1) = point
        return ((int(x0), int(x1)), (int(y0), int(y1)))
    except (TypeError, ValueError) as exc:
        raise CurveOperationFailed("malformed G2 point: {!r}".format(point)) from exc


@lru_cache(maxsize=1024)
def _g1_to_ecc(point):
    x, y = _coord(point[0]), _coord(point[1])
    if x == 0 and y == 0:
        return None
    pt = (FQ(x), FQ(y))
    if not bn128.is_on_curve(pt, bn128.b):
        raise CurveOperationFailed("point is not on G1: {!r}".format(point))
    return pt


def _in_g2_subgroup(pt):
    # r·Q 가 무한원점이면 위수 r 부분군의 원소
    try:
        return bn128.multiply(pt, CURVE_ORDER) is None
    except (TypeError, ValueError, ZeroDivisionError):
        # 중간 배수가 무한원점에 닿음 → 위수가 r이 아님
        return False


@lru_cache(maxsize=256)
def _g2_to_ecc(point):
    (x0, x1), (y0, y1) = point
    coords = [_coord(c) for c in (x0, x1, y0, y1)]
    if not any(coords):
        return None
    pt = (FQ2([coords[0], coords[1]]), FQ2([coords[2], coords[3]]))
    if not bn128.is_on_curve(pt, bn128.b2):
        raise CurveOperationFailed("point is not on the G2 twist: {!r}".format(point))
    if not _in_g2_subgroup(pt):
        raise CurveOperationFailed("point is not in the G2 subgroup: {!r}".format(point))
    return pt


def to_ecc_g1(point):
    """정수 좌표 G1 점 → py_ecc 점 (항등원은 None). 검증 실패 시 CurveOperationFailed."""
    return _g1_to_ecc(_as_g1(point))


def to_ecc_g2(point):
    """정수 좌표 G2 점 → py_ecc 점 (항등원은 None). 검증 실패 시 CurveOperationFailed."""
    return _g2_to_ecc(_as_g2(point))


def from_ecc_g1(pt):
    if pt is None:
        return G1_IDENTITY
    return (int(pt[0]), int(pt[1]))


def from_ecc_g2(pt):
    if pt is None:
        return G2_IDENTITY
    return (
        (int(pt[0].coeffs[0]), int(pt[0].coeffs[1])),
        (int(pt[1].coeffs[0]), int(pt[1].coeffs[1])),
    )


def is_on_curve_g1(point):
    try:
        to_ecc_g1(point)
    except CurveOperationFailed:
        return False
    return True


def is_on_curve_g2(point):
    try:
        to_ecc_g2(point)
    except CurveOperationFailed:
        return False
    return True


G1_GENERATOR = from_ecc_g1(bn128.G1)
G2_GENERATOR = from_ecc_g2(bn128.G2)


# ─────────────────────────────────────────────────────────────────────
# 군 연산
# ─────────────────────────────────────────────────────────────────────

def negate(point):
    """G1 점의 역원: (x, p - y mod p). 항등원은 그대로 반환한다."""
    x, y = _as_g1(point)
    if x == 0 and y == 0:
        return G1_IDENTITY
    return (x, field_element(FIELD_MODULUS - y))


def add(p1, p2):
    """G1 점 덧셈: p1 + p2."""
    return from_ecc_g1(bn128.add(to_ecc_g1(p1), to_ecc_g1(p2)))


def scalar_mul(point, s):
    """G1 스칼라 곱셈: s·point. 스칼라는 r로 환원한다."""
    pt = to_ecc_g1(point)
    k = scalar(s)
    if pt is None or k == 0:
        return G1_IDENTITY
    return from_ecc_g1(bn128.multiply(pt, k))


def pairing_product(g1_points, g2_points):
    """∏ e(g1_points[i], g2_points[i]) 가 GT의 항등원이면 True.

    Args:
        g1_points: G1 점 리스트
        g2_points: 같은 길이의 G2 점 리스트

    Raises:
        LengthMismatch: 두 리스트의 길이가 다를 때
        CurveOperationFailed: 곡선/부분군 밖의 점이 있을 때

    주의:
        py_ecc.bn128.pairing의 인자 순서는 (G2, G1)이다.
        항등원이 포함된 쌍은 e(·,·) = 1 이므로 건너뛴다.
    """
    g1_points = list(g1_points)
    g2_points = list(g2_points)
    if len(g1_points) != len(g2_points):
        raise LengthMismatch(
            "pairing input length mismatch: {} G1 vs {} G2".format(len(g1_points), len(g2_points)))

    acc = FQ12.one()
    for p, q in zip(g1_points, g2_points):
        p_ecc = to_ecc_g1(p)
        q_ecc = to_ecc_g2(q)
        if p_ecc is None or q_ecc is None:
            continue
        acc = acc * bn128.pairing(q_ecc, p_ecc)
    return acc == FQ12.one()
