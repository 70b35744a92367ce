"""
Groth16 데이터 직렬화/역직렬화 헬퍼
=====================================

TinyDB 행과 HTTP JSON 본문에 넣을 수 있는 형태로 변환한다.
정수는 십진 문자열로 저장한다 (JSON 숫자 정밀도 문제 회피).
"""

from zkmanager.groth16.verifying import Proof, VerifyingKey


# ─── G1 point ───

def serialize_g1(point):
    """(x, y) → [str, str]"""
    return [str(int(point[0])), str(int(point[1]))]


def deserialize_g1(data):
    """[str, str] → (x, y)"""
    return (int(data[0]), int(data[1]))


# ─── G2 point ───

def serialize_g2(point):
    """((x0, x1), (y0, y1)) → [[str,str],[str,str]]"""
    return [
        [str(int(point[0][0])), str(int(point[0][1]))],
        [str(int(point[1][0])), str(int(point[1][1]))]
    ]


def deserialize_g2(data):
    """[[str,str],[str,str]] → ((x0, x1), (y0, y1))"""
    return (
        (int(data[0][0]), int(data[0][1])),
        (int(data[1][0]), int(data[1][1]))
    )


# ─── Proof ───

def serialize_proof(proof):
    return {
        "a": serialize_g1(proof.a),
        "b": serialize_g2(proof.b),
        "c": serialize_g1(proof.c),
    }


def deserialize_proof(data):
    return Proof(
        deserialize_g1(data["a"]),
        deserialize_g2(data["b"]),
        deserialize_g1(data["c"]),
    )


# ─── VerifyingKey ───

def serialize_vk(vk):
    return {
        "alpha": serialize_g1(vk.alpha),
        "beta": serialize_g2(vk.beta),
        "gamma": serialize_g2(vk.gamma),
        "delta": serialize_g2(vk.delta),
        "gamma_abc": [serialize_g1(p) for p in vk.gamma_abc],
    }


def deserialize_vk(data):
    return VerifyingKey(
        alpha=deserialize_g1(data["alpha"]),
        beta=deserialize_g2(data["beta"]),
        gamma=deserialize_g2(data["gamma"]),
        delta=deserialize_g2(data["delta"]),
        gamma_abc=[deserialize_g1(p) for p in data["gamma_abc"]],
    )


# ─── Event ───

def serialize_event(event):
    return {"seq": event.seq, "name": event.name, "args": dict(event.args)}


