"""
관리자 알림(이벤트)

커밋된 상태 변경마다 하나씩 기록된다. 실패한 호출은 이벤트를 남기지 않는다.
"""

VERIFIER_CHANGED = "VerifierChanged"
AUTHORITY_ADDED = "AuthorityAdded"
AUTHORITY_REMOVED = "AuthorityRemoved"
MAINTAINER_ADDED = "MaintainerAdded"
MAINTAINER_REMOVED = "MaintainerRemoved"
PROOF_ACCEPTED = "ProofAccepted"
PROOF_REJECTED = "ProofRejected"
CONTRACT_UPGRADED = "ContractUpgraded"


class Event:
    """알림 한 건.

    속성:
        name: 이벤트 이름 (예: "ProofAccepted")
        args: 이벤트 인자 dict (식별자, 주소, 결과 등)
        seq: 커밋 순번 (커밋 전에는 None)
    """

    def __init__(self, name, args, seq=None):
        self.name = name
        self.args = dict(args)
        self.seq = seq

    def __eq__(self, other):
        if not isinstance(other, Event):
            return NotImplemented
        return (self.name, self.args, self.seq) == (other.name, other.args, other.seq)

    def __repr__(self):
        return "Event(#{} {} {})".format(self.seq, self.name, self.args)
