"""
관리자 상태 저장소 (TinyDB)

테이블:
  state  : {"type": key, "value": value}   (verifier_address, upgrade_target, proof_counter)
  roles  : {"role": role, "members": [...]}
  events : {"seq": n, "name": ..., "args": {...}}

한 연산의 모든 쓰기는 commit() 한 번으로 반영한다. 검사와 외부 호출이
모두 끝나기 전에는 저장소를 건드리지 않는다.
"""

from tinydb import TinyDB, Query
from tinydb.storages import MemoryStorage

from zkmanager.manager.access import ROLES
from zkmanager.manager.events import Event

DATA = Query()


class ManagerStore:

    def __init__(self, path=None):
        if path:
            self.db = TinyDB(path)
        else:
            self.db = TinyDB(storage=MemoryStorage)
        self.state_table = self.db.table("state")
        self.roles_table = self.db.table("roles")
        self.events_table = self.db.table("events")

    def is_initialized(self):
        return bool(self.state_table.search(DATA.type == "verifier_address"))

    def get(self, key, default=None):
        rows = self.state_table.search(DATA.type == key)
        if not rows:
            return default
        return rows[0]["value"]

    def roles(self):
        members = {role: [] for role in ROLES}
        for row in self.roles_table.all():
            members[row["role"]] = list(row["members"])
        return members

    def events(self, name=None):
        rows = self.events_table.all() if name is None else self.events_table.search(DATA.name == name)
        return sorted(
            (Event(row["name"], row["args"], row["seq"]) for row in rows),
            key=lambda e: e.seq,
        )

    def commit(self, state=None, roles=None, events=()):
        """상태/역할/이벤트를 한 번에 기록하고 순번이 매겨진 이벤트를 반환한다."""
        for key, value in (state or {}).items():
            self.state_table.upsert({"type": key, "value": value}, DATA.type == key)
        for role, members in (roles or {}).items():
            self.roles_table.upsert({"role": role, "members": sorted(members)}, DATA.role == role)

        committed = []
        seq = len(self.events_table)
        for event in events:
            event = Event(event.name, event.args, seq)
            self.events_table.insert({"seq": seq, "name": event.name, "args": event.args})
            committed.append(event)
            seq += 1
        return committed

    def close(self):
        self.db.close()
