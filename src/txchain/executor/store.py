"""Object stores backing the reference executor."""

from __future__ import annotations

import copy
import json
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Dict, Iterable, List, Optional

import pandas as pd

from .objects import StoredObject


logger = logging.getLogger(__name__)

OBJECT_COLUMNS = [
    "object_id",
    "type",
    "version",
    "owner",
    "initial_shared_version",
    "balance",
    "fields",
]


class ObjectStore:
    """In-memory object store; the unit of commit is a whole object map."""

    def __init__(self, objects: Optional[Iterable[StoredObject]] = None) -> None:
        self.objects: Dict[str, StoredObject] = {}
        self._transactions: List[dict] = []
        for obj in objects or ():
            self.add(obj)

    @property
    def seq(self) -> int:
        return len(self.read_transactions())

    def get(self, object_id: str) -> Optional[StoredObject]:
        return self.objects.get(object_id)

    def add(self, obj: StoredObject) -> None:
        if obj.object_id in self.objects:
            raise ValueError(f"object {obj.object_id} already exists")
        if obj.is_shared and obj.initial_shared_version is None:
            obj.initial_shared_version = obj.version
        self.objects[obj.object_id] = obj

    def working_copy(self) -> Dict[str, StoredObject]:
        return copy.deepcopy(self.objects)

    def commit(self, objects: Dict[str, StoredObject], record: dict) -> int:
        """Replace the object map and log *record*; returns the new sequence."""

        seq = self.seq + 1
        entry = dict(record, seq=seq, committed_at=_now())
        self.objects = objects
        self._persist(entry)
        return seq

    def read_transactions(self) -> List[dict]:
        return list(self._transactions)

    def _persist(self, entry: dict) -> None:
        self._transactions.append(entry)


class Ledger(ObjectStore):
    """Filesystem-backed object store for a workspace."""

    def __init__(self, root: Path) -> None:
        self.root = Path(root)
        self.root.mkdir(parents=True, exist_ok=True)
        self.objects_json = self.root / "objects.json"
        self.objects_csv = self.root / "objects.csv"
        self.transactions_log = self.root / "transactions.jsonl"
        super().__init__(self.load_objects())

    # ------------------------------------------------------------------
    def load_objects(self) -> List[StoredObject]:
        if not self.objects_json.exists():
            return []
        payload = json.loads(self.objects_json.read_text(encoding="utf-8"))
        return [StoredObject.from_dict(item) for item in payload.get("objects", [])]

    def write_objects(self) -> None:
        payload = {
            "objects": [
                self.objects[key].as_dict() for key in sorted(self.objects.keys())
            ]
        }
        tmp_path = self.objects_json.with_suffix(".json.tmp")
        tmp_path.write_text(
            json.dumps(payload, indent=2, sort_keys=True) + "\n", encoding="utf-8"
        )
        tmp_path.replace(self.objects_json)
        self.write_objects_view()

    def write_objects_view(self) -> None:
        records = [
            {
                "object_id": obj.object_id,
                "type": obj.type,
                "version": obj.version,
                "owner": obj.owner,
                "initial_shared_version": obj.initial_shared_version,
                "balance": obj.fields.get("balance"),
                "fields": json.dumps(obj.fields, sort_keys=True),
            }
            for obj in self.objects.values()
        ]
        df = pd.DataFrame(records, columns=OBJECT_COLUMNS)
        if not df.empty:
            df = df.sort_values(["type", "object_id"], kind="mergesort").reset_index(
                drop=True
            )
            df["balance"] = df["balance"].astype("Int64")
            df["initial_shared_version"] = df["initial_shared_version"].astype("Int64")
        df.to_csv(self.objects_csv, index=False)

    def read_objects_view(self) -> pd.DataFrame:
        if not self.objects_csv.exists():
            return pd.DataFrame(columns=OBJECT_COLUMNS)
        return pd.read_csv(self.objects_csv)

    def read_transactions(self) -> List[dict]:
        if not self.transactions_log.exists():
            return []
        records: List[dict] = []
        with self.transactions_log.open("r", encoding="utf-8") as fh:
            for line in fh:
                line = line.strip()
                if not line:
                    continue
                try:
                    records.append(json.loads(line))
                except json.JSONDecodeError:
                    logger.warning("skipping unreadable ledger line in %s", self.transactions_log)
                    continue
        return records

    def seed(self, objects: Iterable[StoredObject]) -> None:
        for obj in objects:
            self.add(obj)
        self.write_objects()

    # ------------------------------------------------------------------
    def _persist(self, entry: dict) -> None:
        self.write_objects()
        with self.transactions_log.open("a", encoding="utf-8") as fh:
            fh.write(json.dumps(entry, sort_keys=True) + "\n")


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()
