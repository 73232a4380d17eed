# storage.py
# JSON file storage for proposals, scoped per owner. One lock per store.

import json
import logging
import threading
import uuid
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List

from .errors import ProposalAccessDenied, ProposalNotFound
from .models import Proposal, ProposalCreate, ProposalUpdate

logger = logging.getLogger(__name__)


def read_json(path: Path) -> List[Dict[str, Any]]:
    if not path.exists():
        return []
    return json.loads(path.read_text() or "[]")


def write_json(path: Path, obj: Any):
    tmp = path.with_suffix(".tmp")
    tmp.write_text(json.dumps(obj, indent=2, default=str))
    tmp.replace(path)


class ProposalStore:
    def __init__(self, data_dir: Path):
        self.path = Path(data_dir) / "proposals.json"
        self.path.parent.mkdir(parents=True, exist_ok=True)
        if not self.path.exists():
            self.path.write_text("[]")
        self._lock = threading.Lock()

    def _load(self) -> List[Proposal]:
        return [Proposal.model_validate(r) for r in read_json(self.path)]

    def _save(self, proposals: List[Proposal]):
        write_json(self.path, [p.model_dump(mode="json") for p in proposals])

    @staticmethod
    def _owned(rows: List[Proposal], owner_id: str, proposal_id: str) -> Proposal:
        p = next((x for x in rows if x.id == proposal_id), None)
        if p is None:
            raise ProposalNotFound(proposal_id)
        if p.owner_id != owner_id:
            logger.warning("user %s denied access to proposal %s", owner_id, proposal_id)
            raise ProposalAccessDenied(proposal_id)
        return p

    def create(self, owner_id: str, body: ProposalCreate) -> Proposal:
        now = datetime.now(timezone.utc)
        proposal = Proposal(
            id=str(uuid.uuid4()),
            owner_id=owner_id,
            created_at=now,
            updated_at=now,
            **body.model_dump(),
        )
        with self._lock:
            rows = self._load()
            rows.append(proposal)
            self._save(rows)
        logger.info("created proposal %s for %s", proposal.id, owner_id)
        return proposal

    def list(self, owner_id: str) -> List[Proposal]:
        with self._lock:
            rows = self._load()
        mine = [p for p in rows if p.owner_id == owner_id]
        # newest first, the way the table shows freshly added records
        mine.reverse()
        return mine

    def get(self, owner_id: str, proposal_id: str) -> Proposal:
        with self._lock:
            return self._owned(self._load(), owner_id, proposal_id)

    def update(self, owner_id: str, proposal_id: str, body: ProposalUpdate) -> Proposal:
        changes = body.model_dump(exclude_unset=True)
        with self._lock:
            rows = self._load()
            current = self._owned(rows, owner_id, proposal_id)
            data = current.model_dump()
            data.update(changes)
            data["updated_at"] = datetime.now(timezone.utc)
            updated = Proposal.model_validate(data)
            rows = [updated if p.id == proposal_id else p for p in rows]
            self._save(rows)
        logger.info("updated proposal %s (%s)", proposal_id, ", ".join(sorted(changes)) or "no fields")
        return updated

    def delete(self, owner_id: str, proposal_id: str) -> None:
        with self._lock:
            rows = self._load()
            self._owned(rows, owner_id, proposal_id)
            self._save([p for p in rows if p.id != proposal_id])
        logger.info("deleted proposal %s", proposal_id)

    def bulk_update_status(self, owner_id: str, ids: List[str], status: str) -> List[Proposal]:
        wanted = list(dict.fromkeys(ids))
        with self._lock:
            rows = self._load()
            for pid in wanted:
                self._owned(rows, owner_id, pid)
            now = datetime.now(timezone.utc)
            targets = set(wanted)
            rows = [
                p.model_copy(update={"status": status, "updated_at": now}) if p.id in targets else p
                for p in rows
            ]
            self._save(rows)
        logger.info("set status %s on %d proposals", status, len(wanted))
        by_id = {p.id: p for p in rows}
        return [by_id[pid] for pid in wanted]
