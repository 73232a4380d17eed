# client.py
# requests client for the proposals API + optimistic cache updates used by the UI

import logging
from typing import Any, Dict, List, MutableMapping, Optional

import requests

from backend.app.models import Proposal
from backend.app.view_state import ViewState

logger = logging.getLogger(__name__)


class ApiError(Exception):
    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class ProposalApi:
    """Thin wrapper over the backend routes.

    Transport failures (connection refused, timeouts) and non-2xx responses
    both come out as ``ApiError``.
    """

    def __init__(self, base_url: str, user_id: str, timeout: float = 10, session=None):
        self.base_url = base_url.rstrip("/")
        self.user_id = user_id
        self.timeout = timeout
        self.session = session or requests.Session()

    def _call(self, method: str, path: str, **kwargs) -> Any:
        url = f"{self.base_url}/api/v1{path}"
        try:
            r = self.session.request(
                method, url, headers={"X-User-Id": self.user_id}, timeout=self.timeout, **kwargs
            )
        except requests.RequestException as e:
            logger.warning("%s %s failed: %s", method, url, e)
            raise ApiError(f"Backend unreachable: {e}") from e
        if not r.ok:
            raise ApiError(r.text, r.status_code)
        return r.json() if r.content else None

    def list(self) -> List[Proposal]:
        return [Proposal.model_validate(x) for x in self._call("GET", "/proposals")]

    def create(self, values: Dict[str, Any]) -> Proposal:
        return Proposal.model_validate(self._call("POST", "/proposals", json=values))

    def update(self, proposal_id: str, changes: Dict[str, Any]) -> Proposal:
        return Proposal.model_validate(self._call("PATCH", f"/proposals/{proposal_id}", json=changes))

    def delete(self, proposal_id: str) -> None:
        self._call("DELETE", f"/proposals/{proposal_id}")

    def bulk_status(self, ids: List[str], status: str) -> List[Proposal]:
        rows = self._call("POST", "/proposals/bulk-status", json={"ids": ids, "status": status})
        return [Proposal.model_validate(x) for x in rows]


def _replace(rows: List[Proposal], saved: List[Proposal]) -> List[Proposal]:
    by_id = {p.id: p for p in saved}
    return [by_id.get(p.id, p) for p in rows]


# Each mutation below shows the change in state["proposals"] right away, swaps
# in the server copy on success and restores the previous list on ApiError.

def save_proposal(state: MutableMapping, api: ProposalApi, proposal_id: str, changes: Dict[str, Any]) -> Proposal:
    before = list(state["proposals"])
    state["proposals"] = [
        Proposal.model_validate({**p.model_dump(), **changes}) if p.id == proposal_id else p
        for p in before
    ]
    try:
        saved = api.update(proposal_id, changes)
    except ApiError:
        state["proposals"] = before
        raise
    state["proposals"] = _replace(state["proposals"], [saved])
    return saved


def delete_proposal(state: MutableMapping, api: ProposalApi, view: ViewState, proposal_id: str) -> None:
    before = list(state["proposals"])
    state["proposals"] = [p for p in before if p.id != proposal_id]
    try:
        api.delete(proposal_id)
    except ApiError:
        state["proposals"] = before
        raise
    view.selected.discard(proposal_id)


def bulk_set_status(state: MutableMapping, api: ProposalApi, view: ViewState, status: str) -> List[Proposal]:
    before = list(state["proposals"])
    ids = sorted(view.selected)
    state["proposals"] = view.with_selected_status(before, status)
    try:
        saved = api.bulk_status(ids, status)
    except ApiError:
        # selection is kept so the user can retry
        state["proposals"] = before
        raise
    view.clear_selection()
    state["proposals"] = _replace(state["proposals"], saved)
    return saved
