# main.py
import logging
from typing import List, Optional

from fastapi import Depends, FastAPI, Header, HTTPException, Response
from fastapi.middleware.cors import CORSMiddleware

from . import config, models, projector
from .errors import ProposalAccessDenied, ProposalNotFound, StoreError
from .stats import compute_stats
from .storage import ProposalStore

config.configure_logging()
logger = logging.getLogger(__name__)

app = FastAPI(title="Proposal Tracker API")

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # for local dev only
    allow_methods=["*"],
    allow_headers=["*"],
)

_store: Optional[ProposalStore] = None


def get_store() -> ProposalStore:
    global _store
    if _store is None:
        _store = ProposalStore(config.DATA_DIR)
    return _store


def get_owner(x_user_id: str = Header(default="local")) -> str:
    return x_user_id


def _http_error(exc: StoreError) -> HTTPException:
    if isinstance(exc, ProposalAccessDenied):
        return HTTPException(status_code=403, detail=str(exc))
    if isinstance(exc, ProposalNotFound):
        return HTTPException(status_code=404, detail=str(exc))
    return HTTPException(status_code=500, detail=str(exc))


@app.get("/health")
def health():
    return {"status": "ok"}


# --- Proposal endpoints ---
@app.post("/api/v1/proposals", response_model=models.Proposal, status_code=201)
def create_proposal(
    body: models.ProposalCreate,
    owner: str = Depends(get_owner),
    store: ProposalStore = Depends(get_store),
):
    return store.create(owner, body)


@app.get("/api/v1/proposals", response_model=List[models.Proposal])
def list_proposals(owner: str = Depends(get_owner), store: ProposalStore = Depends(get_store)):
    return store.list(owner)


@app.get("/api/v1/proposals/view", response_model=models.ProjectionResult)
def view_proposals(
    search: str = "",
    sent_from: Optional[str] = None,
    sent_to: Optional[str] = None,
    min_value: Optional[str] = None,
    max_value: Optional[str] = None,
    sort_key: Optional[models.SortKey] = None,
    sort_dir: models.SortDirection = "asc",
    page: int = 1,
    page_size: int = config.PAGE_SIZE,
    owner: str = Depends(get_owner),
    store: ProposalStore = Depends(get_store),
):
    # bounds come in as raw text; unparseable ones are simply not applied
    controls = models.ViewControls(
        search=search,
        sent_from=projector.parse_date_bound(sent_from),
        sent_to=projector.parse_date_bound(sent_to),
        min_value=projector.parse_value_bound(min_value),
        max_value=projector.parse_value_bound(max_value),
        sort_key=sort_key,
        sort_dir=sort_dir,
        page=page,
        page_size=max(page_size, 1),
    )
    return projector.project(store.list(owner), controls)


@app.post("/api/v1/proposals/bulk-status", response_model=List[models.Proposal])
def bulk_status(
    body: models.BulkStatusRequest,
    owner: str = Depends(get_owner),
    store: ProposalStore = Depends(get_store),
):
    try:
        return store.bulk_update_status(owner, body.ids, body.status)
    except StoreError as e:
        raise _http_error(e)


@app.get("/api/v1/proposals/{proposal_id}", response_model=models.Proposal)
def get_proposal(
    proposal_id: str,
    owner: str = Depends(get_owner),
    store: ProposalStore = Depends(get_store),
):
    try:
        return store.get(owner, proposal_id)
    except StoreError as e:
        raise _http_error(e)


@app.patch("/api/v1/proposals/{proposal_id}", response_model=models.Proposal)
def update_proposal(
    proposal_id: str,
    body: models.ProposalUpdate,
    owner: str = Depends(get_owner),
    store: ProposalStore = Depends(get_store),
):
    try:
        return store.update(owner, proposal_id, body)
    except StoreError as e:
        raise _http_error(e)


@app.delete("/api/v1/proposals/{proposal_id}", status_code=204)
def delete_proposal(
    proposal_id: str,
    owner: str = Depends(get_owner),
    store: ProposalStore = Depends(get_store),
):
    try:
        store.delete(owner, proposal_id)
    except StoreError as e:
        raise _http_error(e)
    return Response(status_code=204)


# --- Dashboard ---
@app.get("/api/v1/stats", response_model=models.DashboardStats)
def stats(owner: str = Depends(get_owner), store: ProposalStore = Depends(get_store)):
    return compute_stats(store.list(owner))
