# models.py
# Pydantic models for proposals, view controls and projection results

from datetime import date, datetime
from typing import Dict, List, Literal, Optional

from pydantic import BaseModel, Field, field_validator, model_validator

ProposalStatus = Literal["pending", "approved", "rejected"]
SortKey = Literal[
    "client_name",
    "sent_date",
    "value",
    "status",
    "last_follow_up",
    "expected_return_date",
]
SortDirection = Literal["asc", "desc"]

STATUSES = ("pending", "approved", "rejected")
SENT_VIA_OPTIONS = ("Email", "WhatsApp", "Other")
NULLABLE_FIELDS = ("expected_return_date", "sent_via", "notes")


def _client_name_not_blank(v: Optional[str]) -> Optional[str]:
    if v is not None and not v.strip():
        raise ValueError("client name is required")
    return v.strip() if v is not None else v


class ProposalCreate(BaseModel):
    client_name: str
    sent_date: date
    value: float = Field(ge=0)
    status: ProposalStatus = "pending"
    last_follow_up: date
    expected_return_date: Optional[date] = None
    sent_via: Optional[str] = None
    notes: str = ""

    check_client_name = field_validator("client_name")(_client_name_not_blank)


class ProposalUpdate(BaseModel):
    client_name: Optional[str] = None
    sent_date: Optional[date] = None
    value: Optional[float] = Field(default=None, ge=0)
    status: Optional[ProposalStatus] = None
    last_follow_up: Optional[date] = None
    expected_return_date: Optional[date] = None
    sent_via: Optional[str] = None
    notes: Optional[str] = None

    check_client_name = field_validator("client_name")(_client_name_not_blank)

    @field_validator("notes")
    @classmethod
    def null_notes_are_empty(cls, v: Optional[str]) -> str:
        return "" if v is None else v

    @model_validator(mode="after")
    def reject_null_required(self):
        # an explicit null may only clear the optional columns
        nulled = sorted(
            name for name in self.model_fields_set
            if getattr(self, name) is None and name not in NULLABLE_FIELDS
        )
        if nulled:
            raise ValueError(f"fields cannot be null: {', '.join(nulled)}")
        return self


class Proposal(ProposalCreate):
    id: str
    owner_id: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class BulkStatusRequest(BaseModel):
    ids: List[str]
    status: ProposalStatus


class ViewControls(BaseModel):
    """Current table controls: search, bounds, sort and page."""

    search: str = ""
    sent_from: Optional[date] = None
    sent_to: Optional[date] = None
    min_value: Optional[float] = None
    max_value: Optional[float] = None
    sort_key: Optional[SortKey] = None
    sort_dir: SortDirection = "asc"
    page: int = 1
    page_size: int = Field(default=10, ge=1)


class AlertFlags(BaseModel):
    days_since_follow_up: int
    needs_follow_up: bool = False
    days_until_return: Optional[int] = None
    is_overdue: bool = False
    is_return_soon: bool = False


class ProjectionResult(BaseModel):
    visible_page: List[Proposal] = []
    page: int = 1
    page_count: int = 0
    total_filtered_count: int = 0
    alert_flags_by_id: Dict[str, AlertFlags] = Field(default_factory=dict)


class DashboardStats(BaseModel):
    total: int = 0
    approved: int = 0
    rejected: int = 0
    pending: int = 0
    total_value: float = 0.0
    approved_value: float = 0.0
