# view_state.py
# Mutable control state of one proposals table (search, filters, sort, page, selection)

from dataclasses import dataclass, field
from datetime import date
from typing import Iterable, List, Optional, Set

from .models import Proposal, ViewControls


@dataclass
class ViewState:
    search: str = ""
    sent_from: Optional[date] = None
    sent_to: Optional[date] = None
    min_value: Optional[float] = None
    max_value: Optional[float] = None
    sort_key: Optional[str] = None
    sort_dir: str = "asc"
    page: int = 1
    page_size: int = 10
    selected: Set[str] = field(default_factory=set)

    def set_search(self, text: str) -> None:
        if text != self.search:
            self.search = text
            self.page = 1

    def set_filters(self, sent_from=None, sent_to=None, min_value=None, max_value=None) -> None:
        new = (sent_from, sent_to, min_value, max_value)
        if new != (self.sent_from, self.sent_to, self.min_value, self.max_value):
            self.sent_from, self.sent_to, self.min_value, self.max_value = new
            self.page = 1

    def toggle_sort(self, key: str) -> None:
        """Same column flips the direction, a new column starts ascending."""
        if key == self.sort_key:
            self.sort_dir = "desc" if self.sort_dir == "asc" else "asc"
        else:
            self.sort_key = key
            self.sort_dir = "asc"

    def go_to_page(self, page: int) -> None:
        self.page = page

    def toggle_selected(self, proposal_id: str) -> None:
        if proposal_id in self.selected:
            self.selected.discard(proposal_id)
        else:
            self.selected.add(proposal_id)

    def select_all(self, visible_ids: Iterable[str], checked: bool = True) -> None:
        # page scoped: checking replaces the selection with this page's ids
        self.selected = set(visible_ids) if checked else set()

    def all_selected(self, visible_ids: Iterable[str]) -> bool:
        ids = set(visible_ids)
        return bool(ids) and ids <= self.selected

    def clear_selection(self) -> None:
        self.selected = set()

    def controls(self) -> ViewControls:
        return ViewControls(
            search=self.search,
            sent_from=self.sent_from,
            sent_to=self.sent_to,
            min_value=self.min_value,
            max_value=self.max_value,
            sort_key=self.sort_key,
            sort_dir=self.sort_dir,
            page=self.page,
            page_size=self.page_size,
        )

    def with_selected_status(self, proposals: List[Proposal], status: str) -> List[Proposal]:
        """Return a copy of ``proposals`` with every selected record set to ``status``."""
        return [
            p.model_copy(update={"status": status}) if p.id in self.selected else p
            for p in proposals
        ]

    def apply_bulk_status(self, proposals: List[Proposal], status: str) -> List[Proposal]:
        """Like ``with_selected_status``, then clears the selection."""
        out = self.with_selected_status(proposals, status)
        self.clear_selection()
        return out
