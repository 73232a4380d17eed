# Streamlit dashboard that talks to the FastAPI backend
import os
from datetime import date
from typing import List

import streamlit as st
from babel.numbers import format_currency
from dotenv import load_dotenv

from backend.app.models import SENT_VIA_OPTIONS, STATUSES, Proposal
from backend.app.projector import parse_date_bound, parse_value_bound, project
from backend.app.stats import compute_stats
from backend.app.view_state import ViewState
from frontend.client import ApiError, ProposalApi, bulk_set_status, delete_proposal, save_proposal

load_dotenv()

API = os.getenv("API_URL", "http://localhost:5000")
USER_ID = os.getenv("USER_ID", "local")
PAGE_SIZE = int(os.getenv("PAGE_SIZE", "10"))

STATUS_LABELS = {"pending": "Pending", "approved": "Approved", "rejected": "Rejected"}
SORT_COLUMNS = [
    ("client_name", "Client"),
    ("sent_date", "Sent"),
    ("value", "Value"),
    ("status", "Status"),
    ("last_follow_up", "Last follow-up"),
    ("expected_return_date", "Expected return"),
]

st.set_page_config(page_title="Proposal Tracker", layout="wide")
st.title("Proposal Tracker")


api = ProposalApi(API, USER_ID)


def money(v: float) -> str:
    return format_currency(v, "BRL", locale="pt_BR")


def fmt_date(d) -> str:
    return d.strftime("%d/%m/%Y") if d else "-"


def flash(level: str, text: str):
    # shown on the next run, after st.rerun()
    st.session_state.flash = (level, text)


def refresh():
    try:
        st.session_state.proposals = api.list()
    except ApiError as e:
        st.error(f"Could not load proposals: {e}")


if "view" not in st.session_state:
    st.session_state.view = ViewState(page_size=PAGE_SIZE)
    st.session_state.sel_version = 0
    st.session_state.editing = None
if "proposals" not in st.session_state:
    st.session_state.proposals = []
    refresh()

pending_flash = st.session_state.pop("flash", None)
if pending_flash:
    level, text = pending_flash
    (st.success if level == "success" else st.error)(text)

view: ViewState = st.session_state.view
proposals: List[Proposal] = st.session_state.proposals


def _bump_selection():
    st.session_state.sel_version += 1


def save_update(p: Proposal, changes: dict):
    try:
        save_proposal(st.session_state, api, p.id, changes)
    except ApiError as e:
        flash("error", f"Update failed: {e}")
    else:
        flash("success", "Proposal updated")


def delete(pid: str):
    try:
        delete_proposal(st.session_state, api, view, pid)
    except ApiError as e:
        flash("error", f"Delete failed: {e}")
    else:
        flash("success", "Proposal deleted")


def bulk_status(status: str):
    count = len(view.selected)
    try:
        bulk_set_status(st.session_state, api, view, status)
    except ApiError as e:
        flash("error", f"Bulk update failed: {e}")
    else:
        flash("success", f"{count} proposal(s) set to {STATUS_LABELS[status]}")
    _bump_selection()


def proposal_form(key: str, current: Proposal = None) -> dict:
    """Render the create/edit form and return submitted values (or None)."""
    with st.form(key):
        client_name = st.text_input("Client name", value=current.client_name if current else "")
        c1, c2 = st.columns(2)
        sent_via_default = current.sent_via if current and current.sent_via in SENT_VIA_OPTIONS else "Email"
        sent_via = c1.selectbox("Sent via", SENT_VIA_OPTIONS, index=SENT_VIA_OPTIONS.index(sent_via_default))
        sent_date = c2.date_input("Sent date", value=current.sent_date if current else date.today())
        value = c1.number_input("Value (R$)", min_value=0.0, value=float(current.value) if current else 0.0, step=100.0)
        status = c2.selectbox(
            "Status", STATUSES,
            index=STATUSES.index(current.status) if current else 0,
            format_func=STATUS_LABELS.get,
        )
        last_follow_up = c1.date_input("Last follow-up", value=current.last_follow_up if current else date.today())
        expected = c2.date_input("Expected return", value=current.expected_return_date if current else None)
        notes = st.text_area("Notes", value=current.notes if current else "")
        if not st.form_submit_button("Save"):
            return None
    if not client_name.strip():
        st.error("Client name is required")
        return None
    return {
        "client_name": client_name,
        "sent_via": sent_via,
        "sent_date": sent_date.isoformat(),
        "value": value,
        "status": status,
        "last_follow_up": last_follow_up.isoformat(),
        "expected_return_date": expected.isoformat() if expected else None,
        "notes": notes,
    }


tabs = st.tabs(["Dashboard", "Proposals", "New proposal"])

# Dashboard
with tabs[0]:
    stats = compute_stats(proposals)
    cols = st.columns(4)
    cols[0].metric("Total proposals", stats.total)
    cols[1].metric("Approved", stats.approved)
    cols[2].metric("Rejected", stats.rejected)
    cols[3].metric("Pending", stats.pending)
    c1, c2 = st.columns(2)
    c1.metric("Total value", money(stats.total_value))
    c2.metric("Approved value", money(stats.approved_value))

# Proposals table
with tabs[1]:
    view.set_search(st.text_input("Search by client", value=view.search))
    with st.expander("Filters"):
        f1, f2, f3, f4 = st.columns(4)
        sent_from = f1.date_input("Sent from", value=view.sent_from)
        sent_to = f2.date_input("Sent to", value=view.sent_to)
        min_raw = f3.text_input("Min value", value="" if view.min_value is None else str(view.min_value))
        max_raw = f4.text_input("Max value", value="" if view.max_value is None else str(view.max_value))
        view.set_filters(
            sent_from=parse_date_bound(sent_from),
            sent_to=parse_date_bound(sent_to),
            min_value=parse_value_bound(min_raw),
            max_value=parse_value_bound(max_raw),
        )

    result = project(proposals, view.controls())
    view.go_to_page(result.page)
    visible_ids = [p.id for p in result.visible_page]

    b1, b2, b3 = st.columns([2, 2, 6])
    b1.write(f"{len(view.selected)} selected")
    target = b2.selectbox("Set status", STATUSES, format_func=STATUS_LABELS.get, label_visibility="collapsed")
    if b3.button("Apply to selected", disabled=not view.selected):
        bulk_status(target)
        st.rerun()

    widths = [0.5, 3, 1.5, 1.5, 1.2, 1.8, 1.8, 1.2]
    header = st.columns(widths)
    all_checked = header[0].checkbox(
        "all", value=view.all_selected(visible_ids), label_visibility="collapsed",
        key=f"all-{st.session_state.sel_version}",
    )
    if all_checked != view.all_selected(visible_ids):
        view.select_all(visible_ids, all_checked)
        _bump_selection()
        st.rerun()
    for col, (key, label) in zip(header[1:7], SORT_COLUMNS):
        arrow = ""
        if view.sort_key == key:
            arrow = " ▲" if view.sort_dir == "asc" else " ▼"
        if col.button(label + arrow, key=f"sort-{key}"):
            view.toggle_sort(key)
            st.rerun()
    header[7].write("**Actions**")

    if not result.visible_page:
        st.info("No proposals found")
    for p in result.visible_page:
        flags = result.alert_flags_by_id[p.id]
        row = st.columns(widths)
        checked = row[0].checkbox(
            "sel", value=p.id in view.selected, label_visibility="collapsed",
            key=f"sel-{p.id}-{st.session_state.sel_version}",
        )
        if checked != (p.id in view.selected):
            view.toggle_selected(p.id)
        row[1].write(("⚠️ " if flags.needs_follow_up else "") + p.client_name)
        row[2].write(fmt_date(p.sent_date))
        row[3].write(money(p.value))
        row[4].write(STATUS_LABELS[p.status])
        follow = fmt_date(p.last_follow_up)
        if flags.needs_follow_up:
            follow += f"  \n:orange[{flags.days_since_follow_up} days ago]"
        row[5].write(follow)
        ret = fmt_date(p.expected_return_date)
        if flags.is_overdue:
            ret += "  \n:red[Overdue]"
        elif flags.is_return_soon:
            ret += f"  \n:orange[In {flags.days_until_return} day(s)]"
        row[6].write(ret)
        a1, a2 = row[7].columns(2)
        if a1.button("✏️", key=f"edit-{p.id}"):
            st.session_state.editing = p.id
            st.rerun()
        if a2.button("🗑️", key=f"del-{p.id}"):
            st.session_state.confirm_delete = p.id
            st.rerun()

    pcol1, pcol2, pcol3 = st.columns([1, 2, 1])
    if pcol1.button("Previous", disabled=result.page <= 1):
        view.go_to_page(result.page - 1)
        st.rerun()
    pcol2.write(
        f"Page {result.page} of {max(result.page_count, 1)} "
        f"({result.total_filtered_count} proposals)"
    )
    if pcol3.button("Next", disabled=result.page >= result.page_count):
        view.go_to_page(result.page + 1)
        st.rerun()

    pending_delete = st.session_state.get("confirm_delete")
    if pending_delete:
        st.warning("Delete this proposal? This cannot be undone.")
        d1, d2 = st.columns(2)
        if d1.button("Delete", type="primary"):
            delete(pending_delete)
            st.session_state.confirm_delete = None
            st.rerun()
        if d2.button("Cancel"):
            st.session_state.confirm_delete = None
            st.rerun()

    editing = next((x for x in proposals if x.id == st.session_state.editing), None)
    if editing:
        st.subheader(f"Edit proposal: {editing.client_name}")
        values = proposal_form(f"edit-{editing.id}", editing)
        if values:
            save_update(editing, values)
            st.session_state.editing = None
            st.rerun()
        if st.button("Close editor"):
            st.session_state.editing = None
            st.rerun()

# Create
with tabs[2]:
    st.header("New proposal")
    values = proposal_form("create")
    if values:
        try:
            created = api.create(values)
        except ApiError as e:
            st.error(f"Create failed: {e}")
        else:
            st.session_state.proposals = [created] + st.session_state.proposals
            st.success("Proposal created")
