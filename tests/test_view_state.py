"""Tests for table control state and selection bookkeeping."""

from datetime import date

from conftest import make_proposal

from backend.app.view_state import ViewState


def test_toggle_sort_flips_direction_on_same_key():
    view = ViewState()
    view.toggle_sort("value")
    assert (view.sort_key, view.sort_dir) == ("value", "asc")
    view.toggle_sort("value")
    assert (view.sort_key, view.sort_dir) == ("value", "desc")
    view.toggle_sort("status")
    assert (view.sort_key, view.sort_dir) == ("status", "asc")


def test_search_and_filter_changes_reset_page():
    view = ViewState(page=4)
    view.set_search("costa")
    assert view.page == 1

    view.go_to_page(3)
    view.set_search("costa")
    assert view.page == 3

    view.set_filters(min_value=10.0)
    assert view.page == 1
    assert view.controls().min_value == 10.0


def test_toggle_selected_adds_and_removes():
    view = ViewState()
    view.toggle_selected("a")
    view.toggle_selected("b")
    view.toggle_selected("a")
    assert view.selected == {"b"}


def test_select_all_is_page_scoped():
    """Select-all keeps exactly the visible page's ids."""
    view = ViewState()
    view.select_all(["1", "2"])
    view.select_all(["3", "4"])
    assert view.selected == {"3", "4"}
    assert view.all_selected(["3", "4"])
    assert not view.all_selected(["1", "2"])
    view.select_all(["3", "4"], checked=False)
    assert view.selected == set()
    assert not view.all_selected([])


def test_bulk_status_updates_selected_and_clears_selection():
    rows = [make_proposal(i, status="pending") for i in range(3)]
    view = ViewState()
    view.toggle_selected("0")
    view.toggle_selected("2")

    out = view.apply_bulk_status(rows, "approved")

    assert [p.status for p in out] == ["approved", "pending", "approved"]
    assert [p.status for p in rows] == ["pending", "pending", "pending"]
    assert view.selected == set()


def test_controls_mirror_state():
    view = ViewState(search="x", sent_from=date(2025, 1, 1), page=2, page_size=5)
    view.toggle_sort("sent_date")
    controls = view.controls()
    assert controls.search == "x"
    assert controls.sent_from == date(2025, 1, 1)
    assert controls.sort_key == "sent_date"
    assert controls.page == 2
    assert controls.page_size == 5
