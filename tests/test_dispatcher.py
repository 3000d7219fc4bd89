#!/usr/bin/env python3
"""Tests for intent dispatch through TrackerController."""

import json

import pytest

from job_tracker.tracking import (
    ApplicationStatus,
    ClearFilters,
    CreateRecord,
    DeleteRecord,
    Export,
    FilterSpec,
    Reset,
    SetSearch,
    SetStatus,
    SetStatusFilter,
    SortSpec,
    ToggleSort,
    TrackerController,
)


@pytest.fixture
def seeded(controller):
    for title, company in [("Dev", "Acme"), ("QA", "Globex"), ("Backend Dev", "Initech")]:
        controller.dispatch(CreateRecord(title, company))
    return controller


def shown(controller):
    return [record.title for _, record in controller.view()]


def test_create_and_view(seeded):
    assert shown(seeded) == ["Backend Dev", "Dev", "QA"]
    assert [r.title for r in seeded.store.records] == ["Backend Dev", "QA", "Dev"]


def test_on_change_called_after_mutations(store, timer_factory):
    calls = []
    controller = TrackerController(store, on_change=lambda: calls.append(1), timer_factory=timer_factory)

    controller.dispatch(CreateRecord("Dev", "Acme"))
    controller.dispatch(CreateRecord("Dev", "ACME"))
    assert len(calls) == 1


def test_search_is_debounced(seeded, fake_timers):
    seeded.dispatch(SetSearch("d"))
    seeded.dispatch(SetSearch("de"))
    seeded.dispatch(SetSearch("dev"))

    # Nothing applied until the quiet window elapses
    assert seeded.store.filter.search == ""
    assert [t.cancelled for t in fake_timers] == [True, True, False]
    assert fake_timers[-1].interval == 0.2

    fake_timers[-1].fire()
    assert seeded.store.filter.search == "dev"
    assert shown(seeded) == ["Backend Dev", "Dev"]


def test_superseded_timer_does_nothing(seeded, fake_timers):
    seeded.dispatch(SetSearch("qa"))
    seeded.dispatch(SetSearch("dev"))

    fake_timers[0].fire()
    assert seeded.store.filter.search == ""
    fake_timers[1].fire()
    assert seeded.store.filter.search == "dev"


def test_immediate_search_skips_debounce(seeded, fake_timers):
    seeded.dispatch(SetSearch("qa"))
    seeded.dispatch(SetSearch("globex", immediate=True))

    assert seeded.store.filter.search == "globex"
    assert fake_timers[0].cancelled
    assert shown(seeded) == ["QA"]


def test_status_filter_and_clear(seeded, fake_timers):
    seeded.dispatch(SetStatus(seeded.store.index_of("QA", "Globex"), "Aprovado"))

    assert seeded.dispatch(SetStatusFilter("Aprovado"))
    assert shown(seeded) == ["QA"]

    seeded.dispatch(SetSearch("dev"))
    assert seeded.dispatch(ClearFilters())
    assert seeded.store.filter == FilterSpec()
    assert fake_timers[-1].cancelled
    assert len(shown(seeded)) == 3


def test_invalid_status_filter_is_rejected(seeded, notices):
    assert not seeded.dispatch(SetStatusFilter("Hired"))
    assert seeded.store.filter.status is None
    assert notices.errors[-1] == "Invalid status."


def test_empty_status_filter_clears_it(seeded):
    seeded.dispatch(SetStatusFilter(ApplicationStatus.REJECTED))
    seeded.dispatch(SetStatusFilter(""))
    assert seeded.store.filter.status is None


def test_toggle_sort(seeded):
    seeded.dispatch(ToggleSort("title"))
    assert seeded.store.sort == SortSpec(field="title", direction="desc")
    assert shown(seeded) == ["QA", "Dev", "Backend Dev"]

    seeded.dispatch(ToggleSort("company"))
    assert seeded.store.sort == SortSpec(field="company", direction="asc")


def test_toggle_sort_unknown_field(seeded, notices):
    assert not seeded.dispatch(ToggleSort("salary"))
    assert seeded.store.sort == SortSpec()
    assert notices.errors[-1] == "Unknown sort field: salary"


def test_delete_through_displayed_row(seeded):
    seeded.dispatch(SetSearch("qa", immediate=True))
    (index, record), = seeded.view()

    assert seeded.dispatch(DeleteRecord(index))
    assert seeded.store.index_of(record.title, record.company) is None
    assert len(seeded.store) == 2


def test_export_intents(seeded, tmp_path, notices):
    payload = seeded.dispatch(Export("json"))
    assert [item["titulo"] for item in json.loads(payload)] == ["Backend Dev", "QA", "Dev"]

    out = tmp_path / "report.html"
    assert seeded.dispatch(Export("report", out)) == f"Exported to {out}"
    assert notices.infos[-1] == "Exported to report.html"


def test_export_unknown_kind(seeded, notices):
    assert seeded.dispatch(Export("pdf")) is None
    assert notices.errors[-1] == "Unsupported export format: pdf"


def test_reset_intent(seeded, kv, fake_timers):
    seeded.dispatch(SetSearch("dev"))
    seeded.dispatch(ToggleSort("status"))

    assert seeded.dispatch(Reset())
    assert seeded.view() == []
    assert seeded.store.sort == SortSpec()
    assert fake_timers[-1].cancelled
    assert kv.items == {}


def test_unknown_intent_raises(controller):
    with pytest.raises(TypeError):
        controller.dispatch("create")


def test_kpis_ignore_filters(seeded):
    seeded.dispatch(SetSearch("qa", immediate=True))
    assert len(seeded.view()) == 1
    assert seeded.kpis().total == 3
