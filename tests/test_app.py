"""Tests for the form application wiring (no terminal needed)."""

from __future__ import annotations

import logging
from pathlib import Path

import pytest
from prompt_toolkit.formatted_text import fragment_list_to_text

from fieldkit import settings as settings_module
from fieldkit.__main__ import main
from fieldkit.app import FormApp
from fieldkit.catalog import load_catalog
from fieldkit.errors import StoreError
from fieldkit.settings import FieldKitSettings
from fieldkit.store import MemoryStore


@pytest.fixture
def store() -> MemoryStore:
    return MemoryStore()


@pytest.fixture
def form(tmp_catalog: Path, store: MemoryStore, scheduler) -> FormApp:
    form = FormApp(
        load_catalog(tmp_catalog),
        store,
        settings=FieldKitSettings(),
        scheduler=scheduler,
    )
    form._create_inputs()
    return form


def status_text(form: FormApp) -> str:
    return fragment_list_to_text(form._get_status_bar())


class TestFormSetup:
    """Tests for building inputs and layout."""

    def test_inputs_seeded_from_defaults(self, form) -> None:
        assert [i.field_id for i in form.inputs] == ["phone", "quantity", "size", "notes"]
        assert form.input_for("quantity").value == 1
        assert form.input_for("size").value == "a"
        assert form.input_for("phone").value == ""
        assert form.input_for("missing") is None

    def test_stored_values_win(self, tmp_catalog, scheduler) -> None:
        store = MemoryStore({"phone": "5551234"})
        form = FormApp(load_catalog(tmp_catalog), store, settings=FieldKitSettings(), scheduler=scheduler)
        form._create_inputs()

        assert form.input_for("phone").value == "555-1234"
        assert form.input_for("quantity").value == ""

    def test_layout_focuses_first_field(self, form) -> None:
        layout = form._create_layout()

        assert layout.current_control is form.input_for("phone").control
        assert form._focused is form.input_for("phone")

    def test_auto_focus(self, tmp_path, scheduler) -> None:
        catalog_file = tmp_path / "auto.yaml"
        catalog_file.write_text(
            "fields:\n  - id: a\n  - id: b\n    autoFocus: true\n", encoding="utf-8"
        )
        form = FormApp(
            load_catalog(catalog_file), MemoryStore(), settings=FieldKitSettings(), scheduler=scheduler
        )
        form._create_inputs()
        layout = form._create_layout()

        assert layout.current_control is form.input_for("b").control

    def test_settings_reach_inputs(self, tmp_catalog, scheduler) -> None:
        settings = FieldKitSettings(debounce_ms=500)
        form = FormApp(load_catalog(tmp_catalog), MemoryStore(), settings=settings, scheduler=scheduler)
        form._create_inputs()

        assert form.input_for("phone").session.wait == pytest.approx(0.5)

    def test_bindings(self, form) -> None:
        kb = form._create_bindings()
        keys = {binding.keys for binding in kb.bindings}

        assert len(keys) == 4


class TestFocusCommit:
    """Tests for commit-on-focus-change through the host."""

    def test_moving_focus_commits_and_persists(self, form, store, scheduler) -> None:
        form._create_layout()
        phone = form.input_for("phone")
        phone.edit("5551234")

        form.focus_changed(form.input_for("quantity"))
        scheduler.advance(0)

        assert form.host.get("phone") == "555-1234"
        assert store.load() == {
            "phone": "555-1234",
            "quantity": 1,
            "size": "a",
            "notes": "",
        }
        assert form.status_message == "Saved phone"

    def test_same_focus_does_not_commit(self, form, store, scheduler) -> None:
        form._create_layout()
        form.input_for("phone").edit("555")
        form.focus_changed(form.input_for("phone"))
        scheduler.run_pending()

        assert store.writes == 0

    def test_changing_reaches_host_without_write(self, form, store, scheduler) -> None:
        form._create_layout()
        form.input_for("phone").edit("555")
        scheduler.advance(0.2)

        assert form.host.changing == {"phone": "555"}
        assert store.writes == 0

    def test_quit_commits_focused_and_flushes(self, form, store) -> None:
        form._create_layout()
        form.input_for("phone").edit("555")
        form._quit_app()

        assert store.writes == 1
        assert store.load()["phone"] == "555"
        assert form._focused is None


class TestStatusBar:
    """Tests for status bar content."""

    def test_hint_only(self, form) -> None:
        assert status_text(form).strip() == "Tab/Shift+Tab: move  Ctrl+Q: quit"

    def test_unsaved_and_ready_to_send(self, form) -> None:
        form._create_layout()
        form.input_for("phone").edit("5")

        text = status_text(form)
        assert "unsaved edit" in text
        assert "ready to send" in text

    def test_queued_writes(self, form) -> None:
        form._create_layout()
        form.input_for("phone").edit("5")
        form.focus_changed(form.input_for("quantity"))

        assert "1 queued" in status_text(form)
        assert "Saved phone" in status_text(form)

    def test_store_error_shown(self, form, scheduler) -> None:
        def fail(values) -> None:
            raise StoreError("disk full")

        form.store.persist = fail
        form._create_layout()
        form.input_for("phone").edit("5")
        form.focus_changed(None)
        scheduler.advance(0)

        assert "Save failed: disk full" in status_text(form)
        assert form._get_status_bar()[0][0] == "class:status-bar.error"


class TestMain:
    """Tests for the command-line entry point."""

    @pytest.fixture(autouse=True)
    def isolate(self, monkeypatch):
        monkeypatch.setattr(settings_module, "_settings", FieldKitSettings())
        logger = logging.getLogger("fieldkit")
        handlers, level, propagate = logger.handlers[:], logger.level, logger.propagate
        yield
        for handler in logger.handlers[:]:
            logger.removeHandler(handler)
            handler.close()
        for handler in handlers:
            logger.addHandler(handler)
        logger.setLevel(level)
        logger.propagate = propagate

    def test_missing_catalog_exits_with_error(self, tmp_path, capsys) -> None:
        code = main([str(tmp_path / "missing.yaml"), "--store", str(tmp_path / "v.json")])

        assert code == 1
        assert "Cannot read catalog" in capsys.readouterr().err

    def test_runs_form_and_logs(self, tmp_catalog, tmp_path, monkeypatch) -> None:
        calls = []

        def fake_run(self) -> None:
            calls.append(self.catalog.title)

        monkeypatch.setattr(FormApp, "run", fake_run)
        log_file = tmp_path / "fieldkit.log"

        code = main([str(tmp_catalog), "--store", str(tmp_path / "v.json"), "--log-file", str(log_file), "-v"])

        assert code == 0
        assert calls == ["Order form"]
        assert "Loaded 4 fields" in log_file.read_text()
