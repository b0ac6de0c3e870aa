import pytest

from tutorgrid.db import bootstrap


def _raise_error(message: str):
    raise RuntimeError(message)


def test_runtime_schema_bootstrap_raises_on_validation_failure(monkeypatch):
    monkeypatch.setattr(bootstrap.Base.metadata, "create_all", lambda bind: None)
    monkeypatch.setattr(bootstrap, "_ensure_link_booking_columns", lambda: None)
    monkeypatch.setattr(bootstrap, "_seed_time_grid", lambda: None)
    monkeypatch.setattr(
        bootstrap,
        "_assert_required_columns",
        lambda: _raise_error("missing required schema"),
    )

    with pytest.raises(RuntimeError, match="Runtime schema compatibility bootstrap failed"):
        bootstrap.ensure_runtime_schema_compatibility()


def test_runtime_schema_bootstrap_runs_steps_in_order(monkeypatch):
    calls: list[str] = []
    monkeypatch.setattr(bootstrap.Base.metadata, "create_all", lambda bind: calls.append("create_all"))
    monkeypatch.setattr(bootstrap, "_ensure_link_booking_columns", lambda: calls.append("link_columns"))
    monkeypatch.setattr(bootstrap, "_assert_required_columns", lambda: calls.append("assert"))
    monkeypatch.setattr(bootstrap, "_seed_time_grid", lambda: calls.append("seed"))

    bootstrap.ensure_runtime_schema_compatibility()

    assert calls == ["create_all", "link_columns", "assert", "seed"]
