import pytest

from folio import app
from folio.app import Session, preview_surface
from folio.models.settings import Settings


@pytest.fixture
def session(tmp_path):
    session = Session(Settings(export_dir=str(tmp_path / "exports"), preview_dir=str(tmp_path / "preview")))
    yield session
    session.close()


def renamed(record, name):
    details = record.personal_details.model_copy(update={"name": name})
    return record.model_copy(update={"personal_details": details})


def test_each_export_is_named_after_the_current_record(session, record, tmp_path):
    session.store.set(record)
    assert session.export().ok

    session.store.set(renamed(record, "Ada King"))
    assert session.export().ok

    exported = sorted(p.name for p in (tmp_path / "exports").iterdir())
    assert exported == ["Ada_King_portfolio.zip", "Ada_Lovelace_portfolio.zip"]
    assert session.last_saved.endswith("Ada_King_portfolio.zip")


def test_explicit_export_path_is_reused(tmp_path, record):
    target = tmp_path / "site.zip"
    session = Session(Settings(export_dir=str(tmp_path / "exports")), export_path=str(target))
    try:
        session.store.set(record)
        assert session.export().ok
        session.store.set(renamed(record, "Ada King"))
        assert session.export().ok
    finally:
        session.close()

    assert target.exists()
    assert session.last_saved == str(target)
    assert not (tmp_path / "exports").exists()


def test_unwritable_preview_keeps_the_session_alive(session, record, monkeypatch):
    opened = []

    def refuse(record, directory):
        raise OSError("read-only file system")

    monkeypatch.setattr(app.Prompt, "ask", lambda *args, **kwargs: "1")
    monkeypatch.setattr(app, "write_preview", refuse)
    monkeypatch.setattr(app, "pause", lambda: None)
    monkeypatch.setattr(app.webbrowser, "open", opened.append)
    session.store.set(record)

    assert preview_surface(session) is True
    assert opened == []
