from __future__ import annotations

import logging

from ircflow.logs import EVENT_TEMPLATES, reload_event_templates
from ircflow.logs.logger import BotLogger


def test_logger_template_and_fallback(caplog) -> None:  # type: ignore[no-untyped-def]
    log = BotLogger("test_logger")
    caplog.set_level(logging.INFO)

    log.log_event("app", "start")
    log.log_event("custom_domain", "custom_action", extra_field=123)

    msgs = [r.message for r in caplog.records]
    assert any("Starting ircflow session" in m for m in msgs)
    assert any("custom domain: custom action" in m for m in msgs)


def test_logger_template_with_missing_field_keeps_raw_template(caplog) -> None:  # type: ignore[no-untyped-def]
    log = BotLogger("test_logger_missing")
    caplog.set_level(logging.INFO)
    log.log_event("session", "nick_changed")
    assert any("Nick is now {nick}" in r.message for r in caplog.records)


def test_logger_prefix_uses_nick_and_host(caplog) -> None:  # type: ignore[no-untyped-def]
    log = BotLogger("test_logger_prefix")
    caplog.set_level(logging.INFO)
    log.log_event("session", "closed", nick="myself", host="irc.example.org")
    log.log_event("session", "closed")
    msgs = [r.message for r in caplog.records]
    assert msgs[0].startswith("[myself@irc.example.org")
    assert msgs[1].startswith("[system")
    assert msgs[0].index("]") == msgs[1].index("]")


def test_logger_explicit_human_text(caplog) -> None:  # type: ignore[no-untyped-def]
    log = BotLogger("test_logger_human")
    caplog.set_level(logging.INFO)
    log.log_event("app", "message", human="<n> PRIVMSG #c hi")
    assert caplog.records[0].message.endswith("<n> PRIVMSG #c hi")


def test_logger_debug_alignment(caplog, monkeypatch) -> None:  # type: ignore[no-untyped-def]
    monkeypatch.setenv("DEBUG", "1")
    log = BotLogger("test_logger_debug")
    caplog.set_level(logging.DEBUG)
    log.log_event("irc", "raw_in", level=logging.DEBUG, raw=b"PING :x", extra=1)
    first = caplog.records[0].message
    assert first.startswith("irc_raw_in")
    assert len(first.split("[")[0]) >= BotLogger.EVENT_NAME_WIDTH
    assert "(raw=b'PING :x', extra=1)" in first


def test_level_respected(caplog) -> None:  # type: ignore[no-untyped-def]
    log = BotLogger("test_logger_level")
    log.set_level(logging.WARNING)
    caplog.set_level(logging.DEBUG)
    log.log_event("session", "closed")
    log.log_event("session", "already_active", level=logging.WARNING)
    assert [r.levelno for r in caplog.records] == [logging.WARNING]


def test_event_templates_loaded() -> None:
    assert ("session", "sink_error") in EVENT_TEMPLATES
    assert ("irc", "raw_in") in EVENT_TEMPLATES


def test_reload_idempotent() -> None:
    from ircflow.logs import event_catalog

    before = set(event_catalog.EVENT_TEMPLATES)
    reload_event_templates()
    assert set(event_catalog.EVENT_TEMPLATES) == before


def test_reload_keeps_shared_mapping() -> None:
    shared = EVENT_TEMPLATES
    reload_event_templates()
    assert EVENT_TEMPLATES is shared
    assert ("session", "collaborator_error") in shared


def test_load_missing_template_file(tmp_path) -> None:  # type: ignore[no-untyped-def]
    from ircflow.logs.event_catalog import load_event_templates

    templates = load_event_templates(tmp_path / "absent.json")
    assert list(templates) == [("app", "load_error")]


def test_load_skips_non_string_templates(tmp_path) -> None:  # type: ignore[no-untyped-def]
    from ircflow.logs.event_catalog import load_event_templates

    path = tmp_path / "templates.json"
    path.write_text('{"irc": {"ok": "fine", "bad": 3}, "broken": []}', encoding="utf-8")
    assert load_event_templates(path) == {("irc", "ok"): "fine"}


def test_load_rejects_invalid_json(tmp_path) -> None:  # type: ignore[no-untyped-def]
    from ircflow.logs.event_catalog import load_event_templates

    path = tmp_path / "templates.json"
    path.write_text("{not json", encoding="utf-8")
    templates = load_event_templates(path)
    assert templates[("app", "load_error")].startswith("Unreadable event templates")
