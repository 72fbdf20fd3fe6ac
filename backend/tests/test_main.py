import json
import logging
from logging.handlers import RotatingFileHandler

import pytest

from tripcost import main as cli
from tripcost.services.trip_costs.errors import InvalidInput


@pytest.fixture
def quiet_logging(monkeypatch):
    monkeypatch.setattr(cli, "configure_logging", lambda *args, **kwargs: None)


def test_cli_prints_breakdown(tmp_path, capsys, monkeypatch, quiet_logging):
    seen = []

    async def fake_run(request):
        seen.append(request)
        return {"recommended": "road", "total": 1588.0}

    monkeypatch.setattr(cli, "run", fake_run)
    request_file = tmp_path / "request.json"
    request_file.write_text(json.dumps({"stops": []}), encoding="utf-8")

    assert cli.main([str(request_file), "--indent", "0"]) == 0

    assert seen == [{"stops": []}]
    assert json.loads(capsys.readouterr().out) == {"recommended": "road", "total": 1588.0}


def test_cli_unreadable_request(tmp_path, quiet_logging):
    assert cli.main([str(tmp_path / "missing.json")]) == 2


def test_cli_invalid_request(tmp_path, monkeypatch, quiet_logging):
    async def fake_run(request):
        raise InvalidInput("stops: at least 1 item")

    monkeypatch.setattr(cli, "run", fake_run)
    request_file = tmp_path / "request.json"
    request_file.write_text("{}", encoding="utf-8")

    assert cli.main([str(request_file)]) == 1


def test_configure_logging(tmp_path):
    log_file = tmp_path / "logs" / "tripcost.log"
    root = logging.getLogger()
    previous = root.handlers[:]

    try:
        cli.configure_logging("debug", str(log_file))

        assert log_file.parent.is_dir()
        assert root.level == logging.DEBUG
        rotating = [h for h in root.handlers if isinstance(h, RotatingFileHandler)]
        assert rotating[0].maxBytes == 10 * 1024 * 1024
        assert rotating[0].backupCount == 5
        assert logging.getLogger("httpx").level == logging.WARNING
    finally:
        for handler in root.handlers:
            handler.close()
        root.handlers = previous
        root.setLevel(logging.WARNING)


def test_configure_logging_console_only_without_log_file(monkeypatch):
    monkeypatch.setattr(cli.settings, "log_file", "")
    root = logging.getLogger()
    previous = root.handlers[:]

    try:
        cli.configure_logging("info")

        assert root.level == logging.INFO
        assert not any(isinstance(h, RotatingFileHandler) for h in root.handlers)
        assert any(isinstance(h, logging.StreamHandler) for h in root.handlers)
    finally:
        for handler in root.handlers:
            handler.close()
        root.handlers = previous
        root.setLevel(logging.WARNING)
