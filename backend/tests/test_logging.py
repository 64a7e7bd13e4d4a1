import json
import logging
import sys

from subgate.core.logging import JSONFormatter, get_logger


def _record(msg, *args, exc_info=None, **extra):
    record = logging.LogRecord("subgate.test", logging.INFO, __file__, 1, msg, args, exc_info)
    for key, value in extra.items():
        setattr(record, key, value)
    return record


def test_json_formatter_basic_fields():
    line = JSONFormatter().format(_record("ユーザー作成: user_id=%s", "user_1"))

    entry = json.loads(line)
    assert entry["level"] == "INFO"
    assert entry["logger"] == "subgate.test"
    assert entry["message"] == "ユーザー作成: user_id=user_1"
    assert "timestamp" in entry
    assert "data" not in entry
    # 日本語はエスケープしない
    assert "ユーザー作成" in line


def test_json_formatter_includes_extra_data():
    entry = json.loads(JSONFormatter().format(_record("webhook", extra_data={"svix_id": "msg_1"})))

    assert entry["data"] == {"svix_id": "msg_1"}


def test_json_formatter_includes_exception():
    try:
        raise ValueError("boom")
    except ValueError:
        record = _record("失敗", exc_info=sys.exc_info())

    entry = json.loads(JSONFormatter().format(record))

    assert "ValueError: boom" in entry["exception"]


def test_get_logger_is_namespaced():
    assert get_logger("subgate.routers").name == "subgate.routers"
