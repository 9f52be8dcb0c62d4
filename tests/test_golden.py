import json

import pytest

from bybit_api.testhelper.golden import (
    compare,
    convert_to_json,
    json_equal,
    save_to_file,
    update_file,
)
from bybit_api.v5_account import V5AccountInfoResult

ACCOUNT_INFO = {
    "marginMode": "REGULAR_MARGIN",
    "updatedTime": "1672106576000",
    "unifiedMarginStatus": 3,
}


def test_json_equal_accepts_model_matching_dict():
    model = V5AccountInfoResult.from_dict(ACCOUNT_INFO)
    assert json_equal(ACCOUNT_INFO, model) is True


def test_json_equal_detects_difference():
    model = V5AccountInfoResult.from_dict(ACCOUNT_INFO)
    changed = dict(ACCOUNT_INFO, unifiedMarginStatus=4)
    assert json_equal(changed, model) is False


def test_json_equal_ignores_key_order():
    reordered = dict(reversed(list(ACCOUNT_INFO.items())))
    assert json_equal(reordered, ACCOUNT_INFO) is True


def test_json_equal_tells_bool_from_number():
    assert json_equal({"a": True}, {"a": 1}) is False


def test_convert_to_json_indents_by_two_spaces():
    assert convert_to_json({"a": 1}) == b'{\n  "a": 1\n}'


def test_convert_to_json_round_trips_model():
    model = V5AccountInfoResult.from_dict(ACCOUNT_INFO)
    assert json.loads(convert_to_json(model)) == ACCOUNT_INFO


def test_convert_to_json_rejects_unknown_objects():
    with pytest.raises(TypeError):
        convert_to_json({"a": object()})


def test_compare_missing_golden_file(tmp_path):
    assert compare(tmp_path / "missing.json", convert_to_json(ACCOUNT_INFO)) is False


def test_compare_matching_golden_file(tmp_path):
    golden = tmp_path / "golden.json"
    golden.write_text(json.dumps(dict(reversed(list(ACCOUNT_INFO.items())))))
    assert compare(golden, convert_to_json(ACCOUNT_INFO)) is True


def test_compare_differing_golden_file(tmp_path):
    golden = tmp_path / "golden.json"
    golden.write_text(json.dumps(ACCOUNT_INFO))
    got = convert_to_json(dict(ACCOUNT_INFO, marginMode="PORTFOLIO"))
    assert json_equal(json.loads(golden.read_text()), json.loads(got)) is False
    with pytest.raises(AssertionError):
        compare(golden, got)


def test_save_to_file_round_trip(tmp_path):
    target = tmp_path / "saved.json"
    data = convert_to_json(ACCOUNT_INFO)
    save_to_file(target, data)
    assert target.read_bytes() == data


def test_save_to_file_truncates(tmp_path):
    target = tmp_path / "saved.json"
    save_to_file(target, b"0123456789")
    save_to_file(target, b"{}")
    assert target.read_bytes() == b"{}"


def test_update_file_writes_when_enabled(tmp_path, monkeypatch):
    monkeypatch.setenv("BYBIT_TEST_UPDATED", "true")
    target = tmp_path / "golden.json"
    data = convert_to_json(ACCOUNT_INFO)
    assert update_file(target, data) is True
    assert target.read_bytes() == data


@pytest.mark.parametrize("value", [None, "false", "TRUE", "1"])
def test_update_file_skips_otherwise(tmp_path, monkeypatch, value):
    if value is None:
        monkeypatch.delenv("BYBIT_TEST_UPDATED", raising=False)
    else:
        monkeypatch.setenv("BYBIT_TEST_UPDATED", value)
    target = tmp_path / "golden.json"
    assert update_file(target, b"{}") is False
    assert target.exists() is False