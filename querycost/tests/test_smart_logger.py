# python -m pytest querycost/tests/test_smart_logger.py -v

import json

from querycost.smart_logger import SmartLogger


def _logger(tmp_path, **kwargs):
    return SmartLogger(
        main_log_path=str(tmp_path / "flow.jsonl"),
        detail_log_dir=str(tmp_path / "details"),
        console_output=False,
        file_output=True,
        **kwargs,
    )


def _entries(tmp_path):
    lines = (tmp_path / "flow.jsonl").read_text(encoding="utf-8").splitlines()
    return [json.loads(line) for line in lines]


def test_writes_jsonl_entry(tmp_path):
    logger = _logger(tmp_path, min_level="DEBUG")

    logger._log("INFO", "query_cost.router.allowed", category="query_cost.router", params={"cost": 110})

    (entry,) = _entries(tmp_path)
    assert entry["message"] == "query_cost.router.allowed"
    assert entry["category"] == "query_cost.router"
    assert entry["params_summary"] == {"cost": 110}


def test_skips_levels_below_minimum(tmp_path):
    logger = _logger(tmp_path, min_level="WARNING")

    logger._log("INFO", "ignored")
    logger._log("WARNING", "kept")

    assert [e["message"] for e in _entries(tmp_path)] == ["kept"]


def test_long_params_spill_to_detail_file(tmp_path):
    logger = _logger(tmp_path, min_level="DEBUG")
    params = {"sql": "SELECT " + ", ".join(f"c{i}" for i in range(100)) + " FROM keys"}

    logger._log("INFO", "query_cost.router.invalid_statement", params=params, max_inline_chars=50)

    (entry,) = _entries(tmp_path)
    assert entry["has_detail_file"] is True
    assert entry["params_summary"] == {"keys": ["sql"]}
    detail = json.loads((tmp_path / "details" / entry["detail_ref"]).read_text(encoding="utf-8"))
    assert detail == params
