import json
import os
import threading
import time
from datetime import datetime
from typing import Any, Optional

from querycost.config import settings


class SmartLogger:
    LEVEL_PRIORITY = {
        "DEBUG": 0,
        "INFO": 1,
        "WARNING": 2,
        "ERROR": 3,
        "CRITICAL": 4
    }
    _instance = None
    _instance_lock = threading.Lock()

    @classmethod
    def instance(cls):
        with cls._instance_lock:
            if cls._instance is None:
                cls._instance = cls()
            return cls._instance

    @classmethod
    def reset(cls):
        """Drop the shared instance so the next call re-reads the environment."""
        with cls._instance_lock:
            cls._instance = None

    @classmethod
    def log(cls, level, message, category=None, params=None, max_inline_chars=100):
        cls.instance()._log(level, message, category, params, max_inline_chars)

    def __init__(self,
                 main_log_path=None,
                 detail_log_dir=None,
                 min_level=None,
                 include_all_min_level=None,
                 console_output=None,
                 file_output=None):
        self.main_log_path = self._get_env_variable(
            main_log_path, "MAIN_LOG_PATH", "logs/query_cost.jsonl"
        )
        self.detail_log_dir = self._get_env_variable(
            detail_log_dir, "DETAIL_LOG_DIR", "logs/details"
        )
        self.min_level = self._get_env_variable(
            min_level, "MIN_LEVEL", settings.log_level
        )
        self.include_all_min_level = self._get_env_variable(
            include_all_min_level, "INCLUDE_ALL_MIN_LEVEL", "ERROR"
        )
        self.console_output = self._get_env_variable(
            str(console_output) if console_output is not None else None, "CONSOLE_OUTPUT", "True"
        ) == "True"
        self.file_output = self._get_env_variable(
            str(file_output) if file_output is not None else None, "FILE_OUTPUT", "False"
        ) == "True"

        self._lock = threading.Lock()
        self._last_timestamp = None
        self._timestamp_counter = 0

        if self.file_output:
            for dir_path in (os.path.dirname(self.main_log_path), self.detail_log_dir):
                if dir_path:
                    os.makedirs(dir_path, exist_ok=True)

    def _get_env_variable(self, direct_value: Optional[str], env_key: str, default: str) -> str:
        if direct_value is not None:
            return direct_value
        return os.environ.get(f"SMART_LOGGER_{env_key}", default)

    def _generate_unique_trace_id(self) -> str:
        """
        Build a trace id from the current second, suffixed with a counter
        so ids stay unique within the same second.
        """
        current_timestamp = str(int(time.time()))
        with self._lock:
            if self._last_timestamp == current_timestamp:
                self._timestamp_counter += 1
            else:
                self._last_timestamp = current_timestamp
                self._timestamp_counter = 1
            return f"{current_timestamp}_{self._timestamp_counter}"

    def _save_detail_payload(self, trace_id: str, payload: Any) -> Optional[str]:
        if not self.file_output:
            return None

        filename = f"{trace_id}.json"
        filepath = os.path.join(self.detail_log_dir, filename)
        try:
            with open(filepath, 'w', encoding='utf-8') as f:
                json.dump(payload, f, ensure_ascii=False, indent=2, default=str)
            return filename
        except OSError as e:
            return f"Error saving detail: {str(e)}"

    def _priority_at_least(self, level: str, threshold: str, fallback: int) -> bool:
        level_priority = self.LEVEL_PRIORITY.get(level.upper(), 1)
        min_priority = self.LEVEL_PRIORITY.get(threshold.upper(), fallback)
        return level_priority >= min_priority

    def _should_log(self, level: str) -> bool:
        return self._priority_at_least(level, self.min_level, 0)

    def _should_include_all(self, level: str) -> bool:
        return self._priority_at_least(level, self.include_all_min_level, 3)

    def _build_entry(self, level, message, category, params, max_inline_chars) -> dict:
        log_entry = {
            "timestamp": datetime.now().isoformat(),
            "level": level,
            "message": "" if message is None else str(message)
        }
        if category:
            log_entry["category"] = category

        if not params:
            return log_entry

        if len(str(params)) <= max_inline_chars or max_inline_chars <= 0 or self._should_include_all(level):
            log_entry["params_summary"] = params
            return log_entry

        detail_filename = self._save_detail_payload(self._generate_unique_trace_id(), params)
        if detail_filename is None:
            log_entry["detail_save_error"] = "file_output_disabled"
        elif detail_filename.startswith("Error"):
            log_entry["detail_save_error"] = detail_filename
        else:
            log_entry["has_detail_file"] = True
            log_entry["detail_ref"] = detail_filename

        if isinstance(params, dict):
            log_entry["params_summary"] = {"keys": list(params.keys())}
        elif isinstance(params, (list, tuple)):
            log_entry["params_summary"] = {"type": type(params).__name__, "length": len(params)}
        else:
            log_entry["params_summary"] = {"type": type(params).__name__}
        return log_entry

    def _log(self, level, message, category=None, params=None, max_inline_chars=100):
        """
        Args:
            level (str): DEBUG, INFO, WARNING, ERROR or CRITICAL
            message (str): dotted event name, e.g. "query_cost.router.rejected"
            category (str): log category, e.g. "query_cost.router"
            params (dict): detail parameters
            max_inline_chars (int): params longer than this go to a detail file.
                0 always keeps params inline.
        """
        if not self._should_log(level):
            return

        log_entry = self._build_entry(level, message, category, params, max_inline_chars)

        if self.file_output:
            with self._lock:
                with open(self.main_log_path, 'a', encoding='utf-8') as f:
                    f.write(json.dumps(log_entry, ensure_ascii=False, default=str) + "\n")

        if self.console_output:
            category_str = f"[{category}]" if category else ""
            if params and self._should_include_all(level):
                print(f"[{level}]{category_str} {message} {params}")
            else:
                print(f"[{level}]{category_str} {message}")
