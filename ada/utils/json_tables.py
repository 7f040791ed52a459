"""
JSON table files - one list of row dicts per {base_dir}/{name}.json
"""
import json
import os
from typing import List, Type

from ada.errors import AdaError


class JsonTables:
    """Reads and writes whole JSON tables, wrapping I/O and decode failures in error_class"""

    def __init__(self, base_dir: str, error_class: Type[AdaError] = AdaError):
        self.base_dir = base_dir
        self.error_class = error_class

    def read(self, name: str) -> List[dict]:
        path = self.path(name)
        if not os.path.exists(path):
            return []
        try:
            with open(path, "r", encoding="utf-8") as handle:
                return json.load(handle)
        except (OSError, json.JSONDecodeError) as e:
            raise self.error_class(f"Failed to read {name} table", e)

    def write(self, name: str, rows: List[dict]) -> None:
        try:
            os.makedirs(self.base_dir, exist_ok=True)
            with open(self.path(name), "w", encoding="utf-8") as handle:
                json.dump(rows, handle, indent=2, ensure_ascii=False)
        except OSError as e:
            raise self.error_class(f"Failed to write {name} table", e)

    def path(self, name: str) -> str:
        return os.path.join(self.base_dir, f"{name}.json")
