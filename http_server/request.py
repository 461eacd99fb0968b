import json
from dataclasses import dataclass
from typing import Any


@dataclass
class Request:
    method: str
    path: str
    headers: dict[str, str]
    query_params: dict[str, list]
    body: bytes
    version: str

    def __post_init__(self):
        self._dict = None
        if self.body:
            try:
                parsed = json.loads(self.body)
            except (json.JSONDecodeError, UnicodeDecodeError):
                parsed = None
            if isinstance(parsed, dict):
                self._dict = parsed

    @property
    def is_json(self) -> bool:
        return self._dict is not None

    def has(self, field: str) -> bool:
        if not field:
            raise ValueError("Field cannot be empty")

        if field in self.query_params:
            return True

        return self._dict is not None and field in self._dict

    def get(self, field: str, default: Any = None) -> Any:
        """Look up field in the query string first, then in the JSON body."""
        if not field:
            raise ValueError("Field cannot be empty")

        if field in self.query_params and self.query_params[field]:
            return self.query_params[field][0]

        if self._dict is not None and field in self._dict:
            return self._dict[field]

        return default
