# osconsole/core/casing.py
"""
Перетворення регістру ключів на межі з бекендом.

Бекенд говорить snake_case, браузерний UI camelCase. Перетворення глибоке
(вкладені dict/list), значення не чіпаємо.
"""
from __future__ import annotations

from typing import Any, Callable

from pydantic.alias_generators import to_camel, to_snake


def _transform(obj: Any, key_fn: Callable[[str], str]) -> Any:
    if isinstance(obj, list):
        return [_transform(v, key_fn) for v in obj]
    if isinstance(obj, dict):
        return {
            (key_fn(k) if isinstance(k, str) else k): _transform(v, key_fn)
            for k, v in obj.items()
        }
    return obj


def keys_to_snake(obj: Any) -> Any:
    return _transform(obj, to_snake)


def keys_to_camel(obj: Any) -> Any:
    return _transform(obj, to_camel)
