# osconsole/schemas/common.py
from __future__ import annotations

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """
    База для всіх моделей консолі.

    Назовні (UI) віддаємо camelCase через alias, з бекенду приймаємо snake_case
    за іменем поля. Числові id бекенду приводимо до str.
    """
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        coerce_numbers_to_str=True,
        from_attributes=True,
    )
