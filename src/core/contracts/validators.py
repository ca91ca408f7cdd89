"""
Graft Directive Contract

Форма graft-директивы манифеста задаётся JSON Schema (contracts/schema/graft.json)
и проверяется до построения pydantic-модели: ошибка контракта указывает
на конкретное поле YAML, а не на поле модели.

Wire-форма скаляров (BigInt, BigDecimal, Bytes) контрактом не описывается:
её схема берётся из pydantic (`Model.model_json_schema()`).
"""

import functools
import json
from pathlib import Path
from typing import Any, Dict, Final, List

import jsonschema
from jsonschema import Draft202012Validator

# Корень проекта: src/core/contracts/validators.py -> 3 уровня вверх
SCHEMA_DIR: Final[Path] = Path(__file__).resolve().parents[3] / "contracts" / "schema"

GRAFT_SCHEMA: Final[str] = "graft"


@functools.lru_cache(maxsize=None)
def load_schema(name: str) -> Dict[str, Any]:
    """
    Схема contracts/schema/<name>.json, проверенная по мета-схеме 2020-12.

    Raises:
        FileNotFoundError: Если файла схемы нет
        ValueError: Если файл не является валидной JSON Schema
    """
    path = SCHEMA_DIR / f"{name}.json"
    with path.open("r", encoding="utf-8") as f:
        schema = json.load(f)
    try:
        Draft202012Validator.check_schema(schema)
    except jsonschema.SchemaError as e:
        raise ValueError(f"Invalid JSON Schema in {path.name}: {e.message}") from e
    return schema


class GraftValidator:
    """
    Валидатор graft-директивы.

    Проверяет только форму (base, block); наличие обработанных блоков
    у base проверяется в src.manifest.graft.validate_graft_base.
    """

    def __init__(self) -> None:
        self.schema = load_schema(GRAFT_SCHEMA)
        self._validator = Draft202012Validator(self.schema)

    def validate(self, data: Any) -> None:
        """
        Raises:
            jsonschema.ValidationError: первая по jsonschema.exceptions.relevance ошибка
        """
        error = jsonschema.exceptions.best_match(self._validator.iter_errors(data))
        if error is not None:
            raise error

    def errors(self, data: Any) -> List[str]:
        """Все нарушения в виде 'путь: сообщение', по порядку пути."""
        found = sorted(self._validator.iter_errors(data), key=lambda e: list(e.path))
        return [f"{e.json_path}: {e.message}" for e in found]


@functools.lru_cache(maxsize=1)
def _graft_validator() -> GraftValidator:
    return GraftValidator()


def validate_graft(data: Any) -> None:
    """
    Raises:
        jsonschema.ValidationError: Если graft-директива не соответствует схеме
    """
    _graft_validator().validate(data)
