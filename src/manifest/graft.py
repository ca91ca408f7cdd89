"""
Graft — директива манифеста и ошибки её валидации

Graft заставляет новый deployment стартовать с состояния существующего
(base) на заданном блоке, а не с нуля. Номер блока приходит из ledger
как BigInt-совместимое значение.

Проверки:
- форма директивы (graft.json): base — идентификатор, block — [0, 2**31 - 1]
- base должен обработать хотя бы один блок
- base должен дойти до блока graft
"""

import logging
from typing import Callable, Final, List, Optional, Union

import jsonschema
import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator

from src.core.contracts import validate_graft
from src.core.scalar.big_int import BigInt

logger = logging.getLogger(__name__)

DEPLOYMENT_ID_PATTERN: Final[str] = r"^[A-Za-z0-9_]+$"

# Номер блока: signed 32-bit
BLOCK_NUMBER_MAX: Final[int] = (1 << 31) - 1


# =============================================================================
# ERRORS
# =============================================================================


class ManifestParseError(ValueError):
    """Текст манифеста не разбирается в модель."""

    pass


class ManifestValidationError(Exception):
    """Базовый класс ошибок валидации манифеста."""

    pass


class GraftBaseInvalid(ManifestValidationError):
    """Base deployment не может служить основой graft."""

    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(f"the graft base is invalid: {reason}")


# =============================================================================
# MODELS
# =============================================================================


def _block_number(value: object) -> object:
    if isinstance(value, BigInt):
        return value.to_u64()
    return value


class Graft(BaseModel):
    """Graft-директива: стартовать с состояния base на блоке block."""

    base: str = Field(..., pattern=DEPLOYMENT_ID_PATTERN, description="Base deployment id")
    block: int = Field(..., ge=0, le=BLOCK_NUMBER_MAX, description="Блок graft")

    model_config = {"frozen": True}

    @field_validator("block", mode="before")
    @classmethod
    def block_from_big_int(cls, v: object) -> object:
        return _block_number(v)


class SubgraphManifest(BaseModel):
    """Минимальная проекция манифеста: идентификатор, схема, graft."""

    id: str = Field(..., pattern=DEPLOYMENT_ID_PATTERN)
    schema_file: str = Field(..., min_length=1)
    spec_version: str = Field(..., min_length=1)
    graft: Optional[Graft] = None

    model_config = {"frozen": True}


# =============================================================================
# PARSING
# =============================================================================


def parse_manifest(deployment_id: str, text: str) -> SubgraphManifest:
    """
    Разбор YAML манифеста.

    Args:
        deployment_id: Идентификатор deployment (например, 'Qmmanifest')
        text: YAML текст манифеста

    Raises:
        ManifestParseError: Если YAML некорректен или не соответствует контракту
    """
    try:
        raw = yaml.safe_load(text)
    except yaml.YAMLError as e:
        raise ManifestParseError(f"manifest is not valid YAML: {e}") from e
    if not isinstance(raw, dict):
        raise ManifestParseError("manifest must be a mapping")

    graft = raw.get("graft")
    if graft is not None:
        try:
            validate_graft(graft)
        except jsonschema.ValidationError as e:
            raise ManifestParseError(f"invalid graft directive: {e.message}") from e

    try:
        schema_file = raw["schema"]["file"]["/"]
        spec_version = raw["specVersion"]
    except (KeyError, TypeError) as e:
        raise ManifestParseError(f"manifest is missing required field: {e}") from e

    try:
        return SubgraphManifest(
            id=deployment_id,
            schema_file=schema_file,
            spec_version=str(spec_version),
            graft=graft,
        )
    except ValidationError as e:
        raise ManifestParseError(f"invalid manifest: {e}") from e


# =============================================================================
# VALIDATION
# =============================================================================


def validate_graft_base(
    graft: Graft,
    latest_block: Optional[Union[BigInt, int]],
) -> List[ManifestValidationError]:
    """
    Проверка, что base дошёл до блока graft.

    Args:
        graft: Директива
        latest_block: Последний обработанный base блок (None — ни одного)

    Returns:
        Список ошибок (пустой, если graft допустим)
    """
    if latest_block is None:
        return [
            GraftBaseInvalid(
                f"can not graft onto `{graft.base}` since it has not processed any blocks"
            )
        ]
    latest = int(latest_block)
    if latest < graft.block:
        return [
            GraftBaseInvalid(
                f"can not graft onto `{graft.base}` at block {graft.block} "
                f"since it has only processed block {latest}"
            )
        ]
    return []


def validate_manifest(
    manifest: SubgraphManifest,
    latest_block_of: Callable[[str], Optional[Union[BigInt, int]]],
) -> List[ManifestValidationError]:
    """
    Валидация манифеста против состояния хранилища.

    Args:
        manifest: Разобранный манифест
        latest_block_of: Последний обработанный блок по deployment id

    Returns:
        Список ошибок (пустой, если манифест допустим)
    """
    if manifest.graft is None:
        return []
    errors = validate_graft_base(manifest.graft, latest_block_of(manifest.graft.base))
    for error in errors:
        logger.debug("manifest %s rejected: %s", manifest.id, error)
    return errors
