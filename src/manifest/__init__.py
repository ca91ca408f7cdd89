"""
Manifest boundary: graft-директива и ошибки её валидации.
"""

from src.manifest.graft import (
    BLOCK_NUMBER_MAX,
    Graft,
    GraftBaseInvalid,
    ManifestParseError,
    ManifestValidationError,
    SubgraphManifest,
    parse_manifest,
    validate_graft_base,
    validate_manifest,
)

__all__ = [
    "BLOCK_NUMBER_MAX",
    "Graft",
    "GraftBaseInvalid",
    "ManifestParseError",
    "ManifestValidationError",
    "SubgraphManifest",
    "parse_manifest",
    "validate_graft_base",
    "validate_manifest",
]
