"""Module catalog — load, validate, query, and serialize catalog/data/*.json."""

from .models import (
    Connector, Extra, DoorLeaf, FrontFeature, ModuleDef, PairingRule,
    ValidationError, CatalogResult, MODULE_KINDS, VALID_ROTATIONS,
)
from .loader import load_catalog, get_module, CATALOG_DIR
from .serialization import catalog_to_dict, module_to_dict

__all__ = [
    # Models
    "Connector", "Extra", "DoorLeaf", "FrontFeature", "ModuleDef", "PairingRule",
    "ValidationError", "CatalogResult", "MODULE_KINDS", "VALID_ROTATIONS",
    # Loader
    "load_catalog", "get_module", "CATALOG_DIR",
    # Serialization
    "catalog_to_dict", "module_to_dict",
]
