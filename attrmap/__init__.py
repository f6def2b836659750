"""attrmap: map raw keyed data onto typed, validated objects.

Declare attributes once on a Mapper class (or in a YAML schema document),
then build typed objects from raw dicts whose keys may be renamed, nested,
or given as text or enum members.
"""

__version__ = "0.3.0"

from .config import AttrmapConfig, configure, get_config, reset_config
from .core import (
    NOT_FOUND,
    AttributeDefinition,
    AttributeSchema,
    CoercionError,
    CoercionProvider,
    IndifferentKeyStore,
    PydanticCoercionProvider,
    SchemaDocument,
    SchemaDocumentError,
    SchemaViolation,
)
from .mapper import Attribute, Mapper, SchemaModule, attribute, mapper_class
from .utils import dig

__all__ = [
    "__version__",
    "AttrmapConfig",
    "configure",
    "get_config",
    "reset_config",
    "NOT_FOUND",
    "AttributeDefinition",
    "AttributeSchema",
    "CoercionError",
    "CoercionProvider",
    "IndifferentKeyStore",
    "PydanticCoercionProvider",
    "SchemaDocument",
    "SchemaDocumentError",
    "SchemaViolation",
    "Attribute",
    "Mapper",
    "SchemaModule",
    "attribute",
    "mapper_class",
    "dig",
]
