"""BagKit: create, validate and package BagIt-style bags."""

from bagkit.core.bag import Bag
from bagkit.core.bag_info import BagInfo
from bagkit.core.config import BagConfig, ConfigManager
from bagkit.core.exceptions import BagKitError, BagValidationError, ValidationReason
from bagkit.core.validator import BagValidator, ValidatedBag, ValidationResult

__version__ = "1.0.0"

__all__ = [
    "Bag",
    "BagConfig",
    "BagInfo",
    "BagKitError",
    "BagValidationError",
    "BagValidator",
    "ConfigManager",
    "ValidatedBag",
    "ValidationReason",
    "ValidationResult",
]
