"""learnosity_sdk: request signing for the Learnosity APIs."""

from importlib.metadata import version, PackageNotFoundError

try:
    __version__ = version("learnosity-sdk")
except PackageNotFoundError:
    __version__ = "dev"

# Public API exports
from learnosity_sdk.api import Init
from learnosity_sdk.codes import Service
from learnosity_sdk.exceptions import ValidationError

__all__ = [
    "__version__",
    "Init",
    "Service",
    "ValidationError",
]
