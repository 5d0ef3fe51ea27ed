"""phpfmt - token based PHP source formatter."""
from .config import ConfigError, Options
from .pipeline import format_source

__version__ = "0.1.0"

__all__ = ["ConfigError", "Options", "format_source", "__version__"]
