"""flag_audit — checks that feature flags referenced in a diff are registered."""

__all__ = [
    "__version__",
    "CheckConfig",
    "CheckReport",
    "FlagReferenceExtractor",
    "load_config",
    "parse_diff",
    "run_check",
]
__version__ = "0.1.0"

from flag_audit.core.config import CheckConfig, load_config  # noqa: E402
from flag_audit.core.runner import run_check  # noqa: E402
from flag_audit.diff.parse import parse_diff  # noqa: E402
from flag_audit.report import CheckReport  # noqa: E402
from flag_audit.scanner.extract import FlagReferenceExtractor  # noqa: E402
