__version__ = "0.1.0"

from .allocation import allocate, reconcile_resources
from .extraction import extract_issue_signals
from .fallback import synthesize_fallback
from .models import ConfigurationResult, IssueSignals, WorkloadConfig
from .pipeline import MIGConfigEngine
from .validation import validate_config

__all__ = [
    "ConfigurationResult",
    "IssueSignals",
    "MIGConfigEngine",
    "WorkloadConfig",
    "__version__",
    "allocate",
    "extract_issue_signals",
    "reconcile_resources",
    "synthesize_fallback",
    "validate_config",
]
