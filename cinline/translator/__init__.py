from .orchestrator import InlineFunctionTranslator
from .rewriters import REWRITE_PIPELINE, Rewriter, run_rewriters
from .translator_types import (Failed, FailureKind, Reused, RewriteOutcome,
                               Translated, TranslationOutcome,
                               TranslationResult, TranslationSummary)
from .validator import ConfidenceValidator, ValidationReport

__all__ = [
    "InlineFunctionTranslator",
    "ConfidenceValidator",
    "ValidationReport",
    "REWRITE_PIPELINE",
    "Rewriter",
    "run_rewriters",
    "Translated",
    "Reused",
    "Failed",
    "FailureKind",
    "RewriteOutcome",
    "TranslationOutcome",
    "TranslationResult",
    "TranslationSummary",
]
