from .cache import StabilityCache, build_next_baseline, load_baseline
from .data_types import (CacheEntry, FunctionSignature, InlineFunctionUnit,
                         TypeDescriptor, compute_body_hash)
from .translator import (ConfidenceValidator, Failed, FailureKind,
                         InlineFunctionTranslator, Reused, Translated,
                         TranslationOutcome)

__all__ = [
    'InlineFunctionTranslator',
    'ConfidenceValidator',
    'StabilityCache',
    'load_baseline',
    'build_next_baseline',
    'CacheEntry',
    'FunctionSignature',
    'InlineFunctionUnit',
    'TypeDescriptor',
    'compute_body_hash',
    'Translated',
    'Reused',
    'Failed',
    'FailureKind',
    'TranslationOutcome',
]
