from concurrent.futures import ThreadPoolExecutor
from typing import Optional, Sequence

from cinline import logging as cinline_logging
from cinline.cache import StabilityCache
from cinline.data_types import InlineFunctionUnit
from cinline.stubs import comment_out, unimplemented_stub

from .rewriters import BUILTIN_STAGE, REWRITE_PIPELINE, Rewriter, find_builtins
from .translator_types import (Failed, FailureKind, Reused, RewriteOutcome,
                               Translated, TranslationResult,
                               TranslationSummary)
from .validator import ConfidenceValidator, reject

logger = cinline_logging.get_logger(__name__)


class InlineFunctionTranslator:
    """Drives one inline C body through cache, rewriters and validator.

    The cache snapshot, the validator and the rewriter chain are never
    mutated while translating, so units can be processed concurrently.
    """

    def __init__(
        self,
        cache: Optional[StabilityCache] = None,
        validator: Optional[ConfidenceValidator] = None,
        rewriters: Sequence[Rewriter] = REWRITE_PIPELINE,
    ):
        self.cache = cache if cache is not None else StabilityCache.empty()
        self.validator = validator if validator is not None else ConfidenceValidator()
        self.rewriters = tuple(rewriters)

    @classmethod
    def from_config(cls, config: dict, cache: Optional[StabilityCache] = None) -> "InlineFunctionTranslator":
        return cls(cache=cache, validator=ConfidenceValidator.from_config(config))

    def rewrite(self, code: str) -> RewriteOutcome:
        for rewriter in self.rewriters:
            if rewriter.name == BUILTIN_STAGE:
                intrinsics = find_builtins(code)
                if intrinsics:
                    return RewriteOutcome(text=rewriter.apply(code), intrinsics=intrinsics)
            code = rewriter.apply(code)
        return RewriteOutcome(text=code)

    def translate(self, unit: InlineFunctionUnit) -> TranslationResult:
        try:
            return self._translate_impl(unit)
        except Exception as e:
            logger.exception("Unexpected error while translating %s", unit.name)
            reason = f"Internal error: {e}"
            return Failed(
                name=unit.name,
                kind=FailureKind.INTERNAL_ERROR,
                reason=reason,
                original_source=unit.original_body,
                stub_body=comment_out(unit.original_body) + "\n" + unimplemented_stub(reason),
            )

    def _translate_impl(self, unit: InlineFunctionUnit) -> TranslationResult:
        cached = self.cache.match(unit)
        if cached is not None:
            logger.debug("Reusing cached body for %s", unit.name)
            return Reused(name=unit.name, body=cached.approved_body)

        outcome = self.rewrite(unit.original_body)
        if outcome.short_circuited:
            reason = f"Unsupported intrinsic: {', '.join(outcome.intrinsics)}"
            logger.warning("%s requires manual implementation (%s)", unit.name, reason)
            return Failed(
                name=unit.name,
                kind=FailureKind.UNSUPPORTED_INTRINSIC,
                reason=reason,
                original_source=unit.original_body,
                stub_body=outcome.text,
            )

        report = self.validator.validate(outcome.text, unit.signature)
        if not report.accepted:
            logger.warning("%s rejected by validator: %s", unit.name, report.describe())
            return Failed(
                name=unit.name,
                kind=FailureKind.VALIDATION_REJECTED,
                reason=report.describe(),
                original_source=unit.original_body,
                stub_body=reject(outcome.text, report.reasons),
            )

        logger.debug("Translated %s", unit.name)
        return Translated(name=unit.name, body=outcome.text)

    def translate_all(
        self,
        units: Sequence[InlineFunctionUnit],
        max_workers: int = 1,
    ) -> list[TranslationResult]:
        units = list(units)
        if max_workers <= 1 or len(units) <= 1:
            results = [self.translate(unit) for unit in units]
        else:
            with ThreadPoolExecutor(max_workers=max_workers) as executor:
                # map keeps input order
                results = list(executor.map(self.translate, units))

        summary = TranslationSummary.from_results(results)
        logger.info(
            "Inline functions: %d translated, %d reused, %d failed (of %d)",
            summary.translated, summary.reused, summary.failed, summary.total,
        )
        if summary.failed_names:
            logger.info("Functions needing manual conversion: %s", ", ".join(summary.failed_names))
        return results
