from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Union


class TranslationOutcome(Enum):
    TRANSLATED = "translated"
    REUSED = "reused"
    FAILED = "failed"


class FailureKind(Enum):
    UNSUPPORTED_INTRINSIC = auto()
    VALIDATION_REJECTED = auto()
    INTERNAL_ERROR = auto()


@dataclass(frozen=True)
class Translated:
    name: str
    body: str

    outcome = TranslationOutcome.TRANSLATED
    is_usable = True

    @property
    def emitted_body(self) -> str:
        return self.body


@dataclass(frozen=True)
class Reused:
    name: str
    body: str

    outcome = TranslationOutcome.REUSED
    is_usable = True

    @property
    def emitted_body(self) -> str:
        return self.body


@dataclass(frozen=True)
class Failed:
    name: str
    kind: FailureKind
    reason: str
    original_source: str
    # commented-out rewritten text followed by a throwing statement
    stub_body: str

    outcome = TranslationOutcome.FAILED
    is_usable = False

    @property
    def emitted_body(self) -> str:
        return self.stub_body


TranslationResult = Union[Translated, Reused, Failed]


@dataclass(frozen=True)
class RewriteOutcome:
    text: str
    intrinsics: tuple[str, ...] = ()

    @property
    def short_circuited(self) -> bool:
        return bool(self.intrinsics)


@dataclass
class TranslationSummary:
    translated: int = 0
    reused: int = 0
    failed: int = 0
    failed_names: list[str] = field(default_factory=list)

    @classmethod
    def from_results(cls, results) -> "TranslationSummary":
        summary = cls()
        for result in results:
            if result.outcome == TranslationOutcome.TRANSLATED:
                summary.translated += 1
            elif result.outcome == TranslationOutcome.REUSED:
                summary.reused += 1
            else:
                summary.failed += 1
                summary.failed_names.append(result.name)
        return summary

    @property
    def total(self) -> int:
        return self.translated + self.reused + self.failed
