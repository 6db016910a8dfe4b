import re
from dataclasses import dataclass, field
from typing import Iterable, Optional, Sequence

from cinline import catalog
from cinline import logging as cinline_logging
from cinline.data_types import FunctionSignature
from cinline.stubs import comment_out, unimplemented_stub

from .rewriters import BUILTIN_RE

logger = cinline_logging.get_logger(__name__)

COMPLEX_EXPRESSION_REASON = "Complex expressions requiring manual conversion"
NOT_A_BLOCK_REASON = "Body is not a brace-enclosed block"

# Constructs the rewriters are known not to translate soundly. Their
# presence means the output must be reviewed by a human.
COMPLEX_PATTERNS: tuple[tuple[str, str], ...] = (
    # single & and | only; && and || are logical operators
    (r"(?<!&)&\s*~", "bitwise AND with complement"),
    (r"\?\s*[^:]+\s*:", "ternary conditional"),
    (r"(?<!\|)\|\s*\d", "bitwise OR against a literal"),
    (r"\^", "bitwise XOR"),
    (r"<<\s+\w+\)\s*-", "shift followed by arithmetic"),
    (r"void\*.*\?", "pointer-typed ternary"),
    (r"\(\w+\s+-\s+\d+U\)\s*<<", "shift of a subtraction"),
    (r"return\s+\w+\(", "function call inside return"),
    (r"\d+U\s*<<", "shifted unsigned literal"),
    (r">>\s*\d+\s*\&", "shift right combined with bitwise AND"),
    (r"if\s*\(\s*\w+\s*&\s*\(", "integer-to-boolean if guard"),
    (r"return\s+\(\s*~\w+\)\s*>>", "complemented shift return"),
    (r"return\s+\w+;.*byte", "narrowing return to byte"),
    (r"return\s+\w+;.*short", "narrowing return to short"),
    (r"\(\s*byte\*\*\s*\)\s*\w+", "double-pointer buffer cast"),
    (r"\(\s*\w+\s*\+\s*\(\s*\w+\s*>>\s*\d+\)\s*\)", "shift inside parenthesized addition"),
)

_MISSING_PAREN_RE = re.compile(r":\s*\([^)]*;")
_INCOMPLETE_STATEMENT_RE = re.compile(r"\([^)]*;\s*$", re.MULTILINE)
_UNINITIALIZED_VAR_RE = re.compile(r"\bvar\s+\w+\s*;")
_RETURN_IDENTIFIER_RE = re.compile(r"\breturn\s+(\w+)\s*;")

_RESIDUAL_C_PATTERNS: tuple[tuple[str, str], ...] = (
    (r"\b\w+_t\b", "C type name"),
    (r"\b(?:U?(?:CHAR|SCHAR|SHRT|INT|LONG|LLONG)|U?INT(?:8|16|32|64)|U?INTPTR|SIZE|SSIZE)_(?:MIN|MAX)\b",
     "C limit macro"),
    (r"\bunion\b", "C union"),
    (r"\bunsigned\b", "C unsigned qualifier"),
    (r"\bsigned\b", "C signed qualifier"),
    (r"\bstruct\b", "C struct keyword"),
    (r"\bconst\b", "C const qualifier"),
    (r"\bNULL\b", "C NULL macro"),
    (BUILTIN_RE.pattern, "compiler builtin"),
)


@dataclass(frozen=True)
class ValidationReport:
    accepted: bool
    reasons: tuple[str, ...] = field(default_factory=tuple)

    def describe(self) -> str:
        return ", ".join(self.reasons)


def _compile_denylist(entries: Iterable) -> tuple[tuple[re.Pattern, str], ...]:
    compiled = []
    for entry in entries:
        if isinstance(entry, dict):
            pattern, description = entry.get("pattern"), entry.get("description")
        else:
            pattern, description = entry
        if not pattern:
            raise ValueError(f"Denylist entry without pattern: {entry!r}")
        compiled.append((re.compile(pattern), description or pattern))
    return tuple(compiled)


_COMPLEX_COMPILED = _compile_denylist(COMPLEX_PATTERNS)
_RESIDUAL_COMPILED = _compile_denylist(_RESIDUAL_C_PATTERNS)


class ConfidenceValidator:
    def __init__(self, extra_denylist: Sequence = (), check_residual_c: bool = True):
        self.denylist = _COMPLEX_COMPILED + _compile_denylist(extra_denylist)
        self.check_residual_c = check_residual_c

    @classmethod
    def from_config(cls, config: dict) -> "ConfidenceValidator":
        validation_cfg = config.get("validation", {}) if config else {}
        return cls(
            extra_denylist=validation_cfg.get("extra_denylist", ()),
            check_residual_c=validation_cfg.get("residual_c_check", True),
        )

    def validate(self, code: str, signature: Optional[FunctionSignature] = None) -> ValidationReport:
        reasons: list[str] = []

        if not code.lstrip().startswith("{"):
            reasons.append(NOT_A_BLOCK_REASON)
        if _MISSING_PAREN_RE.search(code):
            reasons.append("Missing closing parenthesis")
        if code.count("{") != code.count("}"):
            reasons.append("Unmatched braces")
        if code.count("(") != code.count(")"):
            reasons.append("Unmatched parentheses")
        if _INCOMPLETE_STATEMENT_RE.search(code):
            reasons.append("Incomplete statements")

        hits = [description for pattern, description in self.denylist if pattern.search(code)]
        if hits:
            reasons.append(f"{COMPLEX_EXPRESSION_REASON} ({'; '.join(hits)})")

        if signature is not None:
            narrowing = self._narrowing_returns(code, signature)
            if narrowing:
                reasons.append(
                    f"Narrowing return to {signature.return_type.to_target()} ({', '.join(narrowing)})")

        if _UNINITIALIZED_VAR_RE.search(code):
            reasons.append("Implicitly typed local without initializer")

        if self.check_residual_c:
            residual = self._residual_c(code)
            if residual:
                reasons.append(f"Untranslated C constructs ({'; '.join(residual)})")

        if reasons:
            logger.debug("Validation rejected: %s", ", ".join(reasons))
        return ValidationReport(accepted=not reasons, reasons=tuple(reasons))

    @staticmethod
    def _narrowing_returns(code: str, signature: FunctionSignature) -> list[str]:
        return_type = signature.return_type
        if return_type.pointer_depth or not catalog.is_narrow_target(return_type.to_target()):
            return []
        narrowing: list[str] = []
        for match in _RETURN_IDENTIFIER_RE.finditer(code):
            name = match.group(1)
            if name.isdigit():
                continue
            param_type = signature.parameter_type(name)
            if param_type is not None and param_type.to_target() == return_type.to_target():
                continue
            if name not in narrowing:
                narrowing.append(name)
        return narrowing

    @staticmethod
    def _residual_c(code: str) -> list[str]:
        found: list[str] = []
        for pattern, description in _RESIDUAL_COMPILED:
            match = pattern.search(code)
            if match:
                found.append(f"{description} '{match.group(0)}'")
        return found


def reject(code: str, reasons: Sequence[str]) -> str:
    message = f"Function has syntax errors or complex patterns: {', '.join(reasons)}. Manual conversion required."
    return comment_out(code) + "\n" + unimplemented_stub(message)
