"""Text rewrites that turn an inline C function body into C#.

Each rewriter is a pure ``str -> str`` function. They run in the order of
``REWRITE_PIPELINE``; later passes rely on earlier ones having normalised
their input (the cast pass sees catalog type names already mapped, the
formatter sees the final token sequence). A pattern that does not match
leaves the text untouched.
"""

import re
from typing import Callable, NamedTuple

from cinline import catalog
from cinline.stubs import comment_out, unimplemented_stub

BUILTIN_STUB_MESSAGE = "Function contains __builtin functions that need manual C# implementation"

# Statement keywords that must never be mistaken for a declared type or name
_STATEMENT_KEYWORDS = (
    "return", "else", "goto", "case", "default", "break", "continue", "do",
    "if", "while", "for", "switch", "sizeof",
)
_KEYWORD_ALT = "|".join(_STATEMENT_KEYWORDS)

_CONST_DECL_RE = re.compile(r"\bconst\s+(\w+)\s+(\w+)\s*=")
_BARE_DECL_RE = re.compile(
    rf"^(\s*)(?!(?:{_KEYWORD_ALT})\b)(\w+)\s+(?!(?:{_KEYWORD_ALT})\b)(\w+)\s*;",
    re.MULTILINE,
)

_RATIONAL_DECL_RE = re.compile(
    rf"\b{catalog.RATIONAL_STRUCT}\s+(\w+)\s*=\s*\{{([^}}]+)\}};?"
)
_RATIONAL_ASSIGN_RE = re.compile(r"\b(\w+)\s*=\s*\{([^}]+)\};?")

_CONST_DOUBLE_PTR_CAST_RE = re.compile(r"\(\s*const\s+(\w+)\s*\*\s*const\s*\*\s*\)")
_CONST_PTR_CAST_RE = re.compile(r"\(\s*const\s+(\w+)\s*\*\s*\)")
_PTR_CAST_RE = re.compile(r"\(\s*(?!const\b)(\w+)\s*\*\s*\)")
_INTPTR_TERNARY_RE = re.compile(
    r"\(void\s*\*\s*\)\s*\(intptr_t\s*\)\s*\(([^?]+)\?\s*([^:]+):\s*([^)]+)\)"
)
_INTPTR_CAST_RE = re.compile(r"\(void\s*\*\s*\)\s*\(intptr_t\s*\)")
_UNSIGNED_INT_CAST_RE = re.compile(r"\(\s*unsigned\s+int\s*\)")

_INT_LITERAL = r"\b(0[xX][0-9A-Fa-f]+|\d+)"
_ULL_SUFFIX_RE = re.compile(_INT_LITERAL + r"(?:ULL|ull|uLL|Ull)\b")
_LL_SUFFIX_RE = re.compile(_INT_LITERAL + r"(?:LL|ll)\b")
_U_SUFFIX_RE = re.compile(_INT_LITERAL + r"[uU]\b")

BUILTIN_RE = re.compile(r"\b__builtin_\w+")

# block comments first so a `//` inside one is left alone
_COMMENT_RE = re.compile(r"/\*.*?\*/|//[^\n]*", re.DOTALL)


class Rewriter(NamedTuple):
    name: str
    apply: Callable[[str], str]


def normalize_declarations(code: str) -> str:
    # const T x = ...  ->  var x = ...
    code = _CONST_DECL_RE.sub(r"var \2 =", code)
    # T x;  ->  var x;
    return _BARE_DECL_RE.sub(r"\1var \3;", code)


def _rational_fields(values: str):
    parts = values.split(",")
    if len(parts) != 2:
        return None
    numerator, denominator = (part.strip() for part in parts)
    if not numerator or not denominator:
        return None
    num_field, den_field = catalog.RATIONAL_FIELDS
    return f"{num_field} = {numerator}, {den_field} = {denominator}"


def rewrite_struct_literals(code: str) -> str:
    def _declaration(match: re.Match) -> str:
        fields = _rational_fields(match.group(2))
        if fields is None:
            return match.group(0)
        return f"var {match.group(1)} = new {catalog.RATIONAL_STRUCT} {{ {fields} }};"

    def _assignment(match: re.Match) -> str:
        fields = _rational_fields(match.group(2))
        if fields is None:
            return match.group(0)
        return f"{match.group(1)} = new {catalog.RATIONAL_STRUCT} {{ {fields} }};"

    code = _RATIONAL_DECL_RE.sub(_declaration, code)
    return _RATIONAL_ASSIGN_RE.sub(_assignment, code)


def _punning_patterns():
    for union_name, members in catalog.PUNNING_UNIONS.items():
        for written in members:
            for read_back, read_type in members.items():
                if read_back == written:
                    continue
                pattern = re.compile(
                    rf"\bunion\s+{union_name}\s+(\w+)\s*;\s*"
                    rf"\1\s*\.\s*{written}\s*=\s*(\w+)\s*;\s*"
                    rf"return\s+\1\s*\.\s*{read_back}\s*;"
                )
                yield pattern, read_type


_PUNNING_PATTERNS = tuple(_punning_patterns())


def rewrite_union_punning(code: str) -> str:
    for pattern, read_type in _PUNNING_PATTERNS:
        code = pattern.sub(lambda m, t=read_type: f"return *({t}*)&{m.group(2)};", code)
    return code


def rewrite_type_names(code: str) -> str:
    for c_type, target in catalog.get_type_pairs():
        code = re.sub(r"\b" + re.escape(c_type) + r"\b", target, code)
    return code


def rewrite_casts(code: str) -> str:
    code = _CONST_DOUBLE_PTR_CAST_RE.sub(
        lambda m: f"({catalog.target_type(m.group(1))}**)", code)
    code = _CONST_PTR_CAST_RE.sub(
        lambda m: f"({catalog.target_type(m.group(1))}*)", code)
    code = _PTR_CAST_RE.sub(
        lambda m: f"({catalog.target_type(m.group(1))}*)", code)

    # (void *)(intptr_t)(p ? p : x)  ->  (void*)(p != null ? p : x)
    code = _INTPTR_TERNARY_RE.sub(
        lambda m: f"(void*)({m.group(1).strip()} != null ? {m.group(2).strip()} : {m.group(3).strip()})",
        code,
    )
    code = _INTPTR_CAST_RE.sub("(void*)", code)

    return _UNSIGNED_INT_CAST_RE.sub("(uint)", code)


def _limit_pattern(literal: str) -> re.Pattern:
    parts = [re.escape(part) for part in literal.split()]
    body = r"\s*".join(parts)
    return re.compile(r"(?<![\w.])" + body + r"(?![\w.])")


_LIMIT_PATTERNS = tuple(
    _limit_pattern(literal)
    for literal, _ in sorted(
        catalog.get_limit_pairs(), key=lambda pair: len(pair[0]), reverse=True)
)


def rewrite_constants(code: str) -> str:
    for pattern in _LIMIT_PATTERNS:
        code = pattern.sub(lambda m: catalog.map_limit(m.group(0)), code)

    code = _ULL_SUFFIX_RE.sub(r"\1UL", code)
    code = _LL_SUFFIX_RE.sub(r"\1L", code)
    return _U_SUFFIX_RE.sub(r"\1U", code)


def find_builtins(code: str) -> tuple[str, ...]:
    found: list[str] = []
    for match in BUILTIN_RE.finditer(code):
        if match.group(0) not in found:
            found.append(match.group(0))
    return tuple(found)


def rewrite_builtins(code: str) -> str:
    if not find_builtins(code):
        return code
    return comment_out(code) + "\n" + unimplemented_stub(BUILTIN_STUB_MESSAGE)


def rewrite_pointer_arithmetic(code: str) -> str:
    # Pointer casts are handled by rewrite_casts; new arithmetic idioms go here.
    return code


def _as_block_comment(match: re.Match) -> str:
    comment = match.group(0)
    if comment.startswith("/*"):
        return comment
    # a line comment would swallow the rest of the body once lines are joined
    text = comment[2:].rstrip().replace("*/", "* /")
    return f"/*{text} */"


def normalize_formatting(code: str) -> str:
    code = _COMMENT_RE.sub(_as_block_comment, code)
    code = re.sub(r"\s+", " ", code)
    code = re.sub(r"\s*{\s*", " {\n    ", code)
    code = re.sub(r"\s*}\s*", "\n}", code)
    code = re.sub(r";\s*", ";\n    ", code)
    code = code.replace("    \n", "\n")
    return code.strip()


REWRITE_PIPELINE: tuple[Rewriter, ...] = (
    Rewriter("declarations", normalize_declarations),
    Rewriter("struct_literals", rewrite_struct_literals),
    Rewriter("union_punning", rewrite_union_punning),
    Rewriter("type_names", rewrite_type_names),
    Rewriter("casts", rewrite_casts),
    Rewriter("constants", rewrite_constants),
    Rewriter("builtins", rewrite_builtins),
    Rewriter("pointer_arithmetic", rewrite_pointer_arithmetic),
    Rewriter("formatting", normalize_formatting),
)

BUILTIN_STAGE = "builtins"


def run_rewriters(code: str, rewriters=REWRITE_PIPELINE) -> str:
    for rewriter in rewriters:
        code = rewriter.apply(code)
    return code
