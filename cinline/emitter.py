from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Any, Optional, Sequence

from jinja2 import Environment, FileSystemLoader

from cinline import logging as cinline_logging
from cinline.data_types import InlineFunctionUnit
from cinline.stubs import comment_out
from cinline.translator.translator_types import TranslationOutcome
from cinline.utils import save_code, try_backup_file

logger = cinline_logging.get_logger(__name__)

_TEMPLATE_DIR = Path(__file__).with_name("templates")
_TEMPLATE_NAME = "inline_functions.cs.j2"


@lru_cache(maxsize=None)
def _get_env() -> Environment:
    return Environment(
        loader=FileSystemLoader(_TEMPLATE_DIR),
        autoescape=False,
        trim_blocks=True,
        lstrip_blocks=True,
    )


def _xml_escape(text: str) -> str:
    return text.replace("&", "&amp;").replace("<", "&lt;").replace(">", "&gt;")


def _doc_text(text: Optional[str]) -> Optional[str]:
    if not text:
        return None
    return _xml_escape(" ".join(text.split()))


def _body_lines(body: str) -> tuple[str, ...]:
    # blank lines are dropped so the baseline parser reads back the same text
    lines = [line.rstrip() for line in body.splitlines() if line.strip()]
    if lines and lines[0].lstrip().startswith("{"):
        return tuple(lines)
    return ("{",) + tuple("    " + line for line in lines) + ("}",)


@dataclass(frozen=True)
class FunctionRenderContext:
    """Template inputs for one emitted inline function."""

    name: str
    return_type: str
    parameters: str
    summary: Optional[str]
    parameter_docs: tuple[tuple[str, str], ...]
    returns: Optional[str]
    body_lines: tuple[str, ...]
    body_hash: str
    failed: bool
    reason: Optional[str]

    @classmethod
    def create(cls, unit: InlineFunctionUnit, result) -> "FunctionRenderContext":
        if result.name != unit.name:
            raise ValueError(f"Result for {result.name} does not belong to unit {unit.name}")
        signature = unit.signature
        parameters = ", ".join(
            f"{param_type.to_target()} @{param_name}" for param_name, param_type in signature.parameters
        )
        failed = result.outcome == TranslationOutcome.FAILED
        body = result.emitted_body
        if failed:
            original = signature.render() + "\n" + result.original_source.strip()
            body = "// original C source:\n" + comment_out(original) + "\n" + body
        return cls(
            name=unit.name,
            return_type=signature.return_type.to_target(),
            parameters=parameters,
            summary=_doc_text(unit.summary),
            parameter_docs=tuple((n, _doc_text(d)) for n, d in unit.parameter_docs),
            returns=_doc_text(unit.returns),
            body_lines=_body_lines(body),
            body_hash=unit.body_hash,
            failed=failed,
            reason=" ".join(result.reason.split()) if failed else None,
        )

    def as_template_args(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "return_type": self.return_type,
            "parameters": self.parameters,
            "summary": self.summary,
            "parameter_docs": self.parameter_docs,
            "returns": self.returns,
            "body_lines": self.body_lines,
            "body_hash": self.body_hash,
            "failed": self.failed,
            "reason": self.reason,
        }


def render_inline_functions(
    units: Sequence[InlineFunctionUnit],
    results: Sequence,
    namespace: str,
    type_name: str,
    file_header: Optional[str] = None,
) -> str:
    if len(units) != len(results):
        raise ValueError(f"Got {len(results)} results for {len(units)} units")
    functions = [
        FunctionRenderContext.create(unit, result).as_template_args()
        for unit, result in zip(units, results)
    ]
    template = _get_env().get_template(_TEMPLATE_NAME)
    rendered = template.render(
        file_header=file_header,
        namespace=namespace,
        type_name=type_name,
        functions=functions,
    )
    return rendered.rstrip() + "\n"


def write_inline_functions(
    path: str,
    units: Sequence[InlineFunctionUnit],
    results: Sequence,
    namespace: str,
    type_name: str,
    file_header: Optional[str] = None,
) -> str:
    code = render_inline_functions(units, results, namespace, type_name, file_header)
    backup = try_backup_file(path)
    if backup:
        logger.info("Backed up previous %s to %s", path, backup)
    save_code(path, code)
    logger.info("Wrote %d inline functions to %s", len(units), path)
    return code
