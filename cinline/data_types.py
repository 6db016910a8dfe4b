import base64
import hashlib
from dataclasses import dataclass, field
from typing import Optional

from cinline import catalog


def compute_body_hash(body: str) -> str:
    """Base64 SHA-256 digest of the verbatim C body text."""
    digest = hashlib.sha256(body.encode("utf-8")).digest()
    return base64.b64encode(digest).decode("ascii")


@dataclass(frozen=True)
class TypeDescriptor:
    name: str
    pointer_depth: int = 0
    is_const: bool = False

    def render(self) -> str:
        prefix = "const " if self.is_const else ""
        return f"{prefix}{self.name}{'*' * self.pointer_depth}"

    def to_target(self) -> str:
        return f"{catalog.target_type(self.name)}{'*' * self.pointer_depth}"


@dataclass(frozen=True)
class FunctionSignature:
    name: str
    parameters: tuple[tuple[str, TypeDescriptor], ...] = ()
    return_type: TypeDescriptor = field(default_factory=lambda: TypeDescriptor("void"))

    def parameter_type(self, name: str) -> Optional[TypeDescriptor]:
        for param_name, param_type in self.parameters:
            if param_name == name:
                return param_type
        return None

    def render(self) -> str:
        params = ", ".join(f"{t.render()} {n}" for n, t in self.parameters)
        return f"{self.return_type.render()} {self.name}({params})"


@dataclass(frozen=True)
class InlineFunctionUnit:
    signature: FunctionSignature
    original_body: str
    body_hash: str
    summary: Optional[str] = None
    # (parameter name, description) for documented parameters only
    parameter_docs: tuple[tuple[str, str], ...] = ()
    returns: Optional[str] = None

    @classmethod
    def create(
        cls,
        signature: FunctionSignature,
        original_body: str,
        summary: Optional[str] = None,
        parameter_docs: tuple[tuple[str, str], ...] = (),
        returns: Optional[str] = None,
    ) -> "InlineFunctionUnit":
        return cls(
            signature=signature,
            original_body=original_body,
            body_hash=compute_body_hash(original_body),
            summary=summary,
            parameter_docs=tuple(parameter_docs),
            returns=returns,
        )

    @property
    def name(self) -> str:
        return self.signature.name


@dataclass(frozen=True)
class CacheEntry:
    name: str
    body_hash: str
    approved_body: str
