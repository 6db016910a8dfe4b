"""Loading of the inline function units produced by the header parser."""

import json
from functools import lru_cache
from importlib import resources
from pathlib import Path
from typing import Any

from jsonschema import Draft202012Validator  # type: ignore

from cinline import logging as cinline_logging
from cinline.data_types import (FunctionSignature, InlineFunctionUnit,
                                TypeDescriptor, compute_body_hash)
from cinline.utils import read_file

logger = cinline_logging.get_logger(__name__)

_SCHEMA_NAME = "units.schema.json"


@lru_cache(maxsize=1)
def load_units_schema() -> dict:
    try:
        schema_resource = resources.files("cinline._resources").joinpath(_SCHEMA_NAME)
        with schema_resource.open("r", encoding="utf-8") as f:
            return json.load(f)
    except (FileNotFoundError, ModuleNotFoundError):
        fallback = Path(__file__).resolve().parent / "_resources" / _SCHEMA_NAME
        if not fallback.is_file():
            raise FileNotFoundError(f"Could not locate _resources/{_SCHEMA_NAME}")
        return json.loads(fallback.read_text(encoding="utf-8"))


def _parse_type(raw: dict) -> TypeDescriptor:
    return TypeDescriptor(
        name=raw["name"],
        pointer_depth=raw.get("pointer_depth", 0),
        is_const=raw.get("is_const", False),
    )


def _parse_unit(raw: dict) -> InlineFunctionUnit:
    signature = FunctionSignature(
        name=raw["name"],
        parameters=tuple((p["name"], _parse_type(p["type"])) for p in raw["parameters"]),
        return_type=_parse_type(raw["return_type"]),
    )
    body = raw["body"]
    body_hash = compute_body_hash(body)
    supplied = raw.get("body_hash")
    if supplied is not None and supplied != body_hash:
        logger.warning(
            "Body hash of %s does not match its body (supplied %s, computed %s); using the computed one",
            signature.name, supplied, body_hash,
        )
    return InlineFunctionUnit(
        signature=signature,
        original_body=body,
        body_hash=body_hash,
        summary=raw.get("summary"),
        parameter_docs=tuple(
            (p["name"], p["description"]) for p in raw["parameters"] if p.get("description")
        ),
        returns=raw.get("returns"),
    )


def parse_units(document: Any) -> list[InlineFunctionUnit]:
    try:
        Draft202012Validator(load_units_schema()).validate(document)
    except Exception as e:
        raise ValueError(f"manifest:{getattr(e, 'message', e)}") from e

    units: list[InlineFunctionUnit] = []
    seen: set[str] = set()
    for raw in document["functions"]:
        if raw["name"] in seen:
            raise ValueError(f"Duplicate inline function {raw['name']} in manifest")
        seen.add(raw["name"])
        units.append(_parse_unit(raw))
    return units


def load_units(path: str) -> list[InlineFunctionUnit]:
    text = read_file(path)
    try:
        document = json.loads(text)
    except json.JSONDecodeError as e:
        raise ValueError(f"manifest:invalid JSON in {path}: {e}") from e
    units = parse_units(document)
    logger.info("Loaded %d inline functions from %s", len(units), path)
    return units


def dump_units(units) -> dict:
    """Inverse of :func:`parse_units`, used to write manifests."""
    def _type(t: TypeDescriptor) -> dict:
        return {"name": t.name, "pointer_depth": t.pointer_depth, "is_const": t.is_const}

    def _parameter(name: str, t: TypeDescriptor, description) -> dict:
        entry = {"name": name, "type": _type(t)}
        if description:
            entry["description"] = description
        return entry

    functions = []
    for unit in units:
        docs = dict(unit.parameter_docs)
        entry = {
            "name": unit.name,
            "return_type": _type(unit.signature.return_type),
            "parameters": [_parameter(n, t, docs.get(n)) for n, t in unit.signature.parameters],
            "body": unit.original_body,
            "body_hash": unit.body_hash,
        }
        if unit.summary is not None:
            entry["summary"] = unit.summary
        if unit.returns is not None:
            entry["returns"] = unit.returns
        functions.append(entry)
    return {"functions": functions}
