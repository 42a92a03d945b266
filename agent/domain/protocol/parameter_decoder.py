from typing import Dict, Any
import json
import re

from domain.protocol.tag_extractor import extract_fragments

_NUMBER_RE = re.compile(r"^-?\d+(\.\d+)?$")
_LITERALS = ("true", "false", "null")


def _reject_constant(name: str) -> Any:
    # json.loads accepts NaN/Infinity by default; strict JSON does not
    raise ValueError(f"Invalid JSON constant: {name}")


def _looks_like_json(value: str) -> bool:
    return (
        value in _LITERALS
        or bool(_NUMBER_RE.match(value))
        or (value.startswith("{") and value.endswith("}"))
        or (value.startswith("[") and value.endswith("]"))
    )


def decode_value(raw: str) -> Any:
    """Decode one parameter value.

    The value is trimmed first. Literals, numbers, objects and arrays are
    parsed as strict JSON; anything else, including JSON-looking text that
    fails to parse, is returned as the trimmed string.
    """
    value = raw.strip()
    if value == "":
        return value

    if _looks_like_json(value):
        try:
            return json.loads(value, parse_constant=_reject_constant)
        except ValueError:
            pass

    return value


def decode_parameters(content: str) -> Dict[str, Any]:
    """Decode the child tags of a tool fragment into a parameter map.

    Only one level is decoded; a duplicated parameter name keeps the last
    value seen.
    """
    parameters: Dict[str, Any] = {}

    for child in extract_fragments(content):
        parameters[child.tag_name] = decode_value(child.content)

    return parameters
