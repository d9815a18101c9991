"""Path parameter converters and pattern compilation.

Route paths use ``{name}`` or ``{name:type}`` segments::

    "/users/{id:int}"      -> matches "/users/42", id="42"
    "/files/{rest:path}"   -> matches "/files/a/b.txt", rest="a/b.txt"

Converted values stay strings in ``request.path_params``; handlers
convert with ``convert_param`` when they need the typed value.
"""

import re

from roost.errors import ConfigurationError

# (regex_pattern, python_type) for each supported converter
CONVERTERS: dict[str, tuple[str, type]] = {
    "str": (r"[^/]+", str),
    "int": (r"\d+", int),
    "float": (r"\d+(?:\.\d+)?", float),
    "path": (r".+", str),
}

_PARAM = re.compile(r"^\{(?P<name>[A-Za-z_][A-Za-z0-9_]*)(?::(?P<type>[a-z]+))?\}$")


def convert_param(value: str, param_type: str) -> str | int | float:
    """Convert a captured path parameter string to the target type.

    Raises ``ValueError`` if the string cannot be converted.
    Raises ``KeyError`` if *param_type* is not a registered converter.
    """
    _, target_type = CONVERTERS[param_type]
    return target_type(value)


def compile_path(path: str, *, prefix: bool) -> re.Pattern[str]:
    """Compile a route path into a regex.

    With *prefix* the pattern matches the path itself or any path below
    it on a segment boundary (``/api`` matches ``/api`` and ``/api/v1``
    but not ``/apix``); otherwise it must match the whole path. A
    trailing slash on the request path is ignored either way.
    """
    if "<" in path and ">" in path:
        msg = f"Route path {path!r} uses <param> syntax; roost expects {{param}}."
        raise ConfigurationError(msg)

    parts: list[str] = []
    for segment in path.strip("/").split("/"):
        if not segment:
            continue
        param = _PARAM.match(segment)
        if param is None:
            if "{" in segment or "}" in segment:
                msg = f"Malformed parameter segment {segment!r} in route path {path!r}."
                raise ConfigurationError(msg)
            parts.append(re.escape(segment))
            continue
        param_type = param.group("type") or "str"
        if param_type not in CONVERTERS:
            msg = f"Unknown converter {param_type!r} in route path {path!r}."
            raise ConfigurationError(msg)
        pattern, _ = CONVERTERS[param_type]
        parts.append(f"(?P<{param.group('name')}>{pattern})")

    body = "".join(f"/{part}" for part in parts)
    if prefix:
        return re.compile(f"^{body}(?=/|$)")
    return re.compile(f"^{body}/?$")
