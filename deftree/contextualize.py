"""Work out where each request field travels for every http binding."""

from __future__ import annotations

import re

from deftree.tree import (
    HttpParameter,
    MessageField,
    MethodHttpBinding,
    MicroserviceDefinition,
    ServiceMethod,
)

_HTTP_VERBS = frozenset({"get", "put", "post", "delete", "patch"})
_PATH_PARAM = re.compile(r"{(.*?)}")
_BRACES = re.compile(r"[{}]")


def assemble(tree: MicroserviceDefinition) -> None:
    """Fill in verb, path and parameters of every http binding in the tree."""
    for pfile in tree.files:
        for service in pfile.services:
            for method in service.methods:
                for binding in method.http_bindings:
                    contextualize_binding(method, binding)


def contextualize_binding(method: ServiceMethod, binding: MethodHttpBinding) -> None:
    """Set the verb, path and one parameter per request field on `binding`."""
    binding.verb, binding.path = get_verb(binding)
    message = method.request_type
    fields = message.fields if message is not None else []
    binding.params = [
        HttpParameter(
            name=fld.name,
            type=fld.type.name,
            location=param_location(fld, binding),
        )
        for fld in fields
    ]


def get_verb(binding: MethodHttpBinding) -> tuple[str, str]:
    """Return the http verb and path declared by a binding, or empty strings."""
    if binding.custom_http_pattern is not None:
        verb = path = ""
        for fld in binding.custom_http_pattern:
            if fld.kind == "kind":
                verb = fld.value
            elif fld.kind == "path":
                path = fld.value
        return verb, path
    for fld in binding.fields:
        if fld.kind in _HTTP_VERBS:
            return fld.kind, fld.value
    return "", ""


def param_location(field: MessageField, binding: MethodHttpBinding) -> str:
    """Return "path", "body" or "query" for a request field under a binding."""
    if any(param.split(".")[0] == field.name for param in get_path_params(binding)):
        return "path"
    for opt in binding.fields:
        if opt.kind == "body" and opt.value in ("*", field.name):
            return "body"
    return "query"


def get_path_params(binding: MethodHttpBinding) -> list[str]:
    """Return the names enclosed in braces within the binding's path."""
    _, path = get_verb(binding)
    return [_BRACES.sub("", m.group(0)) for m in _PATH_PARAM.finditer(path)]