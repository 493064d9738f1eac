"""Copy comments found in protobuf source info into a definition tree."""

from __future__ import annotations

import logging
from typing import Any

from google.protobuf.descriptor import FieldDescriptor
from google.protobuf.message import Message

from deftree.tree import (
    MicroserviceDefinition,
    NodeNotFoundError,
    clean_str,
    scrub_comments,
)

log = logging.getLogger(__name__)


def proto_field_label(field: FieldDescriptor) -> str:
    """Return the protobuf name under which a field is declared."""
    return field.name


def get_protobuf_field(field_number: int, message: Message) -> tuple[Any, str]:
    """Return the value held by the field with this number, and its name."""
    descriptor = message.DESCRIPTOR.fields_by_number.get(field_number)
    if descriptor is None:
        raise NodeNotFoundError(
            f"couldn't find a proto field with the given index {field_number!r}"
        )
    return getattr(message, descriptor.name), proto_field_label(descriptor)


def build_name_path(path, node) -> list[str]:
    """Turn a source-location path into the names of the nodes it passes."""
    return _walk(list(path), node, anonymous=False)


def _walk(path: list[int], node: Any, anonymous: bool) -> list[str]:
    # A node reached through a singular field carries no name of its own.
    if anonymous:
        name = ""
    elif isinstance(node, str):
        name = node
    elif isinstance(node, Message):
        if "name" not in node.DESCRIPTOR.fields_by_name:
            raise ValueError(f"{node.DESCRIPTOR.name} has no name field")
        name = node.name
    else:
        raise ValueError(f"expected a message, found {type(node).__name__!r}")

    if not path:
        return [name]
    if not isinstance(node, Message):
        raise ValueError(f"cannot follow path {path!r} into {type(node).__name__!r}")

    value, _ = get_protobuf_field(path[0], node)
    if len(path) == 1:
        raise ValueError(f"comment attached to a field label: {path!r}")

    descriptor = node.DESCRIPTOR.fields_by_number[path[0]]
    if descriptor.label != FieldDescriptor.LABEL_REPEATED:
        return [name, *_walk(path[1:], value, anonymous=True)]

    index = path[1]
    if not 0 <= index < len(value):
        raise IndexError(
            f"second item in path ({index}) is out of range for a field "
            f"of length {len(value)}"
        )
    return [name, *_walk(path[2:], value[index], anonymous=False)]


def associate_comments(tree: MicroserviceDefinition, request) -> None:
    """Attach leading comments of the generated files to matching tree nodes."""
    to_generate = set(request.file_to_generate)
    for pfile in request.proto_file:
        if pfile.name not in to_generate:
            continue
        for location in pfile.source_code_info.location:
            lead = location.leading_comments
            if len(lead) <= 1 and len(location.leading_detached_comments) <= 1:
                continue
            if len(location.path) == 1:
                log.debug("comment describes package name: %s", clean_str(lead))
                tree.description = scrub_comments(lead)
                continue
            try:
                name_path = build_name_path(location.path, pfile)
            except (LookupError, ValueError) as err:
                log.debug(
                    "couldn't place comment %r due to error traversing tree: %s",
                    clean_str(lead),
                    err,
                )
                continue
            try:
                tree.set_comment(name_path, scrub_comments(lead))
            except NodeNotFoundError as err:
                log.debug("cannot set comment: %s", err)