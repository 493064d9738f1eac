"""Definition tree: nodes describing a service declared in protobuf files."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Optional

_INDENT = "    "
_GO_SPACE = "\t\n\f\r "
_LINE_TRAILING_SPACE = re.compile(r"[\t\n\f\r ]+\n")


class NodeNotFoundError(LookupError):
    """Raised when a name path does not lead to a node of the tree."""


def scrub_comments(comment: str) -> str:
    """Strip comment artifacts: leading slashes, stray '/' and trailing space."""
    comment = comment.replace("\n/ ", "\n").replace("\n/", "\n")
    comment = comment.lstrip("/").lstrip(_GO_SPACE)
    comment = comment.rstrip(_GO_SPACE)
    return _LINE_TRAILING_SPACE.sub("\n", comment)


def clean_str(s: str) -> str:
    """Escape newlines, tabs and double quotes so a string prints on one line."""
    return s.replace("\n", "\\n").replace("\t", "\\t").replace('"', '\\"')


def name_link(text: str) -> str:
    """Turn a dotted type name into a markdown link to its last component."""
    if "." not in text:
        return text
    name = text.rsplit(".", 1)[-1]
    return f"[{name}](#{name})"


def _indent(depth: int, text: str) -> str:
    return _INDENT * depth + text


class _ScrubbedText:
    """Descriptor that scrubs comment text whenever it is assigned."""

    def __set_name__(self, owner, name):
        self._attr = "_" + name

    def __get__(self, obj, objtype=None):
        if obj is None:
            return ""
        return obj.__dict__.get(self._attr, "")

    def __set__(self, obj, value):
        obj.__dict__[self._attr] = scrub_comments(value)


@dataclass
class Describable:
    """A named node of the tree with a description and optional children."""

    name: str = ""
    description: str = _ScrubbedText()

    def describe(self, depth: int) -> str:
        """Render this node as indented text at the given depth."""
        return _indent(depth, f"Name: {self.name}\n") + _indent(
            depth, f"Desc: {self.description}\n"
        )

    def get_by_name(self, name: str) -> Optional[Describable]:
        """Return the direct child with the given name, if any."""
        return None


def describe_markdown(node: Describable, depth: int) -> str:
    """Render a node as a markdown heading followed by its description."""
    text = f"{'#' * depth} {node.name}\n\n"
    if len(node.description) > 1:
        text += f"{node.description}\n\n"
    return text


@dataclass
class EnumValue(Describable):
    number: int = 0

    def describe(self, depth: int) -> str:
        return super().describe(depth) + _indent(depth, f"Number: {self.number}\n")


@dataclass
class ProtoEnum(Describable):
    values: list[EnumValue] = field(default_factory=list)

    def describe(self, depth: int) -> str:
        text = super().describe(depth)
        for idx, value in enumerate(self.values):
            text += _indent(depth, f"Value {idx}:\n")
            text += value.describe(depth + 1)
        return text

    def get_by_name(self, name: str) -> Optional[Describable]:
        return next((v for v in self.values if v.name == name), None)


@dataclass
class FieldType(Describable):
    enum: Optional[ProtoEnum] = None

    def describe(self, depth: int) -> str:
        return super().describe(depth)


@dataclass
class MessageField(Describable):
    type: FieldType = field(default_factory=FieldType)
    number: int = 0
    # One of "LABEL_OPTIONAL", "LABEL_REPEATED" or "LABEL_REQUIRED".
    label: str = ""
    is_map: bool = False

    def describe(self, depth: int) -> str:
        text = super().describe(depth)
        text += _indent(depth, f"Number: {self.number}\n")
        text += _indent(depth, "Type:\n")
        text += self.type.describe(depth + 1)
        return text


@dataclass
class ProtoMessage(Describable):
    fields: list[MessageField] = field(default_factory=list)

    def describe(self, depth: int) -> str:
        text = super().describe(depth)
        for idx, fld in enumerate(self.fields):
            text += _indent(depth, f"Field {idx}:\n")
            text += fld.describe(depth + 1)
        return text

    def get_by_name(self, name: str) -> Optional[Describable]:
        return next((f for f in self.fields if f.name == name), None)


@dataclass
class BindingField(Describable):
    """One `kind: value` entry of an rpc method's http option."""

    kind: str = ""
    value: str = ""

    def describe(self, depth: int) -> str:
        text = super().describe(depth)
        text += _indent(depth, f"Kind: {self.kind}\n")
        text += _indent(depth, f"Value: {self.value}\n")
        return text


@dataclass
class HttpParameter(Describable):
    """A request-message field and where it travels in an http request."""

    location: str = ""
    type: str = ""

    def describe(self, depth: int) -> str:
        text = super().describe(depth)
        text += _indent(depth, f"Location: {self.location}\n")
        text += _indent(depth, f"Type: {self.type}\n")
        return text


@dataclass
class MethodHttpBinding(Describable):
    verb: str = ""
    path: str = ""
    fields: list[BindingField] = field(default_factory=list)
    custom_http_pattern: Optional[list[BindingField]] = None
    params: list[HttpParameter] = field(default_factory=list)

    def describe(self, depth: int) -> str:
        text = super().describe(depth)
        for fld in self.fields:
            text += fld.describe(depth + 1)
        return text


@dataclass
class ServiceMethod(Describable):
    request_type: Optional[ProtoMessage] = None
    response_type: Optional[ProtoMessage] = None
    http_bindings: list[MethodHttpBinding] = field(default_factory=list)

    def describe(self, depth: int) -> str:
        request = self.request_type.name if self.request_type else ""
        response = self.response_type.name if self.response_type else ""
        text = super().describe(depth)
        text += _indent(depth, f"RequestType: {request}\n")
        text += _indent(depth, f"ResponseType: {response}\n")
        text += _indent(depth, "MethodHttpBinding:\n")
        for binding in self.http_bindings:
            text += binding.describe(depth + 1)
        return text

    def get_by_name(self, name: str) -> Optional[Describable]:
        if self.request_type is not None and name == self.request_type.name:
            return self.request_type
        if self.response_type is not None and name == self.response_type.name:
            return self.response_type
        return None


@dataclass
class ProtoService(Describable):
    methods: list[ServiceMethod] = field(default_factory=list)
    fully_qualified_name: str = ""

    def describe(self, depth: int) -> str:
        text = super().describe(depth)
        for idx, method in enumerate(self.methods):
            text += _indent(depth, f"Method {idx}:\n")
            text += method.describe(depth + 1)
        return text

    def get_by_name(self, name: str) -> Optional[Describable]:
        return next((m for m in self.methods if m.name == name), None)


@dataclass
class ProtoFile(Describable):
    messages: list[ProtoMessage] = field(default_factory=list)
    enums: list[ProtoEnum] = field(default_factory=list)
    services: list[ProtoService] = field(default_factory=list)

    def describe(self, depth: int) -> str:
        text = super().describe(depth)
        for idx, svc in enumerate(self.services):
            text += _indent(depth, f"Service {idx}:\n")
            text += svc.describe(depth + 1)
        for idx, msg in enumerate(self.messages):
            text += _indent(depth, f"Message {idx}:\n")
            text += msg.describe(depth + 1)
        for idx, enum in enumerate(self.enums):
            text += _indent(depth, f"Enum {idx}:\n")
            text += enum.describe(depth + 1)
        return text

    def get_by_name(self, name: str) -> Optional[Describable]:
        for group in (self.messages, self.enums, self.services):
            for node in group:
                if node.name == name:
                    return node
        return None


@dataclass
class MicroserviceDefinition(Describable):
    """Root of a tree; its name is the protobuf package of the definition."""

    files: list[ProtoFile] = field(default_factory=list)

    def describe(self, depth: int) -> str:
        text = super().describe(depth)
        for idx, pfile in enumerate(self.files):
            text += _indent(depth, f"File {idx}:\n")
            text += pfile.describe(depth + 1)
        return text

    def get_by_name(self, name: str) -> Optional[Describable]:
        return next((f for f in self.files if f.name == name), None)

    def set_comment(self, namepath: list[str], comment_body: str) -> None:
        """Set the description of the node reached by following `namepath`."""
        node: Describable = self
        for name in namepath:
            child = node.get_by_name(name)
            if child is None:
                raise NodeNotFoundError(
                    f"cannot find node with name {name!r} in namepath "
                    f"{namepath!r} on node {node.name!r}"
                )
            node = child
        node.description = comment_body

    def __str__(self) -> str:
        return self.describe(0)