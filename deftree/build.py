"""Build a definition tree from a protobuf code generator request."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

from google.protobuf.compiler.plugin_pb2 import CodeGeneratorRequest
from google.protobuf.descriptor_pb2 import (
    DescriptorProto,
    EnumDescriptorProto,
    FieldDescriptorProto,
    FileDescriptorProto,
    ServiceDescriptorProto,
)

from deftree.comments import associate_comments
from deftree.tree import (
    EnumValue,
    FieldType,
    MessageField,
    MicroserviceDefinition,
    ProtoEnum,
    ProtoFile,
    ProtoMessage,
    ProtoService,
    ServiceMethod,
)


@dataclass
class TypeIndex:
    """Every message and enum of a request, keyed by fully qualified name."""

    messages: dict[str, DescriptorProto] = field(default_factory=dict)
    enums: dict[str, EnumDescriptorProto] = field(default_factory=dict)

    @classmethod
    def from_request(cls, request: CodeGeneratorRequest) -> TypeIndex:
        """Index the types declared by all files of a request, nested ones too."""
        index = cls()
        for pfile in request.proto_file:
            prefix = f".{pfile.package}" if pfile.package else ""
            for enum in pfile.enum_type:
                index.enums[f"{prefix}.{enum.name}"] = enum
            for msg in pfile.message_type:
                index._add_message(prefix, msg)
        return index

    def _add_message(self, prefix: str, msg: DescriptorProto) -> None:
        qualified = f"{prefix}.{msg.name}"
        self.messages[qualified] = msg
        for enum in msg.enum_type:
            self.enums[f"{qualified}.{enum.name}"] = enum
        for nested in msg.nested_type:
            self._add_message(qualified, nested)

    def is_map_entry(self, type_name: str) -> bool:
        """Return whether the named type is the entry message of a map field."""
        msg = self.messages.get(type_name)
        return msg is not None and msg.options.map_entry

    def enum_named(self, type_name: str) -> EnumDescriptorProto:
        """Return the enum with the given name, or raise LookupError."""
        try:
            return self.enums[type_name]
        except KeyError:
            raise LookupError(f"unknown enum type: {type_name}") from None


def find_deftree_package(request: CodeGeneratorRequest) -> str:
    """Return the package of the first file named for generation, or ''."""
    for wanted in request.file_to_generate:
        for pfile in request.proto_file:
            if pfile.name == wanted:
                return pfile.package
    return ""


def build(request: CodeGeneratorRequest) -> MicroserviceDefinition:
    """Create a tree from the files of the request's package, with comments."""
    package = find_deftree_package(request)
    tree = MicroserviceDefinition(name=package)
    types = TypeIndex.from_request(request)
    for pfile in request.proto_file:
        if pfile.package != package:
            continue
        try:
            tree.files.append(new_file(pfile, tree, types))
        except LookupError as err:
            raise LookupError(f"file creation of {pfile.name!r} failed: {err}") from err
    associate_comments(tree, request)
    return tree


def new_file(
    pfile: FileDescriptorProto, tree: MicroserviceDefinition, types: TypeIndex
) -> ProtoFile:
    """Build a ProtoFile node from a file descriptor."""
    result = ProtoFile(name=pfile.name)
    result.enums = [new_enum(enum) for enum in pfile.enum_type]

    for msg in pfile.message_type:
        try:
            result.messages.append(new_message(msg, types))
        except LookupError as err:
            raise LookupError(f"error converting message {msg.name!r}: {err}") from err

    for srvc in pfile.service:
        try:
            service = new_service(srvc, result, tree)
        except LookupError as err:
            raise LookupError(f"error converting service {srvc.name!r}: {err}") from err
        service.fully_qualified_name = f".{pfile.package}.{service.name}"
        result.services.append(service)

    # Point enum-typed fields at the enums declared in this definition.
    for msg in result.messages:
        for fld in msg.fields:
            if "." not in fld.type.name:
                continue
            enum = find_enum(tree, result, fld.type.name)
            if enum is not None:
                fld.type.enum = enum

    return result


def new_enum(enum: EnumDescriptorProto) -> ProtoEnum:
    """Build a ProtoEnum node from an enum descriptor."""
    return ProtoEnum(
        name=enum.name,
        values=[EnumValue(name=v.name, number=v.number) for v in enum.value],
    )


def new_message(msg: DescriptorProto, types: TypeIndex) -> ProtoMessage:
    """Build a ProtoMessage node from a message descriptor."""
    result = ProtoMessage(name=msg.name)
    for fdesc in msg.field:
        fld = MessageField(
            name=fdesc.name,
            number=fdesc.number,
            type=FieldType(name=get_correct_type_name(fdesc)),
            label=FieldDescriptorProto.Label.Name(fdesc.label),
        )
        if fdesc.type == FieldDescriptorProto.TYPE_MESSAGE:
            fld.is_map = types.is_map_entry(fdesc.type_name)
        elif fdesc.type == FieldDescriptorProto.TYPE_ENUM:
            fld.type.enum = new_enum(types.enum_named(fdesc.type_name))
        result.fields.append(fld)
    return result


def find_message(
    tree: MicroserviceDefinition, new_file: ProtoFile, path: str
) -> ProtoMessage:
    """Find a message by bare or fully qualified name, or raise LookupError."""
    if path.startswith("."):
        wanted = path.split(".")[2]
        candidates = [m for f in tree.files for m in f.messages] + new_file.messages
    else:
        wanted = path
        candidates = new_file.messages
    for msg in candidates:
        if msg.name == wanted:
            return msg
    raise LookupError("couldn't find message")


def find_enum(
    tree: MicroserviceDefinition, new_file: ProtoFile, path: str
) -> Optional[ProtoEnum]:
    """Find an enum by bare or fully qualified name; None when absent."""
    if path.startswith("."):
        wanted = path.split(".")[2]
        candidates = [e for f in tree.files for e in f.enums] + new_file.enums
    else:
        wanted = path
        candidates = new_file.enums
    return next((e for e in candidates if e.name == wanted), None)


def new_service(
    srvc: ServiceDescriptorProto, cur_file: ProtoFile, tree: MicroserviceDefinition
) -> ProtoService:
    """Build a ProtoService whose methods refer to already built messages."""
    service = ProtoService(name=srvc.name)
    for meth in srvc.method:
        try:
            request_type = find_message(tree, cur_file, meth.input_type)
        except LookupError:
            raise LookupError(
                f"couldn't find request message of type {meth.input_type!r} "
                f"for method {meth.name!r}"
            ) from None
        try:
            response_type = find_message(tree, cur_file, meth.output_type)
        except LookupError:
            raise LookupError(
                f"couldn't find response message of type {meth.output_type!r} "
                f"for method {meth.name!r}"
            ) from None
        service.methods.append(
            ServiceMethod(
                name=meth.name, request_type=request_type, response_type=response_type
            )
        )
    return service


def get_correct_type_name(field: FieldDescriptorProto) -> str:
    """Return the field's type name, or its scalar type's name such as TYPE_STRING."""
    return field.type_name or FieldDescriptorProto.Type.Name(field.type)


def find_service_file(request: CodeGeneratorRequest) -> str:
    """Return the first file to generate that declares a service, or ''."""
    service_files = [f.name for f in request.proto_file if f.service]
    for path in request.file_to_generate:
        for name in service_files:
            if name in path:
                return path
    return ""