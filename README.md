# deftree

`deftree` turns a protobuf `CodeGeneratorRequest` into a *definition tree*. The
tree is made of named nodes that carry descriptions. Its nodes cover the files,
messages, enums, services and methods of a service definition. Leading comments
from the `.proto` source are attached to the nodes they describe. HTTP bindings
that you attach to methods can be expanded into the parameters they need. Each
parameter records its location (`path`, `body` or `query`) and its type.

## Installation

```
pip install deftree
```

## Building a tree

```python
from google.protobuf.compiler import plugin_pb2
from deftree.build import build

request = plugin_pb2.CodeGeneratorRequest()
request.ParseFromString(raw_bytes)

tree = build(request)
print(tree)  # same as tree.describe(0)
```

`deftree.build.build` does the following:

- It keeps only the files in the package of the first file named for generation.
- It builds `ProtoFile`, `ProtoMessage`, `ProtoEnum` and `ProtoService` nodes.
- It points each method's `request_type` and `response_type` at the matching message nodes.
- It marks map fields with `is_map`.
- It attaches a `ProtoEnum` to enum-typed fields.
- It copies leading comments into the matching nodes with `deftree.comments.associate_comments`.

A message that a method refers to but that cannot be found raises `LookupError`.
So does an enum field whose type is unknown.

The same module has smaller building blocks:

- `new_file`, `new_message`, `new_enum` and `new_service` build single nodes.
- `find_message` and `find_enum` look up nodes by name.
- `get_correct_type_name` gives a field's type name.
- `find_service_file` returns the first file to generate that declares a service.
- `TypeIndex` indexes every message and enum of a request by fully qualified name, nested types included.

## Navigating

Every node is a `deftree.tree.Describable`. Each one has:

- a `name`;
- a `description`, which is cleaned with `scrub_comments` when it is assigned;
- `describe(depth)`, which renders the node as indented text;
- `get_by_name(name)`, which looks up a direct child.

```python
svc = tree.files[0].get_by_name("ProtoService")
method = svc.get_by_name("ProtoMethod")
```

`MicroserviceDefinition.set_comment(namepath, comment_body)` walks a list of
names from the root and sets the description of the node at the end. It raises
`NodeNotFoundError` when a name along the way is missing.

Small text helpers live in `deftree.tree`:

- `scrub_comments` strips comment slashes and trailing whitespace.
- `clean_str` escapes newlines, tabs and quotes.
- `name_link` turns a dotted type name into a markdown link.
- `describe_markdown(node, depth)` renders a node as a markdown heading followed by its description.

## HTTP parameters

Each HTTP binding is a `MethodHttpBinding` that holds `BindingField` entries
such as `get: "/route/{input}"` or `body: "*"`. Once methods carry their
bindings, `deftree.contextualize.assemble(tree)` fills in each binding's
`verb`, `path` and `params`:

```python
from deftree.contextualize import assemble
from deftree.tree import BindingField, MethodHttpBinding

method.http_bindings.append(
    MethodHttpBinding(fields=[BindingField(kind="get", value="/route/{input}")])
)
assemble(tree)
for param in method.http_bindings[0].params:
    print(param.name, param.location, param.type)
```

`get_verb`, `get_path_params`, `param_location` and `contextualize_binding`
are available for working on a single binding.

## Middlewares

`deftree.middlewares` offers two labelled endpoint middlewares. Each is a
function that takes an endpoint name and an endpoint `(ctx, request)`, and
returns a wrapped endpoint.

- `error_counter(counter)` counts failures per endpoint name. It calls `counter.with_labels("endpoint", name).add(1)` and then re-raises.
- `latency(histogram)` records how long each call took, in seconds. It calls `histogram.with_labels("endpoint", name).observe(seconds)`.

## What this package does not do

- It does not read `.proto` files or run `protoc`. You supply the `CodeGeneratorRequest` yourself.
- It does not parse the `google.api.http` options in the source. `build` leaves every method's `http_bindings` empty, and you add bindings before calling `assemble`.
- It does not generate service code and offers no command-line program.

## Running the tests

```
pip install -e .[test]
pytest
```