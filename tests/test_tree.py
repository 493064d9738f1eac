import pytest

from deftree.tree import (
    BindingField,
    EnumValue,
    FieldType,
    HttpParameter,
    MessageField,
    MethodHttpBinding,
    MicroserviceDefinition,
    NodeNotFoundError,
    ProtoEnum,
    ProtoFile,
    ProtoMessage,
    ProtoService,
    ServiceMethod,
    clean_str,
    describe_markdown,
    name_link,
    scrub_comments,
)


def _sample_tree():
    msg = ProtoMessage(
        name="SumRequest",
        fields=[
            MessageField(name="a", number=1, label="LABEL_OPTIONAL",
                         type=FieldType(name="TYPE_INT64")),
            MessageField(name="b", number=2, label="LABEL_OPTIONAL",
                         type=FieldType(name="TYPE_INT64")),
        ],
    )
    enum = ProtoEnum(
        name="FooBarBaz",
        values=[EnumValue(name="FOO", number=0), EnumValue(name="BAR", number=1)],
    )
    method = ServiceMethod(name="Sum", request_type=msg, response_type=msg)
    svc = ProtoService(name="SumSvc", methods=[method],
                       fully_qualified_name=".general.SumSvc")
    pfile = ProtoFile(name="definition.proto", messages=[msg], enums=[enum],
                      services=[svc])
    return MicroserviceDefinition(name="general", files=[pfile])


def test_scrub_comments_strips_leading_space_and_trailing_newline():
    got = scrub_comments(" This is my comment, this is my note\n")
    assert got == "This is my comment, this is my note"


def test_scrub_comments_removes_slashes_and_line_trailing_space():
    assert scrub_comments("/ foo\n/ bar  \n") == "foo\nbar"
    assert scrub_comments("a \t\nb") == "a\nb"


@pytest.mark.parametrize(
    "text", ["// hello  ", " one\n two \n", "plain", "", "x \n\n y"]
)
def test_scrub_comments_is_stable_on_its_output(text):
    once = scrub_comments(text)
    assert scrub_comments(once) == once
    assert once == once.rstrip()


def test_clean_str_escapes():
    assert clean_str('a\n"b"\t') == 'a\\n\\"b\\"\\t'


def test_name_link():
    assert name_link("TYPE_STRING") == "TYPE_STRING"
    assert name_link(".general.FooBarBaz") == "[FooBarBaz](#FooBarBaz)"


def test_description_is_scrubbed_on_assignment_and_init():
    msg = ProtoMessage(name="M", description="  text here  \n")
    assert msg.description == "text here"
    msg.description = "// other  "
    assert msg.description == "other"


def test_describe_markdown():
    msg = ProtoMessage(name="Foo", description="Bar baz")
    assert describe_markdown(msg, 2) == "## Foo\n\nBar baz\n\n"
    short = ProtoMessage(name="Foo", description="x")
    assert describe_markdown(short, 1) == "# Foo\n\n"


def test_enum_value_describe():
    val = EnumValue(name="FOO", number=0)
    assert val.describe(1) == "    Name: FOO\n    Desc: \n    Number: 0\n"


def test_binding_and_parameter_describe():
    bf = BindingField(name="n", kind="get", value="/route")
    assert bf.describe(0) == "Name: n\nDesc: \nKind: get\nValue: /route\n"
    hp = HttpParameter(name="a", location="path", type="TYPE_INT64")
    assert hp.describe(0).endswith("Location: path\nType: TYPE_INT64\n")


def test_binding_describe_nests_fields():
    binding = MethodHttpBinding(fields=[BindingField(kind="get", value="/x")])
    text = binding.describe(0)
    assert text.startswith("Name: \nDesc: \n")
    assert "    Kind: get\n" in text


def test_microservice_str_matches_describe():
    tree = _sample_tree()
    text = str(tree)
    assert text == tree.describe(0)
    assert text.startswith("Name: general\nDesc: \nFile 0:\n")
    assert "        RequestType: SumRequest\n" in text
    assert text.index("Service 0:") < text.index("Message 0:") < text.index("Enum 0:")


def test_get_by_name_lookups():
    tree = _sample_tree()
    pfile = tree.get_by_name("definition.proto")
    assert pfile is tree.files[0]
    assert pfile.get_by_name("SumRequest") is pfile.messages[0]
    assert pfile.get_by_name("FooBarBaz") is pfile.enums[0]
    assert pfile.get_by_name("SumSvc") is pfile.services[0]
    assert pfile.get_by_name("Missing") is None
    assert pfile.enums[0].get_by_name("BAR").number == 1
    method = pfile.services[0].get_by_name("Sum")
    assert method.get_by_name("SumRequest") is pfile.messages[0]
    assert method.get_by_name("nope") is None


def test_leaf_nodes_have_no_children():
    assert MessageField(name="a").get_by_name("a") is None
    assert EnumValue(name="A").get_by_name("A") is None
    assert BindingField(name="b").get_by_name("b") is None


def test_set_comment_follows_namepath():
    tree = _sample_tree()
    tree.set_comment(["definition.proto", "SumRequest", "a"], " first field \n")
    assert tree.files[0].messages[0].fields[0].description == "first field"
    tree.set_comment(["definition.proto", "FooBarBaz", "FOO"],
                     " This is my comment, this is my note\n")
    assert tree.files[0].enums[0].values[0].description == (
        "This is my comment, this is my note"
    )


def test_set_comment_empty_path_sets_root():
    tree = _sample_tree()
    tree.set_comment([], "// package doc")
    assert tree.description == "package doc"


def test_set_comment_missing_node_raises():
    tree = _sample_tree()
    with pytest.raises(NodeNotFoundError, match="cannot find node"):
        tree.set_comment(["definition.proto", "Nope"], "text")


def test_message_field_defaults_compare_equal():
    assert MessageField(name="x") == MessageField(name="x", type=FieldType())
    assert MessageField(name="x").type.enum is None