import json

import pytest

from transcoder.core.decoder import Document, RecordDecoder
from transcoder.core.errors import (
    ConfigurationError,
    FormatMismatchError,
    ParseError,
    SchemaMismatchError,
    TranscodingError,
)
from transcoder.core.formats import ContentKind, Format
from transcoder.core.schema import DEFAULT_SCHEMA, Schema, SchemaField

FILE_FIELD = "file"

USERS_SCHEMA = Schema(
    fields=(
        SchemaField(name="file", type="string"),
        SchemaField(name="string_field", type="string"),
        SchemaField(name="boolean_field", type="boolean"),
        SchemaField(name="int_field", type="int"),
        SchemaField(name="long_field", type="long"),
        SchemaField(name="float_field", type="float"),
        SchemaField(name="double_field", type="double"),
        SchemaField(name="binary_field", type="bytes"),
    )
)


def _user_json(user_id: int) -> dict:
    name = f"user{user_id}"
    return {
        "string_field": name,
        "boolean_field": user_id % 2 == 0,
        "int_field": user_id,
        "long_field": user_id,
        "float_field": user_id + 0.1 * user_id,
        "double_field": user_id + 0.1 * user_id,
        "binary_field": list(name.encode("utf-8")),
    }


def _assert_user(record, user_id: int, file_name: str) -> None:
    name = f"user{user_id}"
    assert record["file"] == file_name
    assert record["string_field"] == name
    assert record["boolean_field"] is (user_id % 2 == 0)
    assert record["int_field"] == user_id
    assert record["long_field"] == user_id
    assert record["float_field"] == pytest.approx(user_id + 0.1 * user_id)
    assert record["double_field"] == pytest.approx(user_id + 0.1 * user_id)
    assert record["binary_field"] == name.encode("utf-8")


def _doc(content, kind: ContentKind, path: str = "/data/users/test.json") -> Document:
    if isinstance(content, str):
        content = content.encode("utf-8")
    return Document(content=content, kind=kind, path=path)


# ---------------------------------------------------------------------
# Document
# ---------------------------------------------------------------------

def test_document_file_name_is_last_path_segment():
    assert _doc(b"", ContentKind.TEXT, "/a/b/c.txt").file_name == "c.txt"
    assert _doc(b"", ContentKind.TEXT, "c.txt").file_name == "c.txt"


def test_modified_schema_drops_file_field_once():
    decoder = RecordDecoder(USERS_SCHEMA, Format.JSON, file_name_field=FILE_FIELD)
    assert decoder.modified_schema.field_names() == USERS_SCHEMA.field_names()[1:]


# ---------------------------------------------------------------------
# JSON
# ---------------------------------------------------------------------

def test_json_array_yields_one_record_per_element():
    decoder = RecordDecoder(USERS_SCHEMA, Format.JSON, file_name_field=FILE_FIELD)
    doc = _doc(json.dumps([_user_json(1), _user_json(2)]), ContentKind.JSON)

    records = decoder.decode(doc)

    assert len(records) == 2
    _assert_user(records[0], 1, "test.json")
    _assert_user(records[1], 2, "test.json")


def test_json_single_object_yields_one_record():
    decoder = RecordDecoder(USERS_SCHEMA, Format.AUTO, file_name_field=FILE_FIELD)
    records = decoder.decode(_doc(json.dumps(_user_json(3)), ContentKind.JSON))
    assert len(records) == 1
    _assert_user(records[0], 3, "test.json")


def test_json_small_schema_with_file_name_injected():
    schema = Schema(fields=(SchemaField(name="file", type="string"), SchemaField(name="a", type="int")))
    decoder = RecordDecoder(schema, Format.JSON, file_name_field="file")

    records = decoder.decode(_doc('[{"a":1},{"a":2}]', ContentKind.JSON, "db/x/items.json"))

    assert [r["a"] for r in records] == [1, 2]
    assert [r["file"] for r in records] == ["items.json", "items.json"]


def test_json_file_name_comes_from_path_not_content():
    schema = Schema(fields=(SchemaField(name="file", type="string"), SchemaField(name="a", type="int")))
    decoder = RecordDecoder(schema, Format.JSON, file_name_field="file")
    records = decoder.decode(_doc('{"a": 1, "file": "spoofed"}', ContentKind.JSON, "/p/real.json"))
    assert records[0]["file"] == "real.json"


def test_json_unknown_keys_ignored_missing_nullable_is_null():
    schema = Schema(
        fields=(SchemaField(name="a", type="int"), SchemaField(name="b", type="string", nullable=True))
    )
    records = RecordDecoder(schema, Format.JSON).decode(_doc('{"a": 5, "zzz": true}', ContentKind.JSON))
    assert records[0].as_dict() == {"a": 5, "b": None}


def test_json_missing_non_nullable_raises():
    schema = Schema(fields=(SchemaField(name="a", type="int"),))
    with pytest.raises(SchemaMismatchError, match="'a'"):
        RecordDecoder(schema, Format.JSON).decode(_doc("{}", ContentKind.JSON))


@pytest.mark.parametrize("content", ["{not json", "[1, 2]", "42"])
def test_json_malformed_or_non_object_raises_parse_error(content):
    schema = Schema(fields=(SchemaField(name="a", type="int"),))
    with pytest.raises(ParseError, match="Failed to parse document"):
        RecordDecoder(schema, Format.JSON).decode(_doc(content, ContentKind.JSON))


# ---------------------------------------------------------------------
# XML
# ---------------------------------------------------------------------

def _user_xml(user_id: int) -> str:
    u = _user_json(user_id)
    binary = "".join(f"<binary_field>{b}</binary_field>" for b in u["binary_field"])
    return (
        "<user>"
        f"<string_field>{u['string_field']}</string_field>"
        f"<boolean_field>{str(u['boolean_field']).lower()}</boolean_field>"
        f"<int_field>{u['int_field']}</int_field>"
        f"<long_field>{u['long_field']}</long_field>"
        f"<float_field>{u['float_field']}</float_field>"
        f"<double_field>{u['double_field']}</double_field>"
        f"{binary}"
        "</user>"
    )


def test_xml_nested_wrappers_are_unwrapped():
    xml = f"<data><users>{_user_xml(1)}{_user_xml(2)}</users></data>"
    decoder = RecordDecoder(USERS_SCHEMA, Format.XML, file_name_field=FILE_FIELD)

    records = decoder.decode(_doc(xml, ContentKind.XML, "/x/test.xml"))

    assert len(records) == 2
    _assert_user(records[0], 1, "test.xml")
    _assert_user(records[1], 2, "test.xml")


def test_xml_root_row_list():
    schema = Schema(fields=(SchemaField(name="a", type="int"),))
    xml = "<root><row><a>1</a></row><row><a>2</a></row></root>"
    records = RecordDecoder(schema, Format.AUTO).decode(_doc(xml, ContentKind.XML))
    assert [r["a"] for r in records] == [1, 2]


def test_xml_multi_key_level_is_one_record():
    schema = Schema(fields=(SchemaField(name="a", type="int"), SchemaField(name="b", type="string")))
    records = RecordDecoder(schema, Format.XML).decode(_doc("<root><a>1</a><b>x</b></root>", ContentKind.XML))
    assert len(records) == 1
    assert records[0].as_dict() == {"a": 1, "b": "x"}


def test_xml_single_scalar_child_is_one_record():
    schema = Schema(fields=(SchemaField(name="a", type="int"),))
    records = RecordDecoder(schema, Format.XML).decode(_doc("<root><a>9</a></root>", ContentKind.XML))
    assert [r["a"] for r in records] == [9]


def test_xml_malformed_raises_parse_error():
    schema = Schema(fields=(SchemaField(name="a", type="int"),))
    with pytest.raises(ParseError):
        RecordDecoder(schema, Format.XML).decode(_doc("<root><a>1</root>", ContentKind.XML))


# ---------------------------------------------------------------------
# Delimited
# ---------------------------------------------------------------------

def test_delimited_line_to_record():
    schema = Schema(fields=(SchemaField(name="name", type="string"), SchemaField(name="age", type="int")))
    records = RecordDecoder(schema, Format.DELIMITED, delimiter=";").decode(_doc("alice;30", ContentKind.TEXT))
    assert len(records) == 1
    assert records[0].as_dict() == {"name": "alice", "age": 30}


def test_delimited_multiple_lines_skip_empty_and_inject_file_name():
    schema = Schema(
        fields=(
            SchemaField(name="file", type="string"),
            SchemaField(name="name", type="string"),
            SchemaField(name="score", type="double", nullable=True),
        )
    )
    decoder = RecordDecoder(schema, Format.DELIMITED, delimiter="|", file_name_field="file")
    content = "a|1.5\r\n\nb|\n"

    records = decoder.decode(_doc(content, ContentKind.TEXT, "/in/test.txt"))

    assert [r.as_dict() for r in records] == [
        {"file": "test.txt", "name": "a", "score": 1.5},
        {"file": "test.txt", "name": "b", "score": None},
    ]


def test_delimited_delimiter_is_literal():
    schema = Schema(fields=(SchemaField(name="a", type="string"), SchemaField(name="b", type="string")))
    records = RecordDecoder(schema, Format.DELIMITED, delimiter=".").decode(_doc("x.y", ContentKind.TEXT))
    assert records[0].as_dict() == {"a": "x", "b": "y"}


def test_delimited_column_count_mismatch_aborts_document():
    schema = Schema(fields=(SchemaField(name="name", type="string"), SchemaField(name="age", type="int")))
    decoder = RecordDecoder(schema, Format.DELIMITED, delimiter=";")
    with pytest.raises(SchemaMismatchError, match="Line 2"):
        decoder.decode(_doc("alice;30\nbob\ncarol;5", ContentKind.TEXT))


def test_delimited_requires_delimiter():
    schema = Schema(fields=(SchemaField(name="a", type="string"),))
    with pytest.raises(ConfigurationError, match="delimiter"):
        RecordDecoder(schema, Format.DELIMITED)


# ---------------------------------------------------------------------
# Binary / Text / Default
# ---------------------------------------------------------------------

PAYLOAD_BYTES_SCHEMA = Schema(
    fields=(
        SchemaField(name="file", type="string"),
        SchemaField(name="body", type="bytes", nullable=True),
        SchemaField(name="extra", type="string", nullable=True),
    )
)


def test_binary_payload_is_raw_bytes():
    decoder = RecordDecoder(PAYLOAD_BYTES_SCHEMA, Format.BLOB, file_name_field="file", payload_field="body")
    records = decoder.decode(_doc(b"\x00\x01\xff", ContentKind.BINARY, "/b/img.png"))
    assert [r.as_dict() for r in records] == [{"file": "img.png", "body": b"\x00\x01\xff", "extra": None}]


def test_auto_on_text_document_is_binary_payload():
    decoder = RecordDecoder(PAYLOAD_BYTES_SCHEMA, Format.AUTO, file_name_field="file", payload_field="body")
    records = decoder.decode(_doc("a;b", ContentKind.TEXT, "/t/x.txt"))
    assert records[0]["body"] == b"a;b"


def test_text_payload_is_decoded_string():
    schema = Schema(fields=(SchemaField(name="file", type="string"), SchemaField(name="body", type="string")))
    decoder = RecordDecoder(schema, Format.TEXT, file_name_field="file", payload_field="body")
    records = decoder.decode(_doc("héllo", ContentKind.TEXT, "/t/x.txt"))
    assert records[0].as_dict() == {"file": "x.txt", "body": "héllo"}


def test_text_invalid_encoding_raises_parse_error():
    schema = Schema(fields=(SchemaField(name="body", type="string"),))
    decoder = RecordDecoder(schema, Format.TEXT, payload_field="body")
    with pytest.raises(ParseError):
        decoder.decode(_doc(b"\xff\xfe\xfa", ContentKind.TEXT))


def test_single_payload_without_payload_field_raises():
    with pytest.raises(ConfigurationError, match="payload field"):
        RecordDecoder(PAYLOAD_BYTES_SCHEMA, Format.BLOB).decode(_doc(b"x", ContentKind.BINARY))


@pytest.mark.parametrize("fmt", list(Format))
@pytest.mark.parametrize("kind", list(ContentKind))
def test_default_schema_always_copies_raw_bytes(fmt, kind):
    delimiter = ";" if fmt == Format.DELIMITED else None
    decoder = RecordDecoder(DEFAULT_SCHEMA, fmt, delimiter=delimiter, file_name_field="file")
    records = decoder.decode(_doc(b"\x89PNG\x00", kind))
    assert len(records) == 1
    assert records[0].as_dict() == {"payload": b"\x89PNG\x00"}


# ---------------------------------------------------------------------
# Format mismatch
# ---------------------------------------------------------------------

def test_incompatible_format_raises_and_emits_nothing():
    schema = Schema(fields=(SchemaField(name="a", type="int", nullable=True),))
    decoder = RecordDecoder(schema, Format.XML)
    emitted = []
    with pytest.raises(FormatMismatchError, match="'xml'.*'binary'"):
        emitted.extend(decoder.decode(_doc(b"\x00", ContentKind.BINARY)))
    assert emitted == []


def test_decoder_is_reusable_across_documents():
    schema = Schema(fields=(SchemaField(name="a", type="int"),))
    decoder = RecordDecoder(schema, Format.JSON)
    assert decoder.decode(_doc('{"a": 1}', ContentKind.JSON))[0]["a"] == 1
    assert decoder.decode(_doc('{"a": 2}', ContentKind.JSON))[0]["a"] == 2


# ---------------------------------------------------------------------
# Edge cases
# ---------------------------------------------------------------------

@pytest.mark.parametrize("xml", ["<root><rows/></root>", "<root/>", "<root><rows><batch/></rows></root>"])
def test_xml_empty_wrappers_yield_no_records(xml):
    schema = Schema(fields=(SchemaField(name="a", type="int", nullable=True),))
    assert RecordDecoder(schema, Format.AUTO).decode(_doc(xml, ContentKind.XML)) == []


def test_xml_repeated_bytes_field_is_one_record():
    schema = Schema(fields=(SchemaField(name="data", type="bytes"),))
    xml = "<root><data>1</data><data>2</data></root>"
    records = RecordDecoder(schema, Format.XML).decode(_doc(xml, ContentKind.XML))
    assert [r.as_dict() for r in records] == [{"data": b"\x01\x02"}]


def test_delimited_splits_only_on_line_terminators():
    schema = Schema(fields=(SchemaField(name="a", type="string"), SchemaField(name="b", type="int")))
    content = "x\x0cy\x0b;1\u2028z\x1c;2\r\nw;3\u0085v;4\rq;5"

    records = RecordDecoder(schema, Format.DELIMITED, delimiter=";").decode(_doc(content, ContentKind.TEXT))

    assert [r.as_dict() for r in records] == [
        {"a": "x\x0cy\x0b", "b": 1},
        {"a": "z\x1c", "b": 2},
        {"a": "w", "b": 3},
        {"a": "v", "b": 4},
        {"a": "q", "b": 5},
    ]


def test_json_leading_bom_is_ignored():
    schema = Schema(fields=(SchemaField(name="a", type="int"),))
    records = RecordDecoder(schema, Format.JSON).decode(_doc(b'\xef\xbb\xbf{"a": 1}', ContentKind.JSON))
    assert records[0]["a"] == 1


def test_json_huge_number_for_double_is_schema_mismatch():
    schema = Schema(fields=(SchemaField(name="d", type="double"),))
    content = '{"d": 1' + "0" * 400 + "}"
    with pytest.raises(SchemaMismatchError, match="'d'.*out of range"):
        RecordDecoder(schema, Format.JSON).decode(_doc(content, ContentKind.JSON))


def test_json_oversized_integer_literal_stays_in_error_taxonomy():
    schema = Schema(fields=(SchemaField(name="d", type="long"),))
    content = '{"d": ' + "9" * 5000 + "}"
    # ParseError where the interpreter caps int digits, SchemaMismatchError otherwise
    with pytest.raises(TranscodingError):
        RecordDecoder(schema, Format.JSON).decode(_doc(content, ContentKind.JSON))
