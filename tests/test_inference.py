"""
Tests for the inference module.

Tests value classification, variant resolution, array and object shape
inference and the schema builder dispatch.
"""

from collections.abc import Mapping
from datetime import date, datetime
from decimal import Decimal

import numpy as np
import pandas as pd
import pytest

from warehouse_re.inference import (
    SchemaBuilder,
    classify_value,
    infer_array,
    infer_object,
    infer_schema,
    resolve_variant,
)
from warehouse_re.models import (
    ArrayNode,
    ColumnEntry,
    DeclaredType,
    InferenceConfig,
    ObjectNode,
    ScalarNode,
    ValueKind,
    VariantNode,
)


class ExplodingRow(Mapping):
    """Row that fails on any value access."""

    def __getitem__(self, key):
        raise RuntimeError("boom")

    def __iter__(self):
        return iter(["payload"])

    def __len__(self):
        return 1


class TestClassifyValue:
    """Tests for classify_value."""

    @pytest.mark.parametrize("value,expected", [
        (None, ValueKind.NULL),
        ([1, 2], ValueKind.ARRAY),
        ((1,), ValueKind.ARRAY),
        ({"a": 1}, ValueKind.OBJECT),
        (True, ValueKind.BOOLEAN),
        (5, ValueKind.NUMBER),
        (2.5, ValueKind.NUMBER),
        (Decimal("1.10"), ValueKind.NUMBER),
        ("x", ValueKind.STRING),
        (b"\x00", ValueKind.BINARY),
        (date(2024, 1, 1), ValueKind.TIMESTAMP),
        (datetime(2024, 1, 1, 12), ValueKind.TIMESTAMP),
        (object(), ValueKind.UNKNOWN),
    ])
    def test_python_values(self, value, expected):
        assert classify_value(value) == expected

    @pytest.mark.parametrize("value,expected", [
        (np.array([1, 2]), ValueKind.ARRAY),
        (np.int64(3), ValueKind.NUMBER),
        (np.float64(1.5), ValueKind.NUMBER),
        (np.bool_(False), ValueKind.BOOLEAN),
        (float("nan"), ValueKind.NULL),
        (np.nan, ValueKind.NULL),
        (pd.NA, ValueKind.NULL),
        (pd.NaT, ValueKind.NULL),
        (pd.Timestamp("2024-01-01"), ValueKind.TIMESTAMP),
    ])
    def test_pandas_values(self, value, expected):
        """Values coming out of DataFrames classify like their Python counterparts."""
        assert classify_value(value) == expected


class TestResolveVariant:
    """Tests for variant subtype resolution."""

    def test_object_dominates(self):
        """An object anywhere in the sample wins over earlier kinds."""
        rows = [{"v": 1}, {"v": [1]}, {"v": "x"}, {"v": {"a": 1}}]
        node = resolve_variant(rows, "v")

        assert node.subtype == ValueKind.OBJECT
        assert node.child == ObjectNode()

    def test_all_objects(self):
        rows = [{"v": {"a": 1}}, {"v": {"b": 2}}]
        assert resolve_variant(rows, "v").subtype == ValueKind.OBJECT

    def test_array_beats_scalars(self):
        rows = [{"v": 1}, {"v": [1, 2]}, {"v": None}]
        node = resolve_variant(rows, "v")

        assert node.subtype == ValueKind.ARRAY
        assert node.child == ArrayNode()

    def test_first_scalar_wins(self):
        """Ties between scalar kinds go to the first one seen."""
        rows = [{"v": 5}, {"v": "x"}]
        assert resolve_variant(rows, "v").subtype == ValueKind.NUMBER

        rows = [{"v": "x"}, {"v": 5}]
        assert resolve_variant(rows, "v").subtype == ValueKind.STRING

    def test_leading_null_promoted(self):
        rows = [{"v": None}, {"v": "x"}, {"v": 5}]
        assert resolve_variant(rows, "v").subtype == ValueKind.STRING

    def test_only_nulls(self):
        rows = [{"v": None}, {"v": None}]
        node = resolve_variant(rows, "v")

        assert node.subtype is None
        assert node.child is None

    def test_missing_column_skipped(self):
        """Rows without the column are not treated as null."""
        rows = [{"other": 1}, {"v": True}]
        assert resolve_variant(rows, "v").subtype == ValueKind.BOOLEAN

    def test_empty_sample(self):
        assert resolve_variant([], "v") == VariantNode()


class TestInferArray:
    """Tests for array element shape inference."""

    def test_distinct_element_kinds(self):
        rows = [{"tags": [1, "a"]}, {"tags": None}, {"tags": [2]}]
        node = infer_array(rows, "tags")

        assert len(node.items) == 2
        assert {item.subtype for item in node.items} == {ValueKind.NUMBER, ValueKind.STRING}

    def test_nested_containers_are_placeholders(self):
        rows = [{"a": [[1, 2], {"k": "v"}]}]
        node = infer_array(rows, "a")

        by_kind = {item.subtype: item for item in node.items}
        assert by_kind[ValueKind.ARRAY].child == ArrayNode()
        assert by_kind[ValueKind.OBJECT].child == ObjectNode()

    def test_non_array_values_skipped(self):
        rows = [{"a": "not-a-list"}, {"a": 3}, {}]
        assert infer_array(rows, "a") == ArrayNode()

    def test_numpy_arrays(self):
        rows = [{"a": np.array([1.0, 2.0])}]
        node = infer_array(rows, "a")

        assert [item.subtype for item in node.items] == [ValueKind.NUMBER]

    def test_empty_sample(self):
        assert infer_array([], "a").items == ()


class TestInferObject:
    """Tests for object key inference."""

    def test_key_union(self):
        rows = [{"meta": {"a": 1}}, {"meta": {"b": "x"}}, {"meta": "not-an-object"}]
        node = infer_object(rows, "meta", SchemaBuilder()._build)

        assert set(node.properties) == {"a", "b"}
        assert node.properties["a"] == VariantNode(subtype=ValueKind.NUMBER)
        assert node.properties["b"] == VariantNode(subtype=ValueKind.STRING)

    def test_nested_keys_resolve_as_variants(self):
        rows = [{"meta": {"inner": {"deep": 1}, "list": [1]}}]
        node = infer_object(rows, "meta", SchemaBuilder()._build)

        assert node.properties["inner"].subtype == ValueKind.OBJECT
        assert node.properties["list"].subtype == ValueKind.ARRAY

    def test_no_mappings(self):
        rows = [{"meta": None}, {"meta": [1]}, {}]
        assert infer_object(rows, "meta", SchemaBuilder()._build) == ObjectNode()

    def test_dispatch_receives_sub_documents(self):
        """Sub-documents are passed on as rows, keys as variant columns."""
        calls = []

        def dispatch(columns, rows, depth):
            calls.append((columns, rows, depth))
            return {}

        rows = [{"m": {"x": 1}}, {"m": 2}]
        infer_object(rows, "m", dispatch, depth=3)

        columns, sub_rows, depth = calls[0]
        assert columns == [ColumnEntry(name="x", declared_type=DeclaredType.VARIANT)]
        assert sub_rows == [{"x": 1}]
        assert depth == 4


class TestSchemaBuilder:
    """Tests for the schema builder dispatch."""

    @pytest.fixture
    def columns(self):
        return [
            ColumnEntry(name="ID", declared_type=DeclaredType.OTHER, raw_type="NUMBER(38,0)"),
            ColumnEntry(name="PAYLOAD", declared_type=DeclaredType.VARIANT, raw_type="VARIANT"),
            ColumnEntry(name="TAGS", declared_type=DeclaredType.ARRAY, raw_type="ARRAY"),
            ColumnEntry(name="META", declared_type=DeclaredType.OBJECT, raw_type="OBJECT"),
        ]

    @pytest.fixture
    def rows(self):
        return [
            {"ID": 1, "PAYLOAD": 10, "TAGS": ["a"], "META": {"source": "web", "score": 1.5}},
            {"ID": 2, "PAYLOAD": {"k": 1}, "TAGS": [1, "b"], "META": {"flags": [True]}},
            {"ID": 3, "TAGS": None, "META": "n/a"},
        ]

    def test_dispatch_by_declared_type(self, columns, rows):
        schema = infer_schema(columns, rows)

        assert list(schema) == ["ID", "PAYLOAD", "TAGS", "META"]
        assert schema["ID"] == ScalarNode(raw_type="NUMBER(38,0)")
        assert schema["PAYLOAD"].subtype == ValueKind.OBJECT
        assert {i.subtype for i in schema["TAGS"].items} == {ValueKind.STRING, ValueKind.NUMBER}
        assert set(schema["META"].properties) == {"source", "score", "flags"}
        assert schema["META"].properties["flags"].subtype == ValueKind.ARRAY

    def test_scalar_columns_not_inspected(self):
        columns = [ColumnEntry(name="ID", raw_type="NUMBER")]
        rows = [ExplodingRow()]

        assert infer_schema(columns, rows) == {"ID": ScalarNode(raw_type="NUMBER")}

    def test_column_failures_are_local(self, columns):
        """A failing column degrades to an empty node of its kind."""
        schema = infer_schema(columns, [ExplodingRow()])

        assert schema["ID"] == ScalarNode(raw_type="NUMBER(38,0)")
        assert schema["PAYLOAD"] == VariantNode()
        assert schema["TAGS"] == ArrayNode()
        assert schema["META"] == ObjectNode()

    def test_empty_sample(self, columns):
        schema = infer_schema(columns, [])

        assert schema["PAYLOAD"] == VariantNode()
        assert schema["TAGS"] == ArrayNode()
        assert schema["META"] == ObjectNode()

    def test_idempotent(self, columns, rows):
        first = infer_schema(columns, rows)
        second = infer_schema(columns, rows)

        assert first == second
        assert {k: v.to_dict()["type"] for k, v in first.items()} == {
            k: v.to_dict()["type"] for k, v in second.items()
        }

    def test_rows_not_modified(self, columns, rows):
        snapshot = [dict(row) for row in rows]
        infer_schema(columns, rows)
        assert rows == snapshot

    def test_max_depth(self, columns, rows):
        builder = SchemaBuilder(InferenceConfig(max_depth=0))
        schema = builder.build(columns, rows)

        assert schema["META"] == ObjectNode()
        assert schema["PAYLOAD"].subtype == ValueKind.OBJECT

    def test_dataframe_records(self, columns):
        """Rows produced by DataFrame.to_dict(orient='records')."""
        df = pd.DataFrame({
            "ID": [1, 2],
            "PAYLOAD": [np.nan, "text"],
            "TAGS": [np.array([1, 2]), None],
            "META": [{"a": 1}, None],
        })
        schema = infer_schema(columns, df.to_dict(orient="records"))

        assert schema["PAYLOAD"].subtype == ValueKind.STRING
        assert [i.subtype for i in schema["TAGS"].items] == [ValueKind.NUMBER]
        assert set(schema["META"].properties) == {"a"}
