"""
Tests for the reverse-engineering pipeline and the CLI.
"""

import json

import pytest
import yaml
from click.testing import CliRunner

from warehouse_re.cli import cli
from warehouse_re.metadata import FixtureSource
from warehouse_re.models import ArrayNode, InferenceConfig, ObjectNode, ScalarNode, ValueKind
from warehouse_re.reverse import ReverseEngineer


FIXTURE = {
    "tables": [
        {
            "database": "DEMO",
            "schema": "PUBLIC",
            "name": "EVENTS",
            "columns": [
                {"name": "ID", "type": "NUMBER(38,0)"},
                {"name": "PAYLOAD", "type": "VARIANT"},
                {"name": "TAGS", "type": "ARRAY"},
                {"name": "META", "type": "OBJECT"},
            ],
            "clustering_key": "LINEAR(ID, SUBSTRING(PAYLOAD,1,3))",
            "info": {"TABLE_TYPE": "BASE TABLE", "IS_TRANSIENT": "NO", "COMMENT": "events"},
            "stage": [
                {"parent_property": "STAGE_FILE_FORMAT", "property": "TYPE",
                 "property_type": "String", "property_value": "JSON"},
            ],
            "rows": [
                {"ID": 1, "PAYLOAD": None, "TAGS": [{"k": 1}, "x"], "META": {"a": 1}},
                {"ID": 2, "PAYLOAD": "text", "TAGS": None, "META": {"b": [1]}},
            ],
        },
        {
            "database": "DEMO",
            "schema": "PUBLIC",
            "name": "USERS",
            "columns": [{"name": "PROFILE", "type": "OBJECT"}],
            "rows": [{"PROFILE": {"name": "ann"}}],
        },
        {
            "database": "DEMO",
            "schema": "PUBLIC",
            "name": "V_EVENTS",
            "kind": "view",
            "columns": [{"name": "ID", "type": "NUMBER"}],
            "info": {"IS_SECURE": "YES"},
        },
    ],
    "containers": {
        "DEMO.PUBLIC": {"schema": {"COMMENT": "demo schema", "IS_TRANSIENT": "NO"}},
    },
}


class CountingSource(FixtureSource):
    """Fixture source that records container lookups."""

    def __init__(self, data):
        super().__init__(data)
        self.container_calls = 0

    def container_rows(self, container):
        self.container_calls += 1
        return super().container_rows(container)


class TestReverseEngineer:
    """Tests for ReverseEngineer."""

    @pytest.fixture
    def source(self):
        return CountingSource(FIXTURE)

    def test_reverse_table(self, source):
        package = ReverseEngineer(source).reverse_table("DEMO.PUBLIC.EVENTS")

        assert package.properties["ID"] == ScalarNode(raw_type="NUMBER(38,0)")
        assert package.properties["PAYLOAD"].subtype == ValueKind.STRING
        assert isinstance(package.properties["TAGS"], ArrayNode)
        assert set(package.properties["META"].properties) == {"a", "b"}
        assert [s.keys for s in package.clustering_key] == [["ID"], ["PAYLOAD"]]
        assert package.clustering_key[1].expression == "SUBSTRING(${name},1,3)"
        assert package.row_count == 2
        assert package.entity["fileFormat"] == "JSON"
        assert package.container["description"] == "demo schema"

    def test_documents_prepared(self, source):
        package = ReverseEngineer(source).reverse_table("DEMO.PUBLIC.EVENTS")

        # Nulls filtered, array columns reduced to serialised objects
        assert package.documents[0] == {"ID": 1, "TAGS": ['{"k": 1}'], "META": {"a": 1}}
        assert "TAGS" not in package.documents[1]

    def test_raw_documents(self, source):
        config = InferenceConfig(filter_nulls=False, prepare_documents=False)
        package = ReverseEngineer(source, config=config).reverse_table("DEMO.PUBLIC.EVENTS")

        assert package.documents[0]["PAYLOAD"] is None
        assert package.documents[0]["TAGS"] == [{"k": 1}, "x"]

    def test_sample_limit(self, source):
        config = InferenceConfig(sample_limit=1)
        package = ReverseEngineer(source, config=config).reverse_table("DEMO.PUBLIC.EVENTS")

        assert len(package.documents) == 1
        assert set(package.properties["META"].properties) == {"a"}

    def test_view(self, source):
        package = ReverseEngineer(source).reverse_table("DEMO.PUBLIC.V_EVENTS")

        assert package.is_view is True
        assert package.clustering_key is None
        assert package.entity == {"secure": True, "description": ""}

    def test_container_computed_once(self, source):
        engineer = ReverseEngineer(source)
        packages = engineer.reverse_all(max_workers=3)

        assert [p.table for p in packages] == ["EVENTS", "USERS", "V_EVENTS"]
        assert source.container_calls == 1
        assert all(p.container == packages[0].container for p in packages)

    def test_unknown_table_degrades(self, source):
        package = ReverseEngineer(source).reverse_table("DEMO.PUBLIC.MISSING")

        assert package.properties == {}
        assert package.documents == []
        assert package.clustering_key is None

    def test_malformed_name_degrades(self, source):
        packages = ReverseEngineer(source).reverse_all(["EVENTS", "DEMO.PUBLIC.USERS"])

        assert packages[0].table == "EVENTS"
        assert packages[0].properties == {}
        assert packages[0].container == {}
        assert packages[1].table == "USERS"
        assert source.container_calls == 1

    def test_quoted_name(self, source):
        package = ReverseEngineer(source).reverse_table('"DEMO"."PUBLIC"."USERS"')

        assert (package.database, package.schema, package.table) == ("DEMO", "PUBLIC", "USERS")
        assert "PROFILE" in package.properties

    def test_entity_names(self, source):
        assert ReverseEngineer(source).entity_names() == [
            {"dbName": "DEMO.PUBLIC", "dbCollections": ["EVENTS", "USERS", "V_EVENTS (v)"]},
        ]

    def test_object_column_result(self, source):
        package = ReverseEngineer(source).reverse_table("DEMO.PUBLIC.USERS")
        profile = package.properties["PROFILE"]

        assert isinstance(profile, ObjectNode)
        assert profile.properties["name"].subtype == ValueKind.STRING


class TestCli:
    """Tests for the command-line interface."""

    @pytest.fixture
    def fixture_file(self, tmp_path):
        path = tmp_path / "fixture.yaml"
        path.write_text(yaml.safe_dump(FIXTURE))
        return path

    def test_clustering_key(self):
        runner = CliRunner()
        result = runner.invoke(cli, ["clustering-key", "LINEAR(A, SUBSTRING(B,1,3))", "--columns", "A,B"])

        assert result.exit_code == 0
        assert json.loads(result.output) == [
            {"clusteringKey": [{"name": "A"}], "expression": ""},
            {"clusteringKey": [{"name": "B"}], "expression": "SUBSTRING(${name},1,3)"},
        ]

    def test_clustering_key_empty(self):
        runner = CliRunner()
        result = runner.invoke(cli, ["clustering-key", "", "--columns", "A"])

        assert result.exit_code == 0
        assert result.output.strip() == "null"

    def test_infer_to_file(self, fixture_file, tmp_path):
        output = tmp_path / "out" / "schema.json"
        runner = CliRunner()
        result = runner.invoke(cli, [
            "infer", "--fixture", str(fixture_file),
            "--table", "DEMO.PUBLIC.EVENTS",
            "--output", str(output),
        ])

        assert result.exit_code == 0, result.output
        data = json.loads(output.read_text())
        assert len(data) == 1
        properties = data[0]["jsonSchema"]["properties"]
        assert properties["PAYLOAD"]["subtype"] == "string"
        assert properties["META"]["type"] == "object"

    def test_infer_with_config(self, fixture_file, tmp_path):
        config = tmp_path / "config.yaml"
        config.write_text("inference:\n  sample_limit: 1\n")
        output = tmp_path / "schema.json"
        runner = CliRunner()
        result = runner.invoke(cli, [
            "infer", "--fixture", str(fixture_file),
            "--config", str(config),
            "--output", str(output),
        ])

        assert result.exit_code == 0, result.output
        data = json.loads(output.read_text())
        assert [d["collectionName"] for d in data] == ["EVENTS", "USERS", "V_EVENTS"]
        assert len(data[0]["documents"]) == 1

    def test_infer_unknown_table(self, fixture_file):
        runner = CliRunner()
        result = runner.invoke(cli, [
            "infer", "--fixture", str(fixture_file), "--table", "DEMO.PUBLIC.NOPE",
        ])

        assert result.exit_code != 0
        assert "Unknown table" in result.output

    def test_entities(self, fixture_file):
        runner = CliRunner()
        result = runner.invoke(cli, ["entities", "--fixture", str(fixture_file)])

        assert result.exit_code == 0
        assert "DEMO.PUBLIC" in result.output
