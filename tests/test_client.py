"""
Tests for DocClient / Database directory provisioning and name validation.
"""

import os
from pathlib import Path

import pytest

from docstore import open_client
from docstore.engine.client import DocClient, validate_name
from docstore.models.exceptions import InvalidNameError
from docstore.models.object_id import ObjectId


class TestDocClient:
    """Tests for the client handle."""

    def test_creates_base_path(self, temp_dir):
        base_path = os.path.join(temp_dir, "nested", "data")
        client = DocClient(base_path)
        assert os.path.isdir(base_path)
        assert client.base_path == os.path.abspath(base_path)

    def test_accepts_path_object(self, temp_dir):
        base_path = Path(temp_dir) / "data"
        client = DocClient(base_path)
        assert base_path.is_dir()
        assert client.base_path == os.path.abspath(base_path)

    def test_open_client(self, temp_dir):
        client = open_client(temp_dir, indent=4)
        assert isinstance(client, DocClient)
        assert client.indent == 4

    def test_empty_base_path(self):
        with pytest.raises(ValueError):
            DocClient("  ")

    def test_database_creates_directory(self, client):
        database = client.database("shop")
        assert os.path.isdir(os.path.join(client.base_path, "shop"))
        assert database.db_path == os.path.join(client.base_path, "shop")

    def test_database_handle_is_cached(self, client):
        assert client.database("shop") is client.database("shop")

    def test_list_database_names(self, client):
        client.database("b")
        client.database("a")
        assert client.list_database_names() == ["a", "b"]


class TestDatabase:
    """Tests for the database handle."""

    def test_collection_creates_layout(self, client):
        collection = client.database("shop").collection("orders")
        root = os.path.join(client.base_path, "shop", "orders")
        assert collection.collection_path == root
        assert os.path.isdir(os.path.join(root, "documents"))
        assert os.path.isfile(os.path.join(root, "indexes", "indexes.json"))

    def test_collection_handle_is_cached(self, client):
        database = client.database("shop")
        assert database.collection("orders") is database.collection("orders")

    def test_list_collection_names(self, client):
        database = client.database("shop")
        database.collection("orders")
        database.collection("carts")
        assert database.list_collection_names() == ["carts", "orders"]

    async def test_client_options_reach_collection(self, temp_dir, generator):
        client = DocClient(temp_dir, indent=0, id_generator=generator)
        collection = client.database("shop").collection("orders")

        inserted = await collection.insert_one({"item": "pen"})
        assert bytes(ObjectId.from_str(inserted["_id"]))[4:9] == generator.salt

        with open(os.path.join(collection.documents_path, f"{inserted['_id']}.json")) as f:
            assert '\n"_id"' in f.read()

    async def test_end_to_end(self, client):
        people = client.database("app").collection("people")

        joe = await people.insert_one({"name": "joe", "age": 21})
        found = await people.find_one({"name": "joe"})
        assert found == joe

        await people.update_one({"_id": joe["_id"]}, {"age": 30})
        assert (await people.find_one({"_id": joe["_id"]}))["age"] == 30

        await people.delete_one({"_id": joe["_id"]})
        assert await people.find_one({"_id": joe["_id"]}) is None


class TestNameValidation:
    """Tests for database and collection names."""

    @pytest.mark.parametrize(
        "name",
        ["", "a/b", "a\\b", "a.b", "a b", 'a"b', "a$b", "a*b", "a<b", "a>b", "a:b", "a|b", "a?b"],
    )
    def test_invalid_characters(self, client, name):
        with pytest.raises(InvalidNameError):
            client.database(name)
        with pytest.raises(InvalidNameError):
            client.database("shop").collection(name)

    def test_non_string(self, client):
        with pytest.raises(InvalidNameError):
            client.database(None)
        with pytest.raises(InvalidNameError):
            client.database("shop").collection(["orders"])

    def test_database_name_length(self, client):
        client.database("d" * 63)
        with pytest.raises(InvalidNameError):
            client.database("d" * 64)

    def test_collection_name_length(self, client):
        database = client.database("shop")
        with pytest.raises(InvalidNameError):
            database.collection("c" * 256)

    def test_validate_name_returns_name(self):
        assert validate_name("collection", "orders_2024-01", 255) == "orders_2024-01"

    def test_error_is_value_error(self, client):
        with pytest.raises(ValueError):
            client.database("bad.name")
