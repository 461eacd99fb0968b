"""
Tests for index creation and maintenance.
"""

import json
import os

import pytest

from docstore.engine.index_maintainer import validate_index_spec
from docstore.models.exceptions import InvalidArgumentError, InvalidIndexSpecificationError


def read_json(*parts):
    with open(os.path.join(*parts), encoding="utf-8") as f:
        return json.load(f)


def entries(side_file):
    return {entry["_id"]: entry["indexedDocument"] for entry in side_file["indexedDocuments"]}


class TestCreateIndex:
    """Tests for create_index."""

    async def test_seeds_from_existing_documents(self, collection, sample_documents):
        inserted = await collection.insert_many(sample_documents)

        assert await collection.create_index({"age": 0}) is True

        side_file = read_json(collection.indexes_path, "index-0.json")
        assert side_file["indexSpecification"] == {"age": 0}
        assert side_file["indexProjection"] == {"age": 1}
        # eve has no age
        assert entries(side_file) == {
            doc["_id"]: {"age": doc["age"]} for doc in inserted if "age" in doc
        }

    async def test_manifest_entry(self, collection):
        await collection.create_index({"name": 0})
        manifest = read_json(collection.indexes_path, "indexes.json")
        assert manifest == {
            "indexes": [{"indexSpecification": {"name": 0}, "jsonFileName": "index-0.json"}]
        }

    async def test_duplicate_is_noop(self, collection):
        assert await collection.create_index({"name": 0, "age": 0}) is True
        assert await collection.create_index({"age": 0, "name": 0}) is False
        assert await collection.create_index({"name": 0, "age": 0}) is False

        manifest = read_json(collection.indexes_path, "indexes.json")
        assert len(manifest["indexes"]) == 1
        assert not os.path.exists(os.path.join(collection.indexes_path, "index-1.json"))

    async def test_side_files_numbered_by_creation_order(self, collection):
        await collection.create_index({"name": 0})
        await collection.create_index({"age": 0})
        await collection.create_index({"address": {"city": 0}})

        assert await collection.list_indexes() == [
            {"name": 0},
            {"age": 0},
            {"address": {"city": 0}},
        ]
        for n in range(3):
            assert os.path.exists(os.path.join(collection.indexes_path, f"index-{n}.json"))

    async def test_nested_specification(self, collection, sample_documents):
        inserted = await collection.insert_many(sample_documents)
        await collection.create_index({"address": {"city": 0}})

        side_file = await collection.get_index({"address": {"city": 0}})
        assert side_file["indexProjection"] == {"address": {"city": 1}}
        # bob's address is a string, eve has none
        assert entries(side_file) == {
            inserted[0]["_id"]: {"address": {"city": "Oslo"}},
            inserted[1]["_id"]: {"address": {"city": "Bergen"}},
        }

    async def test_leaf_specification_skips_nested_values(self, collection, sample_documents):
        inserted = await collection.insert_many(sample_documents)
        await collection.create_index({"address": 0})

        side_file = await collection.get_index({"address": 0})
        assert entries(side_file) == {inserted[2]["_id"]: {"address": "unknown"}}

    async def test_empty_collection(self, collection):
        await collection.create_index({"name": 0})
        side_file = await collection.get_index({"name": 0})
        assert side_file["indexedDocuments"] == []

    async def test_get_unknown_index(self, collection):
        assert await collection.get_index({"missing": 0}) is None

    @pytest.mark.parametrize(
        "spec",
        [None, [], "name", 0, {"name": "x"}, {"name": True}, {"name": None}, {"a": {"b": [0]}}],
    )
    async def test_invalid_specification(self, collection, spec):
        with pytest.raises(InvalidIndexSpecificationError):
            await collection.create_index(spec)
        assert await collection.list_indexes() == []

    def test_validate_index_spec_error_names_path(self):
        with pytest.raises(InvalidArgumentError) as exc_info:
            validate_index_spec({"a": {"b": "x"}})
        assert exc_info.value.argument == "indexSpec.a.b"


class TestIndexMaintenance:
    """Index side-files follow inserts, updates and deletes."""

    async def test_insert_fans_out_to_every_index(self, collection):
        await collection.create_index({"name": 0})
        await collection.create_index({"age": 0})

        inserted = await collection.insert_one({"name": "joe", "age": 21, "city": "Oslo"})

        by_name = await collection.get_index({"name": 0})
        by_age = await collection.get_index({"age": 0})
        assert entries(by_name) == {inserted["_id"]: {"name": "joe"}}
        assert entries(by_age) == {inserted["_id"]: {"age": 21}}

    async def test_insert_many_fans_out(self, collection, sample_documents):
        await collection.create_index({"name": 0})
        inserted = await collection.insert_many(sample_documents)

        side_file = await collection.get_index({"name": 0})
        assert [entry["_id"] for entry in side_file["indexedDocuments"]] == [
            doc["_id"] for doc in inserted
        ]

    async def test_ineligible_insert_not_indexed(self, collection):
        await collection.create_index({"age": 0})
        await collection.insert_one({"name": "joe"})
        side_file = await collection.get_index({"age": 0})
        assert side_file["indexedDocuments"] == []

    async def test_update_refreshes_entry(self, collection):
        await collection.create_index({"age": 0})
        inserted = await collection.insert_one({"name": "joe", "age": 21})

        await collection.update_one({"_id": inserted["_id"]}, {"age": 30})

        side_file = await collection.get_index({"age": 0})
        assert side_file["indexedDocuments"] == [
            {"indexedDocument": {"age": 30}, "_id": inserted["_id"]}
        ]

    async def test_update_can_admit_document(self, collection):
        await collection.create_index({"age": 0})
        inserted = await collection.insert_one({"name": "joe"})

        await collection.update_one({"_id": inserted["_id"]}, {"age": 30})

        side_file = await collection.get_index({"age": 0})
        assert entries(side_file) == {inserted["_id"]: {"age": 30}}

    async def test_update_can_evict_document(self, collection):
        await collection.create_index({"address": {"city": 0}})
        inserted = await collection.insert_one({"address": {"city": "Oslo"}})

        await collection.update_one({"_id": inserted["_id"]}, {"address": "unknown"})

        side_file = await collection.get_index({"address": {"city": 0}})
        assert side_file["indexedDocuments"] == []

    async def test_delete_removes_entry(self, collection):
        await collection.create_index({"name": 0})
        joe = await collection.insert_one({"name": "joe"})
        ann = await collection.insert_one({"name": "ann"})

        await collection.delete_one({"_id": joe["_id"]})

        side_file = await collection.get_index({"name": 0})
        assert entries(side_file) == {ann["_id"]: {"name": "ann"}}

    async def test_index_matches_live_documents(self, collection, sample_documents):
        await collection.create_index({"name": 0})
        await collection.insert_many(sample_documents)
        await collection.update_one({"name": "joe"}, {"name": "joseph"})
        await collection.delete_one({"name": "ann"})

        live = {doc["_id"]: {"name": doc["name"]} for doc in await collection.find({})}
        side_file = await collection.get_index({"name": 0})
        assert entries(side_file) == live

    async def test_indexes_survive_reopen(self, client, collection):
        await collection.create_index({"name": 0})
        await collection.insert_one({"name": "joe"})

        reopened = type(collection)("people", collection.collection_path)
        assert await reopened.list_indexes() == [{"name": 0}]
        assert await reopened.create_index({"name": 0}) is False
