"""
Shared pytest fixtures for document store tests.
"""

import tempfile

import pytest
import pytest_asyncio

from docstore.engine.client import DocClient
from docstore.models.object_id import ObjectIdGenerator


@pytest.fixture
def temp_dir():
    """Provide a temporary directory that is cleaned up after test."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield tmpdir


@pytest.fixture
def generator():
    """Provide a deterministic ObjectIdGenerator."""
    return ObjectIdGenerator(salt=b"\x01\x02\x03\x04\x05", counter_start=0)


@pytest.fixture
def client(temp_dir):
    """Provide a DocClient rooted in a temporary directory."""
    return DocClient(temp_dir)


@pytest_asyncio.fixture
async def collection(client):
    """Provide an empty collection."""
    return client.database("testdb").collection("people")


@pytest.fixture
def sample_documents():
    """Provide sample documents for testing."""
    return [
        {"name": "joe", "age": 21, "address": {"city": "Oslo", "zip": "0150"}},
        {"name": "ann", "age": 34, "address": {"city": "Bergen", "zip": "5003"}},
        {"name": "bob", "age": 21, "address": "unknown"},
        {"name": "eve", "tags": ["admin", "ops"]},
    ]
