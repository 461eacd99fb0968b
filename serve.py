import asyncio
import logging
import os

from docstore import Collection, DocClient
from http_server.request import Request
from http_server.response import Response, error, response
from http_server.server import HTTPServer

logging.basicConfig(
    level=os.environ.get("LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger()


async def main():
    host = os.environ.get("DOCSTORE_HOST", "0.0.0.0")
    port = int(os.environ.get("DOCSTORE_PORT", "8080"))
    data_dir = os.environ.get("DOCSTORE_DATA_DIR", "data/")

    server = HTTPServer(host=host, port=port)
    client = DocClient(data_dir, fsync=os.environ.get("DOCSTORE_FSYNC", "0") == "1")
    await register_routes(server, client)
    logger.debug(f"Registered routes: {sorted(server.routes)}")
    await server.start()


def _collection(client: DocClient, request: Request) -> Collection | Response:
    database = request.get("database")
    collection = request.get("collection")

    if not database or not collection:
        return error(400, "Missing 'database' or 'collection' parameter")

    return client.database(database).collection(collection)


async def register_routes(server: HTTPServer, client: DocClient):

    @server.route('/documents', ['POST'])
    async def insert_one(request: Request) -> Response:
        collection = _collection(client, request)
        if isinstance(collection, Response):
            return collection
        if not request.has("document"):
            return error(400, "Missing 'document' in request body")

        document = await collection.insert_one(request.get("document"))
        return response(status_code=201).json({"document": document})

    @server.route('/documents/batch', ['POST'])
    async def insert_many(request: Request) -> Response:
        collection = _collection(client, request)
        if isinstance(collection, Response):
            return collection
        if not request.has("documents"):
            return error(400, "Missing 'documents' in request body")

        documents = await collection.insert_many(request.get("documents"))
        return response(status_code=201).json({"documents": documents, "count": len(documents)})

    @server.route('/documents/find', ['POST'])
    async def find(request: Request) -> Response:
        collection = _collection(client, request)
        if isinstance(collection, Response):
            return collection

        documents = await collection.find(request.get("query", {}), request.get("projection"))
        return response(status_code=200).json({"documents": documents})

    @server.route('/documents/find-one', ['POST'])
    async def find_one(request: Request) -> Response:
        collection = _collection(client, request)
        if isinstance(collection, Response):
            return collection

        document = await collection.find_one(request.get("query", {}), request.get("projection"))
        if document is None:
            return error(404, "No document matched the query")
        return response(status_code=200).json({"document": document})

    @server.route('/documents', ['PATCH'])
    async def update_one(request: Request) -> Response:
        collection = _collection(client, request)
        if isinstance(collection, Response):
            return collection
        if not request.has("query") or not request.has("update"):
            return error(400, "Missing 'query' or 'update' in request body")

        document = await collection.update_one(request.get("query"), request.get("update"))
        if document is None:
            return error(404, "No document matched the query")
        return response(status_code=200).json({"document": document})

    @server.route('/documents', ['DELETE'])
    async def delete_one(request: Request) -> Response:
        collection = _collection(client, request)
        if isinstance(collection, Response):
            return collection
        if not request.has("query"):
            return error(400, "Missing 'query' in request body")

        document = await collection.delete_one(request.get("query"))
        if document is None:
            return error(404, "No document matched the query")
        return response(status_code=200).json({"deleted": document["_id"]})

    @server.route('/indexes', ['POST'])
    async def create_index(request: Request) -> Response:
        collection = _collection(client, request)
        if isinstance(collection, Response):
            return collection
        if not request.has("specification"):
            return error(400, "Missing 'specification' in request body")

        created = await collection.create_index(request.get("specification"))
        return response(status_code=201 if created else 200).json({"created": created})

    @server.route('/indexes', ['GET'])
    async def list_indexes(request: Request) -> Response:
        collection = _collection(client, request)
        if isinstance(collection, Response):
            return collection

        indexes = await collection.list_indexes()
        return response(status_code=200).json({"indexes": indexes})


if __name__ == "__main__":
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        pass
