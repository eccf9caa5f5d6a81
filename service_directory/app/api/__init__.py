"""API subpackage for the directory service.

Routers expose collection creation, CSV ingestion, search, count, delete and
facet endpoints. The transport layer stays thin and delegates to the
``IndexClient`` and ``BulkIndexer`` held in application state.
"""
