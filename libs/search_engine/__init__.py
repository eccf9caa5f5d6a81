"""Search engine adapters.

Primary components:
- ``base``: abstract ``IndexClient`` interface, ``AggregationBucket`` and the
  ``SearchEngineError`` hierarchy.
- ``opensearch``: OpenSearch implementation on top of ``opensearch-py``.
- ``factory``: helpers to construct a client from typed config or env.

Guidance:
- Build one client per process via ``factory.create_index_client_from_config``
  and pass it to the components that need it.
"""
