"""Directory service package.

Layout:
- ``api``: HTTP endpoints for collections, ingestion, search and facets.
- ``ingestion``: CSV to index pipeline.
- ``main``: application factory, middleware and entry point.
"""
