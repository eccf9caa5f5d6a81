"""Tests for the employee directory service.

The search engine is replaced by an in-memory ``IndexClient`` (see
``conftest``) or a mocked ``AsyncOpenSearch``; no cluster is required.
"""
