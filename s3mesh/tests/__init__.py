"""
Tests Module: Unit Tests

Test Coverage:
    - Object references and metadata snapshots
    - Resolver (URI, ARN, bare key, aliasing)
    - Provider adapters and the one-shot content stream
    - Content and metadata caches
    - Composite provider and boto3-backed store
    - Configuration, logging and provider wiring
"""
