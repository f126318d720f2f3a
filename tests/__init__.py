"""
Test suite for rwa_tokenization

Contains:
- tests/unit/          : Unit tests for codecs, derivation, math and the client
"""
