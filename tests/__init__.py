# PhotoShare Test Suite
"""
Test suite for PhotoShare.

Unit tests cover services and storage in isolation; integration tests
drive the HTTP API against a temporary database and storage roots.
"""
