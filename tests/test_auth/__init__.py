"""
Test suite for cookie authentication.

This test suite includes:
- Ticket lifecycle tests for authenticate, apply_grant and apply_challenge
- Session store indirection and exception containment tests
- Middleware integration tests driven through httpx
- Configuration and validation tests

Security Testing Philosophy:
- Tampered, foreign-key and malformed cookies must be anonymous
- Return URLs must never leave the current host
- Session-backed cookies must carry nothing but the session key
"""
