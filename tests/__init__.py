"""
zkauth Test Suite
=================

Test organization:
- tests/unit/          - Unit tests (no network access)

Run tests:
    pytest                          # All tests
    pytest tests/unit               # Unit tests only
    pytest --cov=zkauth             # With coverage
"""
