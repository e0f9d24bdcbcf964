"""
Unit Tests for chess-gametree

This package contains unit tests for all move-tree components.

Running Tests:
    # Run all tests
    pytest tests/

    # Run specific test file
    pytest tests/test_mutations.py

    # Run with coverage
    pytest tests/ --cov=chess_gametree --cov-report=html

Dependencies:
    - pytest: Test framework
    - pytest-cov: Coverage reporting
    - chess: python-chess, used as the position oracle
"""
