"""
Unit tests package.

Contains unit tests for individual modules in isolation. External
dependencies (the registry, the browser) are stubbed or mocked.
"""
