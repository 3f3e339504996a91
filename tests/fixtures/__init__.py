"""Test fixtures for PlatformKit tests.

This package provides reusable pytest fixtures for testing PlatformKit components.

- installations: Synthetic developer installations (toolchains, platforms, SDKs)

Import fixtures in your tests using:
    from tests.fixtures.installations import mock_installation
"""

__all__ = [
    "installations",
]
