"""
Unit tests for the exception hierarchy and settings loading.
"""

from __future__ import annotations

import pytest

from wpquery.config import Settings
from wpquery.exceptions import (
    DependentResolutionError,
    MissingResourcesError,
    TaxonomyCycleError,
    WordPressError,
)


class TestMissingResourcesError:
    def test_single_id_message(self) -> None:
        error = MissingResourcesError([404])

        assert str(error) == "could not find ids 404"
        assert error.ids == [404]
        assert error.context == {"ids": [404]}

    def test_many_ids_message(self) -> None:
        assert str(MissingResourcesError([1, 2, 3])) == "could not find ids 1, 2 and 3"

    def test_hierarchy(self) -> None:
        assert issubclass(MissingResourcesError, WordPressError)
        assert issubclass(TaxonomyCycleError, DependentResolutionError)


class TestSettings:
    def test_defaults(self) -> None:
        settings = Settings()

        assert settings.query.default_limit == 10
        assert settings.cache.namespace == "wp"
        assert settings.cache.flush is False

    def test_nested_environment_override(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Nested groups are overridden with double-underscore variables."""
        monkeypatch.setenv("WPQUERY_QUERY__DEFAULT_LIMIT", "25")
        monkeypatch.setenv("WPQUERY_CACHE__FLUSH", "true")

        settings = Settings()

        assert settings.query.default_limit == 25
        assert settings.cache.flush is True
