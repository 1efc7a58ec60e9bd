"""
Unit tests for search-bar suggestions.

Run with: PYTHONPATH=src python -m pytest tests/unit/test_autocomplete.py -v
"""

import pytest
from unittest.mock import MagicMock

from config.settings import get_settings_for_testing
from search.autocomplete import AutocompleteService


@pytest.fixture
def service(mock_supabase_client):
    return AutocompleteService(supabase=mock_supabase_client, settings=get_settings_for_testing())


@pytest.fixture
def builder(mock_supabase_client):
    return mock_supabase_client.table.return_value


class TestSuggest:

    @pytest.mark.parametrize("query", ["", " ", "k", " k "])
    def test_short_query_returns_nothing(self, service, mock_supabase_client, query):
        response = service.suggest(query)

        assert response.suggestions == []
        mock_supabase_client.table.assert_not_called()

    def test_query_shape(self, service, mock_supabase_client, builder):
        service.suggest("silk", limit=5)

        mock_supabase_client.table.assert_called_once_with("ProductCard")
        builder.select.assert_called_once_with("name, category, brand, fabric, color")
        builder.eq.assert_called_once_with("in_stock", True)
        builder.or_.assert_called_once_with(
            "name.ilike.%silk%,category.ilike.%silk%,brand.ilike.%silk%,"
            "fabric.ilike.%silk%,color.ilike.%silk%"
        )
        builder.limit.assert_called_once_with(15)

    def test_suggestions_from_matching_columns(self, service, builder):
        builder.execute.return_value = MagicMock(data=[
            {"name": "Silk Kurta", "category": "Kurta", "brand": "Khaadi", "fabric": "Silk", "color": "Red"},
            {"name": "Printed Lawn", "category": "Suit", "brand": "Silkora", "fabric": "Lawn", "color": "Blue"},
        ])

        response = service.suggest("silk")

        assert response.query == "silk"
        assert response.suggestions == ["Silk Kurta", "silk kurta", "Silkora"]

    def test_suggestions_deduplicated(self, service, builder):
        builder.execute.return_value = MagicMock(data=[
            {"name": "Red Dress", "category": "Dress", "brand": "A", "fabric": "Cotton", "color": "Red"},
            {"name": "Red Dress", "category": "Dress", "brand": "B", "fabric": "Cotton", "color": "Red"},
        ])

        assert service.suggest("red").suggestions == ["Red Dress", "red dress"]

    def test_limit_applied(self, service, builder):
        builder.execute.return_value = MagicMock(data=[
            {"name": f"Lawn Suit {i}", "category": "Suit", "brand": "X", "fabric": "Lawn", "color": "Blue"}
            for i in range(10)
        ])

        assert len(service.suggest("lawn", limit=3).suggestions) == 3

    def test_special_characters_stripped_from_filter(self, service, builder):
        service.suggest("re%d,(x)")

        expression = builder.or_.call_args.args[0]
        assert expression.startswith("name.ilike.%redx%,")

    def test_query_failure_returns_empty(self, service, builder):
        builder.execute.side_effect = RuntimeError("timeout")

        response = service.suggest("kurta")

        assert response.suggestions == []
        assert response.query == "kurta"
