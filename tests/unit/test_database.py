"""
Tests for the Supabase client helpers.
"""

from unittest.mock import MagicMock, patch

import pytest

from config.database import SupabaseClientError, check_table, get_supabase_client_optional


class TestClientOptional:

    def test_returns_none_when_client_cannot_be_created(self):
        with patch(
            "config.database.get_supabase_client",
            side_effect=SupabaseClientError("Invalid API key"),
        ):
            assert get_supabase_client_optional() is None


class TestCheckTable:

    @pytest.fixture
    def patched_client(self, mock_supabase_client):
        with patch(
            "config.database.get_supabase_client_optional",
            return_value=mock_supabase_client,
        ):
            yield mock_supabase_client

    def test_connected(self, patched_client):
        patched_client.table.return_value.execute.return_value = MagicMock(data=[{"id": 1}])

        assert check_table("ProductCard") == {"status": "connected", "error": None}
        patched_client.table.assert_called_once_with("ProductCard")
        patched_client.table.return_value.limit.assert_called_once_with(1)

    def test_empty(self, patched_client):
        patched_client.table.return_value.execute.return_value = MagicMock(data=[])

        assert check_table("ProductCard")["status"] == "empty"

    def test_query_error(self, patched_client):
        patched_client.table.return_value.execute.side_effect = RuntimeError("relation does not exist")

        assert check_table("ProductCard") == {"status": "error", "error": "relation does not exist"}

    def test_not_configured(self):
        with patch("config.database.get_supabase_client_optional", return_value=None):
            assert check_table("ProductCard") == {"status": "not_configured", "error": None}
