"""
Tests for Supabase client construction.
"""

from unittest.mock import MagicMock

import auth.supabase_client as supabase_client


def test_normalize_supabase_url():
    assert supabase_client.normalize_supabase_url("https://x.supabase.co") == "https://x.supabase.co/"
    assert supabase_client.normalize_supabase_url("https://x.supabase.co/") == "https://x.supabase.co/"
    assert supabase_client.normalize_supabase_url(None) is None


def test_missing_credentials_return_none(monkeypatch):
    monkeypatch.delenv("SUPABASE_URL", raising=False)
    monkeypatch.delenv("SUPABASE_ANON_KEY", raising=False)
    assert supabase_client.get_supabase_client() is None


def test_access_token_scopes_client(monkeypatch):
    monkeypatch.setenv("SUPABASE_URL", "https://x.supabase.co")
    monkeypatch.setenv("SUPABASE_ANON_KEY", "anon-key")
    fake_client = MagicMock()
    fake_client.storage_url = "https://x.supabase.co/storage/v1"
    create_client = MagicMock(return_value=fake_client)
    monkeypatch.setattr(supabase_client, "create_client", create_client)

    client = supabase_client.get_supabase_client(access_token="reviewer-token")

    assert client is fake_client
    create_client.assert_called_once_with("https://x.supabase.co/", "anon-key")
    fake_client.postgrest.auth.assert_called_once_with("reviewer-token")
    assert str(client.storage_url) == "https://x.supabase.co/storage/v1/"


def test_client_errors_return_none(monkeypatch):
    monkeypatch.setenv("SUPABASE_URL", "https://x.supabase.co")
    monkeypatch.setenv("SUPABASE_ANON_KEY", "anon-key")
    monkeypatch.setattr(supabase_client, "create_client", MagicMock(side_effect=ValueError("bad key")))

    assert supabase_client.get_supabase_client() is None
