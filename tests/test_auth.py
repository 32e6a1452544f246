"""
Tests for the authorization URL builder and token endpoint calls.
"""
from urllib.parse import parse_qs, urlparse

import pytest
import requests

from dropbox_team_client.errors import ApiHttpError, AuthenticationError


class TestAuthorizationUrl:
    def test_parameters_round_trip(self, auth_manager, settings):
        request = auth_manager.build_authorization_request()
        url = auth_manager.build_authorization_url(request)

        parsed = urlparse(url)
        params = {key: values[0] for key, values in parse_qs(parsed.query).items()}

        assert f"{parsed.scheme}://{parsed.netloc}{parsed.path}" == settings.auth_url
        assert params["client_id"] == settings.client_id
        assert params["response_type"] == "code"
        assert params["redirect_uri"] == settings.redirect_uri
        assert set(params["scope"].split(" ")) == set(settings.scopes)
        assert params["state"] == request.state
        assert params["token_access_type"] == "offline"

    def test_special_characters_are_encoded(self, auth_manager):
        request = auth_manager.build_authorization_request()
        request = type(request)(
            client_id="id with&symbols=",
            redirect_uri="http://localhost:8080/callback?x=1",
            scopes=frozenset({"a.read", "b/write"}),
            state="s&t=a te",
        )

        url = auth_manager.build_authorization_url(request)
        params = parse_qs(urlparse(url).query)

        assert "&symbols" not in url
        assert params["client_id"] == ["id with&symbols="]
        assert params["redirect_uri"] == ["http://localhost:8080/callback?x=1"]
        assert params["state"] == ["s&t=a te"]
        assert set(params["scope"][0].split(" ")) == {"a.read", "b/write"}

    def test_each_request_gets_a_fresh_state(self, auth_manager):
        first = auth_manager.build_authorization_request()
        second = auth_manager.build_authorization_request()
        assert first.state != second.state
        assert len(first.state) >= 16


class TestExchangeCode:
    def test_success_without_refresh_token(self, auth_manager, session, response_factory, settings):
        session.post.return_value = response_factory(200, {"access_token": "T", "token_type": "bearer"})

        credentials = auth_manager.exchange_code_for_tokens("the-code")

        assert credentials.access_token == "T"
        assert credentials.refresh_token is None
        args, kwargs = session.post.call_args
        assert args[0] == settings.token_url
        assert kwargs["data"] == {
            "grant_type": "authorization_code",
            "code": "the-code",
            "redirect_uri": settings.redirect_uri,
            "client_id": settings.client_id,
            "client_secret": settings.client_secret,
        }
        assert kwargs["timeout"] == settings.timeout_seconds

    def test_success_with_refresh_token(self, auth_manager, session, response_factory):
        session.post.return_value = response_factory(200, {"access_token": "T", "refresh_token": "R"})

        credentials = auth_manager.exchange_code_for_tokens("the-code")

        assert credentials.refresh_token == "R"
        assert auth_manager.get_auth_state().has_refresh_token is True

    def test_failure_leaves_tokens_unset(self, auth_manager, session, response_factory, credentials):
        body = '{"error": "invalid_grant", "error_description": "code doesn\'t exist or has expired"}'
        session.post.return_value = response_factory(400, text=body)

        with pytest.raises(AuthenticationError) as exc_info:
            auth_manager.exchange_code_for_tokens("stale-code")

        assert "Token exchange failed" in str(exc_info.value)
        assert exc_info.value.status_code == 400
        assert exc_info.value.body == body
        assert credentials.access_token is None
        assert credentials.refresh_token is None

    def test_missing_access_token_is_a_failure(self, auth_manager, session, response_factory, credentials):
        session.post.return_value = response_factory(200, {"token_type": "bearer"})

        with pytest.raises(AuthenticationError, match="access_token missing"):
            auth_manager.exchange_code_for_tokens("the-code")
        assert credentials.access_token is None

    def test_new_exchange_drops_previous_refresh_token(self, auth_manager, session, response_factory, credentials):
        credentials.access_token = "old-access"
        credentials.refresh_token = "old-refresh"
        session.post.return_value = response_factory(200, {"access_token": "new-access"})

        auth_manager.exchange_code_for_tokens("second-code")

        assert credentials.access_token == "new-access"
        assert credentials.refresh_token is None

    def test_connection_failure_becomes_status_zero(self, auth_manager, session, credentials):
        session.post.side_effect = requests.ConnectionError("boom")

        with pytest.raises(ApiHttpError) as exc_info:
            auth_manager.exchange_code_for_tokens("the-code")

        assert exc_info.value.status_code == 0
        assert credentials.access_token is None

    def test_empty_code_sends_nothing(self, auth_manager, session):
        with pytest.raises(ValueError):
            auth_manager.exchange_code_for_tokens("   ")
        session.post.assert_not_called()


class TestRefresh:
    def test_without_refresh_token_sends_nothing(self, auth_manager, session):
        with pytest.raises(AuthenticationError, match="No refresh token available"):
            auth_manager.refresh_access_token()
        session.post.assert_not_called()

    def test_replaces_only_access_token(self, auth_manager, session, response_factory, credentials, settings):
        credentials.access_token = "old"
        credentials.refresh_token = "R"
        session.post.return_value = response_factory(200, {"access_token": "new", "refresh_token": "R2"})

        token = auth_manager.refresh_access_token()

        assert token == "new"
        assert credentials.access_token == "new"
        assert credentials.refresh_token == "R"
        _, kwargs = session.post.call_args
        assert kwargs["data"] == {
            "grant_type": "refresh_token",
            "refresh_token": "R",
            "client_id": settings.client_id,
            "client_secret": settings.client_secret,
        }

    def test_failure_surfaces_status_and_body(self, auth_manager, session, response_factory, credentials):
        credentials.access_token = "old"
        credentials.refresh_token = "R"
        session.post.return_value = response_factory(400, text='{"error": "invalid_grant"}')

        with pytest.raises(AuthenticationError) as exc_info:
            auth_manager.refresh_access_token()

        assert exc_info.value.status_code == 400
        assert "invalid_grant" in exc_info.value.body
        assert credentials.access_token == "old"


class TestSignOut:
    def test_clears_credentials(self, auth_manager, credentials):
        credentials.access_token = "T"
        credentials.refresh_token = "R"

        auth_manager.sign_out()

        state = auth_manager.get_auth_state()
        assert state.is_authenticated is False
        assert state.has_refresh_token is False
