"""Tests for the Tosan request and response adapters."""

from urllib.parse import parse_qsl, urlsplit

import pytest

from tosan_oauth.config import TosanConfig
from tosan_oauth.exceptions import TokenError, TosanTokenError
from tosan_oauth.providers.base import OAuth2Client
from tosan_oauth.providers.tosan import (
    TosanStrategy,
    authorization_params,
    check_authorize_callback,
    normalize_profile,
    parse_token_error,
    request_context,
    token_params_profile,
)
from tosan_oauth.schemas import TokenResponse, TosanProfile


def _query(url: str) -> dict[str, str]:
    return dict(parse_qsl(urlsplit(url).query, keep_blank_values=True))


# ============================================================
# Authorization parameters
# ============================================================


class TestAuthorizationParams:
    """Tests for the extra authorization redirect parameters."""

    def test_all_parameters(self, config):
        params = authorization_params(config)

        assert params == {
            "device_id": "device-1",
            "state": "1",
            "sandbox": "false",
            "bank_id": "BOOMIR",
            "boom_token": "boom-xyz",
            "response_type": "code",
            "client_id": "client-123",
        }

    def test_sandbox_flag(self):
        params = authorization_params(TosanConfig(sandbox=True))
        assert params["sandbox"] == "true"
        assert params["bank_id"] == "ANSBIR"

    def test_request_bank_id(self, config):
        params = authorization_params(config, bank_id="MELLIR")
        assert params["bank_id"] == "MELLIR"

    def test_deterministic(self, config):
        assert authorization_params(config) == authorization_params(config)


class TestAuthorizationUrl:
    """Tests for the full authorization redirect URL."""

    def test_url(self, config):
        url = TosanStrategy(config).authorization_url()
        parts = urlsplit(url)
        query = _query(url)

        assert f"{parts.scheme}://{parts.netloc}{parts.path}" == config.authorization_url
        assert query["response_type"] == "code"
        assert query["redirect_uri"] == "https://www.example.net/auth/tosan/callback"
        assert query["client_id"] == "client-123"
        assert query["bank_id"] == "BOOMIR"
        assert query["device_id"] == "device-1"
        assert query["boom_token"] == "boom-xyz"
        assert query["state"] == "1"
        assert query["sandbox"] == "false"
        assert "scope" not in query

    def test_scope_list_joined_with_separator(self):
        strategy = TosanStrategy(TosanConfig(scope=["accounts", "profile"]))
        assert _query(strategy.authorization_url())["scope"] == "accounts,profile"

    def test_scope_string(self):
        strategy = TosanStrategy(TosanConfig(scope="accounts"))
        assert _query(strategy.authorization_url())["scope"] == "accounts"

    def test_no_redirect_uri_without_callback(self):
        strategy = TosanStrategy(TosanConfig())
        assert "redirect_uri" not in _query(strategy.authorization_url())

    def test_bank_id_override_does_not_touch_config(self, config):
        strategy = TosanStrategy(config)

        url = strategy.authorization_url(bank_id="MELLIR")

        assert _query(url)["bank_id"] == "MELLIR"
        assert strategy.config.bank_id == "BOOMIR"
        assert _query(strategy.authorization_url())["bank_id"] == "BOOMIR"

    def test_existing_query_string_is_extended(self):
        strategy = TosanStrategy(TosanConfig(authorization_url="https://auth.example/authorize?lang=fa"))
        url = strategy.authorization_url()

        assert url.startswith("https://auth.example/authorize?lang=fa&")
        assert _query(url)["lang"] == "fa"


# ============================================================
# Callback interception
# ============================================================


class TestCheckAuthorizeCallback:
    """Tests for the error_code redirect convention."""

    def test_error_code_without_error(self):
        error = check_authorize_callback({"error_code": "42", "error_message": "bad"})

        assert error is not None
        assert error.code == 42
        assert error.message == "bad"

    def test_error_code_with_standard_error_is_ignored(self):
        query = {"error_code": "42", "error_message": "bad", "error": "access_denied"}
        assert check_authorize_callback(query) is None

    def test_no_error_code(self):
        assert check_authorize_callback({"code": "auth-code"}) is None
        assert check_authorize_callback({}) is None

    def test_code_parsed_like_leading_integer(self):
        assert check_authorize_callback({"error_code": "17abc"}).code == 17

    def test_non_numeric_code(self):
        error = check_authorize_callback({"error_code": "oops", "error_message": "bad"})
        assert error.code is None
        assert error.message == "bad"


class TestRequestContext:
    """Tests for the request-scoped bank id."""

    def test_configured_bank_id(self, config):
        assert request_context(config, {}).bank_id == "BOOMIR"

    def test_query_bank_id_wins(self, config):
        assert request_context(config, {"bank_id": "MELLIR"}).bank_id == "MELLIR"


# ============================================================
# Token endpoint errors
# ============================================================


class TestParseTokenError:
    """Tests for Tosan token endpoint error bodies."""

    def test_object_error(self):
        body = '{"error": {"message": "m", "type": "t", "code": 1, "error_subcode": 2}}'
        error = parse_token_error(body, 400)

        assert isinstance(error, TosanTokenError)
        assert (error.message, error.type, error.code, error.subcode) == ("m", "t", 1, 2)

    def test_subcode_key(self):
        body = '{"error": {"message": "m", "type": "t", "code": 1, "subcode": 9}}'
        assert parse_token_error(body, 400).subcode == 9

    def test_string_error_is_left_to_standard_parsing(self):
        body = '{"error": "invalid_grant"}'

        assert parse_token_error(body, 400) is None

        error = OAuth2Client.parse_error_response(body, 400)
        assert isinstance(error, TokenError)
        assert not isinstance(error, TosanTokenError)
        assert error.code == "invalid_grant"

    def test_no_error_field(self):
        assert parse_token_error('{"status": "failed"}', 500) is None
        assert parse_token_error("[1, 2]", 500) is None

    def test_malformed_json_raises(self):
        with pytest.raises(ValueError):
            parse_token_error("<html>Bad Gateway</html>", 502)


# ============================================================
# Profile normalization
# ============================================================


class TestNormalizeProfile:
    """Tests for profile normalization."""

    def test_adds_provider_and_display_bank_id(self):
        profile = normalize_profile({"accounts": []}, "BOOMIR")

        assert profile == {"accounts": [], "provider": "tosan", "bankId": "ANSBIR"}

    def test_other_bank_verbatim(self):
        assert normalize_profile({}, "MELLIR")["bankId"] == "MELLIR"

    def test_input_not_mutated(self):
        document = {"accounts": []}
        normalize_profile(document, "BOOMIR")
        assert document == {"accounts": []}

    @pytest.mark.parametrize("bank_id", ["BOOMIR", "ANSBIR", "MELLIR"])
    def test_idempotent(self, bank_id):
        document = {"accounts": [{"number": "1"}], "provider": "other"}

        once = normalize_profile(document, bank_id)
        twice = normalize_profile(once, bank_id)

        assert once == twice

    def test_token_params_profile(self):
        token = TokenResponse(
            access_token="a", refresh_token="r", expires_in=3600, scope="accounts"
        )

        assert token_params_profile(token) == {
            "accessToken": "a",
            "refreshToken": "r",
            "expiresIn": 3600,
            "scopes": "accounts",
        }

    def test_profile_model_round_trips_wire_shape(self):
        data = normalize_profile({"accounts": [], "customer_name": "Sara"}, "BOOMIR")
        profile = TosanProfile.model_validate(data)

        assert profile.provider == "tosan"
        assert profile.bank_id == "ANSBIR"
        assert profile.to_dict() == data

    def test_profile_without_tokens(self):
        token = TokenResponse(access_token="a", refresh_token="r", expires_in=3600.5)
        profile = TosanProfile.model_validate(
            normalize_profile(token_params_profile(token), "BOOMIR")
        )

        assert profile.to_dict()["accessToken"] == "a"
        assert profile.to_dict(include_tokens=False) == {
            "provider": "tosan",
            "bankId": "ANSBIR",
            "expiresIn": 3600.5,
        }
