"""
Token acquisition tests.
"""

import pytest
from unittest.mock import MagicMock, patch

from azure.core.credentials import AccessToken

from pki_setup.credentials import (
    MANAGEMENT_SCOPE,
    AcquireTokenResult,
    StaticTokenCredential,
    acquire_token,
    read_token_claims,
)
from conftest import TENANT_ID, USER_OBJECT_ID, make_jwt


class TestReadTokenClaims:

    def test_decodes_payload(self):
        token = make_jwt({"oid": USER_OBJECT_ID, "upn": "dev@contoso.com"})
        claims = read_token_claims(token)
        assert claims["oid"] == USER_OBJECT_ID
        assert claims["upn"] == "dev@contoso.com"

    def test_rejects_non_jwt(self):
        with pytest.raises(ValueError, match="could not be decoded"):
            read_token_claims("opaque-token")

    def test_rejects_undecodable_payload(self):
        with pytest.raises(ValueError, match="could not be decoded"):
            read_token_claims("eyJhbGciOiJub25lIn0.bm90LWpzb24.")

    def test_ignores_expiry_and_audience(self):
        """Claims are only read; expired tokens and foreign audiences still decode."""
        token = make_jwt({"oid": USER_OBJECT_ID, "exp": 1, "aud": "https://management.core.windows.net/"})
        assert read_token_claims(token)["oid"] == USER_OBJECT_ID


class TestAcquireToken:

    def _credential(self, claims, expires_on=4102444800):
        credential = MagicMock()
        credential.get_token.return_value = AccessToken(make_jwt(claims), expires_on)
        return credential

    def test_returns_token_and_object_id(self):
        credential = self._credential({"oid": USER_OBJECT_ID})

        result = acquire_token(TENANT_ID, credential=credential)

        credential.get_token.assert_called_once_with(MANAGEMENT_SCOPE)
        assert result.user_object_id == USER_OBJECT_ID
        assert result.expires_on == 4102444800
        assert read_token_claims(result.access_token)["oid"] == USER_OBJECT_ID

    def test_missing_oid_claim(self):
        credential = self._credential({"appid": "some-app"})

        with pytest.raises(ValueError, match="'oid'"):
            acquire_token(TENANT_ID, credential=credential)

    def test_defaults_to_interactive_browser(self):
        with patch("pki_setup.credentials.InteractiveBrowserCredential") as browser:
            browser.return_value.get_token.return_value = AccessToken(make_jwt({"oid": USER_OBJECT_ID}), 1)

            result = acquire_token(TENANT_ID)

        browser.assert_called_once_with(tenant_id=TENANT_ID)
        assert result.user_object_id == USER_OBJECT_ID


class TestStaticTokenCredential:

    def test_returns_wrapped_token_for_any_scope(self):
        credential = StaticTokenCredential("token-value", 1234)

        token = credential.get_token(MANAGEMENT_SCOPE)

        assert token.token == "token-value"
        assert token.expires_on == 1234

    def test_from_acquire_token_result(self):
        result = AcquireTokenResult(access_token="abc", user_object_id=USER_OBJECT_ID, expires_on=42)

        with result.as_token_credential() as credential:
            assert credential.get_token("scope").token == "abc"
