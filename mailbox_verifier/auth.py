"""Credential construction for Exchange connections."""

import logging

from exchangelib import Credentials, Identity, OAuth2Credentials

from .config import AccountSettings
from .exceptions import AuthenticationError


class AuthHandler:
    """Builds exchangelib credentials from account settings."""

    def __init__(self, config: AccountSettings):
        self.config = config
        self.logger = logging.getLogger(__name__)

    def get_credentials(self):
        """
        Get credentials for the configured auth type.

        Returns:
            Credentials for basic/NTLM, OAuth2Credentials for oauth2

        Raises:
            AuthenticationError: If a required setting is missing
        """
        if self.config.ews_auth_type == "oauth2":
            return self._get_oauth2_credentials()

        username = self.config.ews_username or self.config.ews_email
        password = self.config.ews_password.get_secret_value()
        if not username or not password:
            raise AuthenticationError(
                f"Username and password required for {self.config.ews_auth_type} auth"
            )

        self.logger.debug(f"Using {self.config.ews_auth_type} credentials for {username}")
        return Credentials(username=username, password=password)

    def _get_oauth2_credentials(self) -> OAuth2Credentials:
        client_secret = self.config.ews_client_secret.get_secret_value()
        missing = [
            name for name, value in (
                ("ews_client_id", self.config.ews_client_id),
                ("ews_client_secret", client_secret),
                ("ews_tenant_id", self.config.ews_tenant_id),
            )
            if not value
        ]
        if missing:
            raise AuthenticationError(f"OAuth2 settings missing: {', '.join(missing)}")

        self.logger.debug(f"Using OAuth2 client credentials for {self.config.ews_email}")
        return OAuth2Credentials(
            client_id=self.config.ews_client_id,
            client_secret=client_secret,
            tenant_id=self.config.ews_tenant_id,
            identity=Identity(primary_smtp_address=self.config.ews_email),
        )
