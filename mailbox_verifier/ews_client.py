"""Connection to one Exchange mailbox."""

import logging
from typing import Optional

from exchangelib import Account, Configuration, DELEGATE, EWSTimeZone
from exchangelib.errors import UnauthorizedError
from exchangelib.protocol import BaseProtocol
from tenacity import retry, stop_after_attempt, wait_exponential, retry_if_exception_type

from .config import AccountSettings
from .auth import AuthHandler
from .exceptions import ConnectionError, AuthenticationError, ConfigurationError

EWS_ENDPOINT_PATH = "/EWS/Exchange.asmx"


class EWSClient:
    """
    Owns the exchangelib Account of one mailbox.

    The account is created on first use and kept until ``close()``.
    Only account creation is retried; item calls made through the
    account run exactly once.
    """

    def __init__(self, config: AccountSettings, auth_handler: Optional[AuthHandler] = None):
        self.config = config
        self.auth_handler = auth_handler or AuthHandler(config)
        self.logger = logging.getLogger(__name__)
        self._account: Optional[Account] = None

    @property
    def email(self) -> str:
        return self.config.ews_email

    @property
    def account(self) -> Account:
        if self._account is None:
            self._check_endpoint()
            self._account = self._connect()
        return self._account

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        retry=retry_if_exception_type(ConnectionError),
        reraise=True,
    )
    def _connect(self) -> Account:
        """
        Open the mailbox and touch its folder tree once.

        Raises:
            AuthenticationError: Credentials cannot be built
            ConnectionError: The mailbox cannot be reached
        """
        mailbox = self.config.ews_email
        self.logger.info(f"Opening mailbox {mailbox}")
        credentials = self.auth_handler.get_credentials()
        BaseProtocol.TIMEOUT = self.config.request_timeout

        try:
            if self.config.ews_autodiscover:
                account = Account(
                    primary_smtp_address=mailbox,
                    credentials=credentials,
                    autodiscover=True,
                    access_type=DELEGATE,
                    default_timezone=self._timezone(),
                )
            else:
                account = Account(
                    primary_smtp_address=mailbox,
                    config=self._configuration(credentials),
                    autodiscover=False,
                    access_type=DELEGATE,
                    default_timezone=self._timezone(),
                )
            account.root.tree()
        except (AuthenticationError, ConnectionError):
            raise
        except UnauthorizedError as e:
            raise AuthenticationError(f"Credentials rejected for mailbox {mailbox}: {e}") from e
        except Exception as e:
            self.logger.error(f"Cannot open mailbox {mailbox}: {e}")
            raise ConnectionError(f"Cannot open mailbox {mailbox}: {e}") from e

        self.logger.info(f"Mailbox {mailbox} is open")
        return account

    def _check_endpoint(self) -> None:
        if not self.config.ews_autodiscover and not self.config.ews_server_url:
            raise ConfigurationError(
                f"ews_server_url is required for {self.config.ews_email} when autodiscover is disabled"
            )

    def _configuration(self, credentials) -> Configuration:
        endpoint = self._get_ews_url()
        self.logger.info(f"EWS endpoint for {self.config.ews_email}: {endpoint}")
        return Configuration(
            service_endpoint=endpoint,
            credentials=credentials,
            retry_policy=None,
            max_connections=self.config.connection_pool_size,
        )

    def _timezone(self) -> EWSTimeZone:
        try:
            return EWSTimeZone(self.config.timezone)
        except Exception as e:
            self.logger.warning(f"Unknown timezone {self.config.timezone!r}, using UTC: {e}")
            return EWSTimeZone("UTC")

    def test_connection(self) -> bool:
        """True if the inbox can be read."""
        try:
            self.account.inbox.total_count
        except Exception as e:
            self.logger.error(f"Mailbox {self.config.ews_email} is not reachable: {e}")
            return False
        return True

    def close(self) -> None:
        if self._account is None:
            return
        self.logger.info(f"Closing mailbox {self.config.ews_email}")
        self._account.protocol.close()
        self._account = None

    def _get_ews_url(self) -> str:
        """
        Endpoint URL from ews_server_url.

        Accepts the full endpoint, any URL containing /EWS/, or a bare
        host with or without scheme.
        """
        url = self.config.ews_server_url.strip()
        if "/EWS/" in url:
            if url.endswith(".asmx"):
                return url
            return url.rstrip("/") + "/Exchange.asmx"
        host = url.split("://", 1)[-1].rstrip("/")
        return f"https://{host}{EWS_ENDPOINT_PATH}"
