# =============================================================================
# SMTP Transport
# =============================================================================
# Sends a Message to a mail server over SMTP.
#
# One call = one connection. Each send walks these steps in order and stops
# at the first failure:
#
#   1. connect      TCP (plus TLS right away for implicit TLS)
#   2. EHLO         capabilities
#   3. upgrade      STARTTLS, only for explicit TLS and only if offered,
#                   followed by a second EHLO
#   4. AUTH         PLAIN or CRAM-MD5
#   5. envelope     MAIL FROM, then one RCPT TO per To/Cc/Bcc address
#   6. DATA         the serialized MIME bytes
#   7. QUIT         connection closed whatever happened in 6
#
# Bcc addresses only ever appear in RCPT TO, never in the message bytes.
# Any refused recipient fails the whole send. There is no retry, no partial
# delivery, and no default timeout: a hung server hangs the caller unless a
# timeout is configured.
#
# Uses aiosmtplib for the protocol. send_email() is the blocking entry point;
# async code should await send_email_async() instead.
# =============================================================================

import asyncio
import logging
from enum import Enum
from typing import TYPE_CHECKING

import aiosmtplib

from sendhawk.config import is_development
from sendhawk.core.message import Message, get_bcc, get_cc, get_from, get_to
from sendhawk.mime import build_mime_message

if TYPE_CHECKING:
    from sendhawk.config import SMTPConfig

logger = logging.getLogger(__name__)

# PLAIN sends the password base64-encoded, i.e. readable. Only allow it in
# the clear when the server is on this machine.
LOOPBACK_HOSTS = frozenset({"localhost", "127.0.0.1", "::1"})


class AuthMethod(str, Enum):
    """SMTP AUTH mechanisms."""
    PLAIN = "PLAIN"
    CRAM_MD5 = "CRAM-MD5"


class ConnectionMethod(str, Enum):
    """
    How the connection is secured.

    IMPLICIT_TLS: TLS from the first byte (SMTPS, usually port 465).
    EXPLICIT_TLS_OR_PLAIN: plain connect, upgraded with STARTTLS when the
                           server offers it (usually port 587 or 25).
    """
    IMPLICIT_TLS = "ssl"
    EXPLICIT_TLS_OR_PLAIN = "starttls"


def envelope_recipients(message: Message | None) -> list[str]:
    """Every validated To, Cc and Bcc address, in that order."""
    return get_to(message) + get_cc(message) + get_bcc(message)


class SMTPTransport:
    """
    Sends messages through an SMTP server.

    The instance only holds settings; every send opens and tears down its
    own connection, so one transport can be shared between threads.

    Usage:
        >>> transport = SMTPTransport(
        ...     "smtp.example.com", 587, "user@example.com", "secret",
        ...     auth_method=AuthMethod.PLAIN,
        ... )
        >>> transport.send_email(message)

    Attributes:
        host: SMTP server hostname.
        port: SMTP server port.
        username: Login name ("" together with an empty password skips AUTH).
        auth_method: PLAIN or CRAM-MD5.
        connection_method: IMPLICIT_TLS or EXPLICIT_TLS_OR_PLAIN.
        local_hostname: Name sent with EHLO (default: this machine's FQDN).
        timeout: Seconds per network operation. None = no deadline.
    """

    def __init__(
        self,
        host: str,
        port: int,
        username: str = "",
        password: str = "",
        auth_method: AuthMethod | str = AuthMethod.PLAIN,
        connection_method: ConnectionMethod | str = ConnectionMethod.EXPLICIT_TLS_OR_PLAIN,
        *,
        local_hostname: str | None = None,
        timeout: float | None = None,
    ) -> None:
        self.host = host
        self.port = port
        self.username = username
        self._password = password
        self.auth_method = AuthMethod(auth_method)
        self.connection_method = ConnectionMethod(connection_method)
        self.local_hostname = local_hostname
        self.timeout = timeout

    @classmethod
    def from_config(cls, config: "SMTPConfig") -> "SMTPTransport":
        """
        Build a transport from an SMTPConfig.

        The password is resolved here (config value or keyring), once.
        """
        return cls(
            host=config.host,
            port=config.port,
            username=config.username,
            password=config.resolve_password(),
            auth_method=config.auth_method,
            connection_method=config.security,
            timeout=config.timeout,
        )

    @property
    def uses_implicit_tls(self) -> bool:
        return self.connection_method is ConnectionMethod.IMPLICIT_TLS

    # -------------------------------------------------------------------------
    # Sending
    # -------------------------------------------------------------------------

    def send_email(self, message: Message) -> None:
        """
        Send a message, blocking until the server has accepted it.

        Must not be called from inside a running event loop; use
        send_email_async() there.

        Raises:
            SMTPConnectionError: Connect or TLS failure.
            SMTPGreetingError: EHLO rejected.
            SMTPAuthenticationError: Login rejected or impossible.
            SendError: No recipients, or MAIL/RCPT/DATA rejected.
            SerializationError: The message couldn't be encoded.
        """
        asyncio.run(self.send_email_async(message))

    async def send_email_async(self, message: Message) -> None:
        """
        Send a message. Same contract as send_email().
        """
        recipients = envelope_recipients(message)
        if not recipients:
            raise SendError("No valid recipients specified")

        sender = get_from(message)
        payload = build_mime_message(message)

        client = self._create_client()
        logger.info(f"Connecting to SMTP {self.host}:{self.port}")
        try:
            await self._connect(client)
            encrypted = await self._greet(client)
            await self._authenticate(client, encrypted)
            await self._send_envelope(client, sender, recipients)
            await self._send_data(client, payload)
            logger.info(f"Email sent to {len(recipients)} recipient(s) via {self.host}")
            await self._quit(client)
        except SMTPError as e:
            logger.error(f"Failed to send email via {self.host}:{self.port}: {e}")
            raise
        finally:
            if client.is_connected:
                client.close()

    # -------------------------------------------------------------------------
    # Protocol steps
    # -------------------------------------------------------------------------

    def _create_client(self) -> aiosmtplib.SMTP:
        # start_tls=False: STARTTLS is driven by _greet(), not by connect().
        # No credentials here either, or connect() would log in on its own.
        return aiosmtplib.SMTP(
            hostname=self.host,
            port=self.port,
            local_hostname=self.local_hostname,
            use_tls=self.uses_implicit_tls,
            start_tls=False,
            validate_certs=not is_development(),
            timeout=self.timeout,
        )

    async def _connect(self, client: aiosmtplib.SMTP) -> None:
        """Step 1: TCP connect (and TLS handshake for implicit TLS)."""
        try:
            await client.connect()
        except (aiosmtplib.SMTPException, OSError) as e:
            code = getattr(e, "code", None)
            raise SMTPConnectionError(str(e), code=code) from e
        logger.debug("SMTP connection established")

    async def _greet(self, client: aiosmtplib.SMTP) -> bool:
        """
        Steps 2-3: EHLO, upgrading with STARTTLS if appropriate.

        Returns:
            True if the session is encrypted.
        """
        await self._ehlo(client)
        if self.uses_implicit_tls:
            return True

        if not client.supports_extension("starttls"):
            logger.debug(f"{self.host} doesn't offer STARTTLS, continuing in plain text")
            return False

        logger.debug("Upgrading connection with STARTTLS")
        try:
            await client.starttls(validate_certs=not is_development())
        except aiosmtplib.SMTPResponseException as e:
            raise SMTPTLSError(e.message, code=e.code) from e
        except (aiosmtplib.SMTPException, OSError) as e:
            raise SMTPTLSError(str(e)) from e

        # Capabilities from before the upgrade no longer count
        await self._ehlo(client)
        return True

    async def _ehlo(self, client: aiosmtplib.SMTP) -> None:
        try:
            await client.ehlo()
        except aiosmtplib.SMTPResponseException as e:
            raise SMTPGreetingError(e.message, code=e.code) from e
        except (aiosmtplib.SMTPException, OSError) as e:
            raise SMTPConnectionError(str(e)) from e

    async def _authenticate(self, client: aiosmtplib.SMTP, encrypted: bool) -> None:
        """Step 4: AUTH with the configured mechanism."""
        if not self.username and not self._password:
            logger.debug("No credentials configured, skipping AUTH")
            return

        if not client.supports_extension("auth"):
            raise SMTPAuthenticationError(f"{self.host} doesn't support AUTH")

        if (
            self.auth_method is AuthMethod.PLAIN
            and not encrypted
            and self.host.lower() not in LOOPBACK_HOSTS
        ):
            raise SMTPAuthenticationError(
                f"Refusing to send PLAIN credentials to {self.host} over an unencrypted connection"
            )

        logger.debug(f"Authenticating as {self.username} with {self.auth_method.value}")
        try:
            if self.auth_method is AuthMethod.CRAM_MD5:
                await client.auth_crammd5(self.username, self._password)
            else:
                await client.auth_plain(self.username, self._password)
        except aiosmtplib.SMTPResponseException as e:
            raise SMTPAuthenticationError(e.message, code=e.code) from e
        except (aiosmtplib.SMTPException, OSError) as e:
            raise SMTPConnectionError(str(e)) from e
        logger.debug("SMTP authentication successful")

    async def _send_envelope(
        self,
        client: aiosmtplib.SMTP,
        sender: str,
        recipients: list[str],
    ) -> None:
        """Step 5: MAIL FROM, then RCPT TO one at a time."""
        try:
            await client.mail(sender)
            for recipient in recipients:
                await client.rcpt(recipient)
        except aiosmtplib.SMTPResponseException as e:
            raise SendError(e.message, code=e.code) from e
        except (aiosmtplib.SMTPException, OSError) as e:
            raise SMTPConnectionError(str(e)) from e

    async def _send_data(self, client: aiosmtplib.SMTP, payload: bytes) -> None:
        """Step 6: DATA, payload, terminating dot."""
        try:
            await client.data(payload)
        except aiosmtplib.SMTPResponseException as e:
            raise SendError(e.message, code=e.code) from e
        except (aiosmtplib.SMTPException, OSError) as e:
            raise SMTPConnectionError(str(e)) from e

    async def _quit(self, client: aiosmtplib.SMTP) -> None:
        """Step 7: QUIT. The message is already accepted, so only warn."""
        try:
            await client.quit()
        except (aiosmtplib.SMTPException, OSError) as e:
            logger.warning(f"Error during SMTP QUIT: {e}")

    def __repr__(self) -> str:
        return (
            f"SMTPTransport(host={self.host!r}, port={self.port}, "
            f"username={self.username!r}, auth_method={self.auth_method.value}, "
            f"connection_method={self.connection_method.name})"
        )


# =============================================================================
# Exceptions
# =============================================================================

class SMTPError(Exception):
    """
    Base exception for SMTP sends.

    str(error) is the server's own response text where there is one.

    Attributes:
        code: SMTP reply code, if the failure came from a server reply.
        server_message: The message text (same as str(error)).
    """

    def __init__(self, message: str, code: int | None = None) -> None:
        super().__init__(message)
        self.code = code
        self.server_message = message


class SMTPConnectionError(SMTPError):
    """Raised when the server can't be reached or the connection drops."""
    pass


class SMTPTLSError(SMTPConnectionError):
    """Raised when the STARTTLS upgrade fails."""
    pass


class SMTPGreetingError(SMTPError):
    """Raised when the server rejects EHLO."""
    pass


class SMTPAuthenticationError(SMTPError):
    """Raised when SMTP authentication fails."""
    pass


class SendError(SMTPError):
    """Raised when the server rejects the sender, a recipient or the data."""
    pass
