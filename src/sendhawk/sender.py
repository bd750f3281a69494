# =============================================================================
# Sender Interface
# =============================================================================
# The one capability every transport offers: take a Message and deliver it.
#
# SMTPTransport implements it here. Provider adapters (SendGrid, SES,
# Mailgun, ...) live outside this package; they implement the same method
# and read the message only through its get_*() accessors, so validation
# and sanitization happen exactly once, in the core.
# =============================================================================

from typing import Protocol, runtime_checkable

from sendhawk.core.message import Message


@runtime_checkable
class EmailSender(Protocol):
    """
    Anything that can send a Message.

    send_email() returns on success and raises on failure. Implementations
    do not retry.
    """

    def send_email(self, message: Message) -> None:
        ...
