# =============================================================================
# Message Model Tests
# =============================================================================

import json
import time

import pytest

from sendhawk.core import (
    DEFAULT_MAX_ATTACHMENT_SIZE,
    Attachment,
    Message,
    get_attachments,
    get_bcc,
    get_cc,
    get_from,
    get_html,
    get_reply_to,
    get_subject,
    get_text,
    get_to,
    is_html,
)
from sendhawk.sanitize import NonSanitizer, SanitizerFunc


# -----------------------------------------------------------------------------
# Construction
# -----------------------------------------------------------------------------

def test_defaults():
    message = Message()
    assert message.max_attachment_size == DEFAULT_MAX_ATTACHMENT_SIZE == 25 * 1024 * 1024
    assert message.to == [] and message.cc == [] and message.bcc == []
    assert message.attachments == []
    assert message.text_sanitizer is None and message.html_sanitizer is None


def test_from_body_plain_text():
    message = Message.from_body("a@x.com", ["b@x.com"], "Hi", "Hello there")
    assert message.text == "Hello there"
    assert message.html == ""


def test_from_body_html():
    message = Message.from_body("a@x.com", ["b@x.com"], "Hi", "<p>Hello</p>")
    assert message.html == "<p>Hello</p>"
    assert message.text == ""


def test_from_body_misclassifies_stray_angle_brackets():
    # Known limitation of the tag-sniffing heuristic
    message = Message.from_body("a@x.com", ["b@x.com"], "Hi", "Press <Enter> to continue")
    assert message.html == "Press <Enter> to continue"


@pytest.mark.parametrize("value, expected", [
    ("<p>x</p>", True),
    ("<BR>", True),
    ("</div>", True),
    ("text <span class='a'>x</span> text", True),
    ("1 < 2 and 3 > 2", False),
    ("plain text", False),
    ("", False),
])
def test_is_html(value, expected):
    assert is_html(value) is expected


def test_is_html_unclosed_openers_scan_in_linear_time():
    body = "<a" * 200_000
    start = time.perf_counter()
    message = Message.from_body("a@x.com", ["b@x.com"], "s", body)
    elapsed = time.perf_counter() - start

    assert message.text == body
    assert message.html == ""
    assert elapsed < 1.0


@pytest.mark.parametrize("value, expected", [
    ("<a" * 1000 + ">", True),
    ("< b>", False),
    ("<1> and <b", False),
    ("</ b> then <i>", True),
    (">< p", False),
])
def test_is_html_edge_cases(value, expected):
    assert is_html(value) is expected


def test_lists_are_copied_on_construction():
    to = ["b@x.com"]
    attachments = [Attachment("a.txt", b"a")]
    message = Message(sender="a@x.com", to=to, attachments=attachments)

    to.append("c@x.com")
    attachments.append(Attachment("b.txt", b"b"))

    assert message.to == ["b@x.com"]
    assert len(message.attachments) == 1


def test_single_address_string_is_one_recipient():
    message = Message(sender="a@x.com", to="b@x.com", cc="c@x.com", bcc="d@x.com")
    assert message.to == ["b@x.com"]
    assert message.get_to() == ["b@x.com"]
    assert message.get_cc() == ["c@x.com"]
    assert message.get_bcc() == ["d@x.com"]


def test_from_body_accepts_single_address_string():
    message = Message.from_body("a@x.com", "b@x.com", "Hi", "Hello")
    assert message.get_to() == ["b@x.com"]


def test_adders_chain():
    message = (
        Message(sender="a@x.com")
        .add_to("b@x.com")
        .add_cc("c@x.com")
        .add_bcc("d@x.com")
        .add_attachment(Attachment("a.txt", b"a"))
    )
    assert message.get_to() == ["b@x.com"]
    assert message.get_cc() == ["c@x.com"]
    assert message.get_bcc() == ["d@x.com"]
    assert [a.filename for a in message.get_attachments()] == ["a.txt"]


# -----------------------------------------------------------------------------
# Accessors
# -----------------------------------------------------------------------------

def test_accessors_return_validated_and_sanitized_view(sample_message):
    assert sample_message.get_from() == "sender@example.com"
    assert sample_message.get_to() == ["recipient@example.com"]
    assert sample_message.get_cc() == ["cc@example.com"]
    assert sample_message.get_bcc() == ["bcc@example.com"]
    assert sample_message.get_reply_to() == "replyto@example.com"
    assert sample_message.get_subject() == "Test Subject"
    assert sample_message.get_text() == "This is a test email body."
    assert sample_message.get_html() == "<p>This is a <b>test</b> email body.</p>"
    assert len(sample_message.get_attachments()) == 1


def test_invalid_addresses_are_filtered_on_read():
    message = Message(
        sender="not-an-address",
        to=[" ok@x.com ", "bad", "ok2@x.com"],
        cc=["@x.com"],
        reply_to="x@y",
    )
    assert message.get_from() == ""
    assert message.get_to() == ["ok@x.com", "ok2@x.com"]
    assert message.get_cc() == []
    assert message.get_reply_to() == ""
    # raw values are kept as given
    assert message.to == [" ok@x.com ", "bad", "ok2@x.com"]


def test_content_is_sanitized_on_read_without_mutation():
    message = Message(
        subject="  <b>Sale</b> ",
        text="Tom & Jerry",
        html="<p onclick='x()'>Hi</p><script>bad()</script>",
    )
    assert message.get_subject() == "&lt;b&gt;Sale&lt;/b&gt;"
    assert message.get_text() == "Tom &amp; Jerry"
    assert message.get_html() == "<p>Hi</p>"
    assert message.subject == "  <b>Sale</b> "
    assert message.html == "<p onclick='x()'>Hi</p><script>bad()</script>"


def test_none_message_accessors_return_zero_values():
    assert get_from(None) == ""
    assert get_to(None) == []
    assert get_cc(None) == []
    assert get_bcc(None) == []
    assert get_reply_to(None) == ""
    assert get_subject(None) == ""
    assert get_text(None) == ""
    assert get_html(None) == ""
    assert get_attachments(None) == []


# -----------------------------------------------------------------------------
# Custom sanitizers
# -----------------------------------------------------------------------------

def test_custom_text_sanitizer_applies_to_subject_and_text():
    message = Message(subject="hello", text="world", text_sanitizer=SanitizerFunc(str.upper))
    assert message.get_subject() == "HELLO"
    assert message.get_text() == "WORLD"


def test_plain_function_sanitizers_are_wrapped():
    message = Message(html="<b>x</b>", html_sanitizer=lambda s: s.replace("b", "i"))
    assert isinstance(message.html_sanitizer, SanitizerFunc)
    assert message.get_html() == "<i>x</i>"


def test_sanitizer_can_be_swapped_between_reads():
    message = Message(html="<p>Hi</p><script>x()</script>")
    assert message.get_html() == "<p>Hi</p>"

    message.set_html_sanitizer(NonSanitizer())
    assert message.get_html() == "<p>Hi</p><script>x()</script>"

    message.set_html_sanitizer(None)
    assert message.get_html() == "<p>Hi</p>"


def test_directly_assigned_function_still_works():
    message = Message(text="abc")
    message.text_sanitizer = str.upper
    assert message.get_text() == "ABC"


# -----------------------------------------------------------------------------
# Attachment size limit
# -----------------------------------------------------------------------------

@pytest.fixture
def sized_attachments():
    return [
        Attachment("small.txt", b"x" * 10),
        Attachment("big.bin", b"x" * 100),
        Attachment("exact.txt", b"x" * 50),
        Attachment("tiny.txt", b"x"),
    ]


def test_attachments_over_limit_are_dropped_in_order(sized_attachments):
    message = Message(attachments=sized_attachments, max_attachment_size=50)
    assert [a.filename for a in message.get_attachments()] == ["small.txt", "exact.txt", "tiny.txt"]
    # no truncation
    assert all(len(a.content) == a.size for a in message.get_attachments())


def test_negative_limit_means_unlimited(sized_attachments):
    message = Message(attachments=sized_attachments, max_attachment_size=-1)
    assert message.get_attachments() == sized_attachments


def test_zero_limit_keeps_only_empty_attachments():
    message = Message(
        attachments=[Attachment("empty.txt"), Attachment("one.txt", b"1")],
        max_attachment_size=0,
    )
    assert [a.filename for a in message.get_attachments()] == ["empty.txt"]


# -----------------------------------------------------------------------------
# JSON
# -----------------------------------------------------------------------------

def test_to_json_full(sample_message):
    sample_message.attachments = [Attachment("attachment1.txt", b"file content")]
    assert json.loads(sample_message.to_json()) == {
        "from": "sender@example.com",
        "to": ["recipient@example.com"],
        "cc": ["cc@example.com"],
        "bcc": ["bcc@example.com"],
        "replyTo": "replyto@example.com",
        "subject": "Test Subject",
        "text": "This is a test email body.",
        "html": "<p>This is a <b>test</b> email body.</p>",
        "attachments": [{"filename": "attachment1.txt", "content": "ZmlsZSBjb250ZW50"}],
    }


def test_to_dict_omits_empty_optional_fields():
    message = Message(sender="a@x.com", to=["b@x.com"], subject="S", text="T")
    assert message.to_dict() == {"from": "a@x.com", "to": ["b@x.com"], "subject": "S", "text": "T"}


def test_to_dict_keeps_raw_values():
    message = Message(sender=" a@x.com ", to=["bad"], subject="<b>")
    data = message.to_dict()
    assert data["from"] == " a@x.com "
    assert data["to"] == ["bad"]
    assert data["subject"] == "<b>"


def test_from_json():
    message = Message.from_json("""{
        "from": "sender@example.com",
        "to": ["recipient@example.com"],
        "cc": ["cc@example.com"],
        "bcc": ["bcc@example.com"],
        "replyTo": "replyto@example.com",
        "subject": "Subject",
        "text": "This is the email content.",
        "html": "<p>This is the email content.</p>",
        "attachments": [{"filename": "attachment1.txt", "content": "ZmlsZSBjb250ZW50"}]
    }""")
    assert message.get_from() == "sender@example.com"
    assert message.get_bcc() == ["bcc@example.com"]
    assert message.get_reply_to() == "replyto@example.com"
    assert message.get_html() == "<p>This is the email content.</p>"
    assert message.get_attachments() == [Attachment("attachment1.txt", b"file content")]
    assert message.max_attachment_size == DEFAULT_MAX_ATTACHMENT_SIZE


def test_from_json_minimal():
    message = Message.from_json('{"from": "a@x.com", "to": ["b@x.com"], "subject": "S", "text": "T"}')
    assert message.cc == [] and message.attachments == []
    assert message.html == ""


def test_from_json_invalid_attachment_content():
    with pytest.raises(ValueError):
        Message.from_json('{"from": "a@x.com", "attachments": [{"filename": "x", "content": "%%%"}]}')


def test_from_json_invalid_document():
    with pytest.raises(json.JSONDecodeError):
        Message.from_json("{not json")
