import pytest
import requests

from roombook.core.config import Settings
from roombook.core.logging_config import console_filter, get_logger
from roombook.services import email_service
from roombook.services.email_service import EmailDispatcher

logger = get_logger()


class FakeResponse:
    def __init__(self, status_code=200, text="OK"):
        self.status_code = status_code
        self.text = text


@pytest.fixture
def configured():
    return Settings(
        EMAILJS_PUBLIC_KEY="public-key",
        EMAILJS_PRIVATE_KEY="private-key",
        EMAILJS_SERVICE_ID="service_library",
        EMAILJS_VERIFICATION_TEMPLATE_ID="template_verify",
        EMAILJS_CONFIRMATION_TEMPLATE_ID="template_confirm",
    )


@pytest.fixture
def captured_posts(monkeypatch):
    calls = []

    def fake_post(url, json=None, timeout=None):
        calls.append({"url": url, "json": json, "timeout": timeout})
        return FakeResponse()

    monkeypatch.setattr(email_service.requests, "post", fake_post)
    return calls


def test_simulation_mode_reports_success_without_network(captured_posts):
    dispatcher = EmailDispatcher(Settings(EMAILJS_PUBLIC_KEY="", EMAILJS_SERVICE_ID=""))

    sent = dispatcher.send_verification_email("student@bu.edu", "Terrier", "123456", "ABCD1234")

    assert sent is True
    assert captured_posts == []


def test_missing_template_id_falls_back_to_simulation(configured, captured_posts):
    settings = configured.model_copy(update={"EMAILJS_CONFIRMATION_TEMPLATE_ID": None})

    sent = EmailDispatcher(settings).send_confirmation_email(
        "student@bu.edu", "Terrier", "Study Room 5", "Mugar Memorial Library",
        "2025-06-01", "14:00", "15:00", "ABCD1234",
    )

    assert sent is True
    assert captured_posts == []


def test_verification_email_payload(configured, captured_posts):
    sent = EmailDispatcher(configured).send_verification_email(
        "student@bu.edu", "Terrier", "123456", "ABCD1234"
    )

    assert sent is True
    call = captured_posts[0]
    assert call["url"] == configured.EMAILJS_API_URL
    assert call["timeout"] == configured.EMAIL_TIMEOUT_SECONDS
    assert call["json"]["service_id"] == "service_library"
    assert call["json"]["template_id"] == "template_verify"
    assert call["json"]["user_id"] == "public-key"
    assert call["json"]["accessToken"] == "private-key"
    assert call["json"]["template_params"] == {
        "user_email": "student@bu.edu",
        "to_name": "Terrier",
        "verification_code": "123456",
        "booking_reference": "ABCD1234",
        "expires_in": "15 minutes",
    }


def test_confirmation_email_payload(configured, captured_posts):
    EmailDispatcher(configured).send_confirmation_email(
        "student@bu.edu", "Terrier", "Study Room 5", "Mugar Memorial Library",
        "2025-06-01", "14:00", "15:00", "ABCD1234",
    )

    params = captured_posts[0]["json"]["template_params"]
    assert captured_posts[0]["json"]["template_id"] == "template_confirm"
    assert params["room_name"] == "Study Room 5"
    assert params["building_name"] == "Mugar Memorial Library"
    assert params["booking_date"] == "2025-06-01"
    assert params["start_time"] == "14:00"
    assert params["end_time"] == "15:00"


def test_private_key_is_optional(configured, captured_posts):
    settings = configured.model_copy(update={"EMAILJS_PRIVATE_KEY": None})

    EmailDispatcher(settings).send_verification_email("student@bu.edu", "Terrier", "123456", "ABCD1234")

    assert "accessToken" not in captured_posts[0]["json"]


def test_relay_rejection_returns_false(configured, monkeypatch):
    monkeypatch.setattr(
        email_service.requests, "post",
        lambda url, json=None, timeout=None: FakeResponse(400, "The template ID is invalid"),
    )

    sent = EmailDispatcher(configured).send_verification_email(
        "student@bu.edu", "Terrier", "123456", "ABCD1234"
    )

    assert sent is False


def test_network_error_returns_false(configured, monkeypatch):
    def unreachable(url, json=None, timeout=None):
        raise requests.ConnectionError("relay unreachable")

    monkeypatch.setattr(email_service.requests, "post", unreachable)

    sent = EmailDispatcher(configured).send_confirmation_email(
        "student@bu.edu", "Terrier", "Study Room 5", "Mugar Memorial Library",
        "2025-06-01", "14:00", "15:00", "ABCD1234",
    )

    assert sent is False


def test_expiry_text_follows_code_lifetime(configured, captured_posts):
    settings = configured.model_copy(update={"VERIFICATION_CODE_TTL_MINUTES": 30})

    EmailDispatcher(settings).send_verification_email("student@bu.edu", "Terrier", "123456", "ABCD1234")

    assert captured_posts[0]["json"]["template_params"]["expires_in"] == "30 minutes"


def test_simulated_code_goes_to_console():
    shown = []
    sink_id = logger.add(shown.append, level="INFO", filter=console_filter)
    try:
        EmailDispatcher(Settings(EMAILJS_PUBLIC_KEY="")).send_verification_email(
            "student@bu.edu", "Terrier", "483920", "ABCD1234"
        )
        logger.bind(log_type="booking").info("booking chatter stays in the file")
    finally:
        logger.remove(sink_id)

    assert any("483920" in message for message in shown)
    assert not any("booking chatter" in message for message in shown)
