import requests

from roombook.core.config import Settings, get_settings
from roombook.core.logging_config import get_logger

logger = get_logger()
email_log = logger.bind(log_type="email")


class EmailDispatcher:
    """Sends booking emails through the EmailJS REST relay.

    Without credentials (or without the template id for a given email) the
    dispatcher runs in simulation mode: it logs what would have been sent,
    including the verification code, and reports success.
    """

    def __init__(self, settings: Settings | None = None):
        self.settings = settings or get_settings()

    def is_configured(self, template_id) -> bool:
        return bool(
            self.settings.EMAILJS_PUBLIC_KEY
            and self.settings.EMAILJS_SERVICE_ID
            and template_id
        )

    def _send(self, template_id: str, template_params: dict) -> bool:
        payload = {
            "service_id": self.settings.EMAILJS_SERVICE_ID,
            "template_id": template_id,
            "user_id": self.settings.EMAILJS_PUBLIC_KEY,
            "template_params": template_params,
        }
        if self.settings.EMAILJS_PRIVATE_KEY:
            payload["accessToken"] = self.settings.EMAILJS_PRIVATE_KEY

        try:
            response = requests.post(
                self.settings.EMAILJS_API_URL,
                json=payload,
                timeout=self.settings.EMAIL_TIMEOUT_SECONDS,
            )
        except requests.RequestException as e:
            email_log.error(f"Email send failed | Template={template_id} -> {e}")
            return False

        if response.status_code != 200:
            email_log.error(
                f"Email relay rejected message | Template={template_id} | "
                f"Status={response.status_code} | Body={response.text}"
            )
            return False

        email_log.info(
            f"Email sent | Template={template_id} | To={template_params.get('user_email')}"
        )
        return True

    # -------- VERIFICATION --------
    def send_verification_email(self, user_email: str, user_name: str,
                                verification_code: str, booking_reference: str) -> bool:
        template_id = self.settings.EMAILJS_VERIFICATION_TEMPLATE_ID

        if not self.is_configured(template_id):
            email_log.warning("EmailJS not configured, simulating verification email")
            email_log.info(
                f"[SIMULATION] Verification email | To={user_email} | Name={user_name} | "
                f"Reference={booking_reference}"
            )
            email_log.info(f"TEST VERIFICATION CODE: {verification_code}")
            return True

        return self._send(template_id, {
            "user_email": user_email,
            "to_name": user_name,
            "verification_code": verification_code,
            "booking_reference": booking_reference,
            "expires_in": f"{self.settings.VERIFICATION_CODE_TTL_MINUTES} minutes",
        })

    # -------- CONFIRMATION --------
    def send_confirmation_email(self, user_email: str, user_name: str, room_name: str,
                                building_name: str, booking_date: str, start_time: str,
                                end_time: str, booking_reference: str) -> bool:
        template_id = self.settings.EMAILJS_CONFIRMATION_TEMPLATE_ID

        if not self.is_configured(template_id):
            email_log.warning("EmailJS not configured, simulating confirmation email")
            email_log.info(
                f"[SIMULATION] Confirmation email | To={user_email} | Room={room_name} | "
                f"Building={building_name} | {booking_date} {start_time}-{end_time} | "
                f"Reference={booking_reference}"
            )
            return True

        return self._send(template_id, {
            "user_email": user_email,
            "to_name": user_name,
            "room_name": room_name,
            "building_name": building_name,
            "booking_date": booking_date,
            "start_time": start_time,
            "end_time": end_time,
            "booking_reference": booking_reference,
        })
