"""
Phone verification codes delivered over WhatsApp.

Codes live in Valkey under otp:{phone} with a TTL, so pending codes
survive restarts and are shared across workers. A wrong guess leaves the
code in place; a correct one consumes it.
"""

import logging
import secrets
import time
from typing import Any

from auth.config import OTPConfig
from clients.msg91_client import Msg91Client, OTP_TEMPLATE
from clients.valkey_client import ValkeyClient

logger = logging.getLogger(__name__)

KEY_PREFIX = "otp:"


class OTPNotRequestedError(ValueError):
    code = "OTP_NOT_REQUESTED"


class OTPExpiredError(ValueError):
    code = "OTP_EXPIRED"


class OTPMismatchError(ValueError):
    code = "OTP_MISMATCH"


def generate_code(length: int = 4) -> str:
    """Random numeric code without a leading zero."""
    low = 10 ** (length - 1)
    return str(low + secrets.randbelow(9 * low))


class OTPService:
    """Issue and check WhatsApp OTPs."""

    def __init__(
        self,
        valkey: ValkeyClient,
        msg91: Msg91Client,
        config: OTPConfig | None = None,
        include_debug_otp: bool = False,
    ):
        self.valkey = valkey
        self.msg91 = msg91
        self.config = config or OTPConfig()
        self.include_debug_otp = include_debug_otp

    def _key(self, phone: str) -> str:
        return f"{KEY_PREFIX}{phone.strip()}"

    def send(self, to: str | None, template_name: str | None = None) -> dict[str, Any]:
        """
        Generate, store and send a code. A new request replaces any pending code.

        Returns:
            {"message", "otpSent", "messageId"} plus "debugOtp" in development

        Raises:
            ValueError: If no phone number is given
            Msg91Error: If WhatsApp delivery fails
        """
        if not to or not to.strip():
            raise ValueError('Missing "to" phone number')

        code = generate_code(self.config.code_length)
        self.valkey.set_json(
            self._key(to),
            {"otp": code, "expires_at": time.time() + self.config.ttl_seconds},
            expire_seconds=self.config.ttl_seconds,
        )

        message_id = self.msg91.send_otp_whatsapp(to, code, template_name or OTP_TEMPLATE)
        logger.info(f"OTP sent to {to}")

        result = {"message": "OTP sent", "otpSent": True, "messageId": message_id or None}
        if self.include_debug_otp:
            logger.info(f"Debug OTP for {to}: {code}")
            result["debugOtp"] = code
        return result

    def verify(self, to: str | None, otp: str | None) -> bool:
        """
        Check a code. Consumed on success.

        Raises:
            ValueError: Missing phone or code
            OTPNotRequestedError: Nothing pending for the phone
            OTPExpiredError: Code older than the TTL (removed)
            OTPMismatchError: Wrong code (kept for another try)
        """
        if not to or not otp:
            raise ValueError("Missing parameters")

        key = self._key(to)
        entry = self.valkey.get_json(key)
        if not entry:
            raise OTPNotRequestedError("No OTP requested for this number")

        if time.time() > float(entry.get("expires_at", 0)):
            self.valkey.delete(key)
            raise OTPExpiredError("OTP expired")

        if str(otp).strip() != entry.get("otp"):
            logger.warning(f"OTP mismatch for {to}")
            raise OTPMismatchError("OTP mismatch")

        self.valkey.delete(key)
        logger.info(f"OTP verified for {to}")
        return True
