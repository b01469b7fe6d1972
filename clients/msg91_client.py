"""
MSG91 client for WhatsApp template messages and SMS flows.

WhatsApp: bulk outbound template endpoint (invite links, OTP codes).
SMS: flow endpoint, used as the fallback channel for invites.
Single synchronous attempt with a 10 second timeout; failures raise Msg91Error.
"""

import json
import logging
from typing import Any, Dict

import requests

logger = logging.getLogger(__name__)

WHATSAPP_URL = "https://api.msg91.com/api/v5/whatsapp/whatsapp-outbound-message/bulk/"
SMS_FLOW_URL = "https://control.msg91.com/api/v5/flow"

INVITE_TEMPLATE = "merchantinv"
OTP_TEMPLATE = "ekyc_verification"

COUNTRY_CODE = "91"


class Msg91Error(Exception):
    """Raised when MSG91 rejects a message or cannot be reached."""


def format_whatsapp_number(mobile: str) -> str:
    """'9876543210' -> '+919876543210'. Numbers already carrying '+' are kept."""
    number = mobile.strip()
    if number.startswith("+"):
        return number
    if not number.startswith(COUNTRY_CODE):
        number = COUNTRY_CODE + number
    return "+" + number


def format_sms_number(mobile: str) -> str:
    """'9876543210' -> '919876543210' (flow API wants no '+')."""
    number = mobile.strip().lstrip("+")
    if not number.startswith(COUNTRY_CODE):
        number = COUNTRY_CODE + number
    return number


class Msg91Client:
    """Send WhatsApp templates and SMS flows via MSG91."""

    def __init__(
        self,
        authkey: str,
        integrated_number: str,
        sms_template_id: str,
        whatsapp_namespace: str,
        timeout: int = 10,
    ):
        """
        Raises:
            ValueError: If authkey or integrated_number is empty
        """
        if not authkey:
            raise ValueError("authkey is required")
        if not integrated_number:
            raise ValueError("integrated_number is required")

        self.authkey = authkey
        self.integrated_number = integrated_number
        self.sms_template_id = sms_template_id
        self.whatsapp_namespace = whatsapp_namespace
        self.timeout = timeout

    def _post(self, url: str, payload: dict) -> Dict[str, Any]:
        """POST JSON and return the decoded body.

        Raises:
            Msg91Error: On connection failure, non-2xx status, or non-JSON body.
        """
        headers = {
            "accept": "application/json",
            "content-type": "application/json",
            "authkey": self.authkey,
        }

        try:
            response = requests.post(url, json=payload, headers=headers, timeout=self.timeout)
        except requests.exceptions.RequestException as e:
            logger.error(f"MSG91 connection failed: {e}")
            raise Msg91Error(f"Connection failed: {e}")

        try:
            data = response.json()
        except (json.JSONDecodeError, ValueError):
            logger.error(f"MSG91 returned invalid JSON: {response.text}")
            raise Msg91Error(f"Invalid response from MSG91 (HTTP {response.status_code})")

        if not 200 <= response.status_code < 300:
            message = data.get("message") if isinstance(data, dict) else None
            logger.error(f"MSG91 HTTP {response.status_code}: {data}")
            raise Msg91Error(message or f"HTTP {response.status_code}")

        return data if isinstance(data, dict) else {"response": data}

    @staticmethod
    def _message_id(data: Dict[str, Any]) -> str:
        return str(data.get("request_id") or data.get("message_id") or "")

    def send_whatsapp_template(
        self,
        to: str,
        template_name: str,
        components: Dict[str, Any],
        namespace: str | None = None,
    ) -> str:
        """
        Send one WhatsApp template message.

        Args:
            to: Mobile number (country code added if missing)
            template_name: Approved MSG91 template name
            components: Template components, e.g. {"button_1": {...}}
            namespace: Template namespace (defaults to configured namespace)

        Returns:
            MSG91 request/message id, empty string if none was returned.

        Raises:
            Msg91Error: If the call fails or MSG91 reports an error.
        """
        recipient = format_whatsapp_number(to)
        payload = {
            "integrated_number": self.integrated_number,
            "content_type": "template",
            "payload": {
                "messaging_product": "whatsapp",
                "type": "template",
                "template": {
                    "name": template_name,
                    "language": {"code": "en", "policy": "deterministic"},
                    "namespace": namespace or self.whatsapp_namespace,
                    "to_and_components": [
                        {"to": [recipient], "components": components},
                    ],
                },
            },
        }

        data = self._post(WHATSAPP_URL, payload)

        if data.get("hasError") is True or data.get("errors"):
            logger.error(f"MSG91 WhatsApp error for {recipient}: {data}")
            raise Msg91Error(f"MSG91 Error: {data.get('errors') or data}")

        if data.get("status") != "success":
            raise Msg91Error(f"MSG91 returned status: {data.get('status')}")

        recipients = data.get("response")
        if isinstance(recipients, list) and recipients:
            item = recipients[0]
            if isinstance(item, dict) and item.get("status") and item["status"] != "success":
                logger.warning(f"WhatsApp recipient status not success: {item}")
                raise Msg91Error(f"recipient status: {item['status']}")

        message_id = self._message_id(data)
        logger.info(f"WhatsApp '{template_name}' sent to {recipient} (id={message_id or 'none'})")
        return message_id

    def send_invite_whatsapp(self, mobile: str, invite_link: str) -> str:
        """Invite template with the link as URL button.

        Raises:
            Msg91Error: On failure, including a success reply without a message id.
        """
        message_id = self.send_whatsapp_template(
            mobile,
            INVITE_TEMPLATE,
            {"button_1": {"subtype": "url", "type": "text", "value": invite_link}},
        )
        if not message_id:
            raise Msg91Error("WhatsApp accepted the request but returned no message id")
        return message_id

    def send_otp_whatsapp(self, mobile: str, otp: str, template_name: str = OTP_TEMPLATE) -> str:
        """OTP template: code goes in body_1 and in the copy-code button."""
        return self.send_whatsapp_template(
            mobile,
            template_name,
            {
                "body_1": {"type": "text", "value": otp},
                "button_1": {"subtype": "url", "type": "text", "value": otp},
            },
        )

    def send_invite_sms(self, mobile: str, invite_link: str, merchant_name: str = "") -> str:
        """SMS flow with VAR1=link and VAR2=name.

        Raises:
            Msg91Error: On failure.
        """
        recipient = format_sms_number(mobile)
        payload = {
            "template_id": self.sms_template_id,
            "short_url": "1",
            "realTimeResponse": "1",
            "recipients": [
                {"mobiles": recipient, "VAR1": invite_link, "VAR2": merchant_name or ""},
            ],
        }

        data = self._post(SMS_FLOW_URL, payload)
        if data.get("type") == "error":
            raise Msg91Error(f"MSG91 SMS error: {data.get('message') or data}")

        message_id = self._message_id(data)
        logger.info(f"SMS invite sent to {recipient} (id={message_id or 'none'})")
        return message_id
