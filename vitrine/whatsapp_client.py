"""
Envio de mensagens de texto pela WhatsApp Cloud API (Graph API).
"""
import logging
from typing import Optional

import requests

from vitrine import settings

logger = logging.getLogger(__name__)

# Limite de texto do WhatsApp
MAX_MESSAGE_LENGTH = 4096


class DeliveryError(Exception):
    """Falha ao entregar a mensagem (credenciais, rede, erro da API)."""


class WhatsAppClient:
    def __init__(
        self,
        phone_number_id: Optional[str] = None,
        access_token: Optional[str] = None,
        api_version: Optional[str] = None,
        timeout: float = 15,
    ):
        self.phone_number_id = (phone_number_id or settings.WHATSAPP_PHONE_NUMBER_ID).strip()
        self.access_token = (access_token or settings.WHATSAPP_ACCESS_TOKEN).strip()
        self.api_version = api_version or settings.WHATSAPP_API_VERSION
        self.timeout = timeout

    def send_message(self, to: str, message: str, phone_number_id: Optional[str] = None) -> dict:
        phone_number_id = (phone_number_id or self.phone_number_id or "").strip()
        if not phone_number_id or not self.access_token:
            raise DeliveryError("Missing WHATSAPP_PHONE_NUMBER_ID or WHATSAPP_ACCESS_TOKEN in .env")

        # Sanitize recipient number (remove +, spaces, dashes)
        to_clean = to.replace("+", "").replace(" ", "").replace("-", "").strip()

        if len(message) > MAX_MESSAGE_LENGTH:
            message = message[: MAX_MESSAGE_LENGTH - 6] + "..."
            logger.warning("Message truncated to %s chars", MAX_MESSAGE_LENGTH)

        url = f"https://graph.facebook.com/{self.api_version}/{phone_number_id}/messages"
        headers = {
            "Authorization": f"Bearer {self.access_token}",
            "Content-Type": "application/json",
        }
        payload = {
            "messaging_product": "whatsapp",
            "recipient_type": "individual",
            "to": to_clean,
            "type": "text",
            "text": {"preview_url": False, "body": message},
        }

        logger.info("📤 whatsapp send to=%s len=%s", to_clean[-4:], len(message))
        try:
            response = requests.post(url, headers=headers, json=payload, timeout=self.timeout)
        except requests.exceptions.RequestException as e:
            logger.error("❌ Network error: %s", e)
            raise DeliveryError(f"Network error: {e}") from e

        if response.status_code >= 400:
            try:
                error_data = response.json() if response.text else {}
            except ValueError:
                error_data = {}
            error = error_data.get("error", {}) if isinstance(error_data, dict) else {}
            error_msg = error.get("message", response.text)
            error_code = error.get("code", "N/A")
            logger.error("❌ WhatsApp API Error [%s]: %s", error_code, error_msg)
            raise DeliveryError(f"WhatsApp API Error [{error_code}]: {error_msg}")

        result = response.json()
        if "messages" in result and result["messages"]:
            logger.info("✅ Mensagem aceita pela API. ID: %s", result["messages"][0].get("id", "N/A"))
        else:
            logger.warning("⚠️ Resposta sem 'messages': %s", result)
        return result
