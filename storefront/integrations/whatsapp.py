"""WhatsApp deep links for handing an order text to the store."""
from __future__ import annotations

import re
from urllib.parse import quote

from storefront.core.constants import WHATSAPP_BASE_URL

# Characters encodeURIComponent leaves untouched
_URI_COMPONENT_SAFE = "-_.!~*'()"


def normalize_phone(phone_number: str) -> str:
    """Keep digits only; wa.me expects the international number without '+'."""
    return re.sub(r"\D", "", phone_number or "")


def build_whatsapp_link(phone_number: str, text: str) -> str:
    return f"{WHATSAPP_BASE_URL}/{normalize_phone(phone_number)}?text={quote(text, safe=_URI_COMPONENT_SAFE)}"
