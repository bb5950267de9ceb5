"""Phone number helpers for sign-up and WhatsApp contact links."""

import re
from urllib.parse import quote

DRC_COUNTRY_CODE = '243'

# Dial prefixes offered on the sign-up form
COUNTRY_PREFIXES = (
    '+243', '+32', '+33', '+49', '+41', '+39', '+351', '+352', '+55',
    '+44', '+1', '+86', '+90', '+971', '+27', '+244', '+260',
)

LOCAL_NUMBER_REGEX = re.compile(r'^[0-9]{6,15}$')
# Stored form: optional dial prefix followed by digits
PHONE_NUMBER_REGEX = re.compile(r'^\+?[0-9]{6,15}$')

WHATSAPP_GREETING = 'Bonjour, je suis intéressé(e) par votre annonce "{title}" sur Teka Somba.'


def compose_phone(prefix, number):
    """Join a dial prefix and a local number. Returns None for a blank number."""
    if not number or not str(number).strip():
        return None
    return f'{prefix}{str(number).strip()}'


def normalize_phone_for_whatsapp(raw):
    """Normalize a phone number to the digits-only form wa.me expects.

    DRC is the default country: a leading 0 is replaced by 243 and any
    number without a country code gets 243 prepended.
    """
    if not raw:
        return None

    phone = re.sub(r'[^0-9+]', '', raw)
    if not phone.strip('+'):
        return None

    if phone.startswith('+'):
        phone = phone[1:]
    elif phone.startswith('0'):
        phone = DRC_COUNTRY_CODE + phone[1:]
    elif not phone.startswith(DRC_COUNTRY_CODE):
        phone = DRC_COUNTRY_CODE + phone

    return phone


def whatsapp_contact_url(phone_number, product_title):
    """Build a wa.me link with a pre-filled greeting, or None without a phone."""
    normalized = normalize_phone_for_whatsapp(phone_number)
    if not normalized:
        return None
    message = WHATSAPP_GREETING.format(title=product_title)
    return f'https://wa.me/{normalized}?text={quote(message)}'
