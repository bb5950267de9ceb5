"""Request payload validators.

Each validator returns an error message, or None when the data is valid.
Services turn a message into a ValidationError.
"""

import re
from decimal import Decimal, InvalidOperation

from tekasomba.constants import (
    ACCOUNT_TYPES,
    CONDITIONS,
    CURRENCIES,
    SUPPORTED_CITIES,
)
from tekasomba.constants.listings import (
    TITLE_MIN_LENGTH,
    TITLE_MAX_LENGTH,
    DESCRIPTION_MIN_LENGTH,
    DESCRIPTION_MAX_LENGTH,
    PRICE_MAX,
)
from tekasomba.utils.phone import LOCAL_NUMBER_REGEX, PHONE_NUMBER_REGEX, COUNTRY_PREFIXES

# Email validation regex
EMAIL_REGEX = re.compile(r'^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$')

PASSWORD_MIN_LENGTH = 6
PASSWORD_MAX_LENGTH = 128

# Allowed fields for profile update (prevent mass assignment)
PROFILE_ALLOWED_FIELDS = {'full_name', 'phone_number', 'city', 'account_type'}

# Fields a seller may change on an existing listing
PRODUCT_UPDATABLE_FIELDS = {
    'title', 'description', 'price', 'currency', 'condition',
    'location_city', 'category_id', 'is_active',
}


def parse_price(value):
    """Parse a positive price into a Decimal. Returns None when invalid."""
    if isinstance(value, bool) or value is None:
        return None
    try:
        price = Decimal(str(value).strip()).quantize(Decimal('0.01'))
    except (InvalidOperation, ValueError):
        return None
    # Bounds apply to the rounded value that gets stored
    if not price.is_finite() or not 0 < price < PRICE_MAX:
        return None
    return price


def validate_signup_data(data):
    """Validate registration fields."""
    email = (data.get('email') or '').strip().lower()
    password = data.get('password') or ''

    if not EMAIL_REGEX.match(email):
        return 'Invalid email format'
    if len(email) > 254:
        return 'Email is too long'
    if len(password) < PASSWORD_MIN_LENGTH:
        return f'Password must be at least {PASSWORD_MIN_LENGTH} characters'
    if len(password) > PASSWORD_MAX_LENGTH:
        return f'Password must be less than {PASSWORD_MAX_LENGTH} characters'

    full_name = data.get('full_name')
    if full_name is not None:
        if not isinstance(full_name, str) or len(full_name.strip()) < 2:
            return 'Full name must be at least 2 characters'
        if len(full_name) > 120:
            return 'Full name must be less than 120 characters'

    account_type = data.get('account_type')
    if account_type is not None and account_type not in ACCOUNT_TYPES:
        return f"account_type must be one of: {', '.join(ACCOUNT_TYPES)}"

    phone_number = data.get('phone_number')
    if phone_number:
        if not LOCAL_NUMBER_REGEX.match(str(phone_number).strip()):
            return 'Invalid phone number (digits only, min 6)'
        prefix = data.get('phone_prefix', '+243')
        if prefix not in COUNTRY_PREFIXES:
            return 'Unsupported phone prefix'

    return None


def validate_profile_data(data):
    """Validate profile update fields."""
    unknown = set(data.keys()) - PROFILE_ALLOWED_FIELDS
    if unknown:
        return f"Unknown fields: {', '.join(sorted(unknown))}"

    length_limits = {
        'full_name': 120,
        'phone_number': 20,
        'city': 100,
    }
    for field, max_len in length_limits.items():
        if field in data and data[field] is not None:
            if not isinstance(data[field], str):
                return f'{field} must be a string'
            if len(data[field]) > max_len:
                return f'{field} must be less than {max_len} characters'

    phone_number = data.get('phone_number')
    if phone_number and not PHONE_NUMBER_REGEX.match(phone_number.strip()):
        return 'Invalid phone number (digits only, optional + prefix, min 6)'

    if 'account_type' in data and data['account_type'] not in ACCOUNT_TYPES:
        return f"account_type must be one of: {', '.join(ACCOUNT_TYPES)}"

    return None


def validate_product_data(data, partial=False):
    """Validate listing fields.

    With partial=True only the fields present are checked (updates);
    otherwise title, description, price, location_city and category_id
    are required.
    """
    if partial:
        unknown = set(data.keys()) - PRODUCT_UPDATABLE_FIELDS
        if unknown:
            return f"Unknown fields: {', '.join(sorted(unknown))}"
    else:
        missing = [f for f in ('title', 'description', 'price', 'location_city', 'category_id')
                   if data.get(f) in (None, '')]
        if missing:
            return f"Missing required fields: {', '.join(missing)}"

    if 'title' in data:
        title = data['title']
        if not isinstance(title, str) or len(title.strip()) < TITLE_MIN_LENGTH:
            return f'Title must be at least {TITLE_MIN_LENGTH} characters'
        if len(title.strip()) > TITLE_MAX_LENGTH:
            return f'Title must be less than {TITLE_MAX_LENGTH} characters'

    if 'description' in data:
        description = data['description']
        if not isinstance(description, str) or len(description.strip()) < DESCRIPTION_MIN_LENGTH:
            return f'Description must be at least {DESCRIPTION_MIN_LENGTH} characters'
        if len(description.strip()) > DESCRIPTION_MAX_LENGTH:
            return f'Description must be less than {DESCRIPTION_MAX_LENGTH} characters'

    if 'price' in data and parse_price(data['price']) is None:
        return 'Price must be a positive number'

    if 'currency' in data and data['currency'] not in CURRENCIES:
        return f"currency must be one of: {', '.join(CURRENCIES)}"

    if 'condition' in data and data['condition'] not in CONDITIONS:
        return f"condition must be one of: {', '.join(CONDITIONS)}"

    if 'location_city' in data and data['location_city'] not in SUPPORTED_CITIES:
        return 'Please select a supported city'

    if 'is_active' in data and not isinstance(data['is_active'], bool):
        return 'is_active must be a boolean'

    return None
