"""Listing constants shared by validation, models and seeding.

Must stay in sync with the city, currency and condition pickers of the
web client.
"""

SUPPORTED_CITIES = (
    'Kinshasa',
    'Lubumbashi',
    'Goma',
    'Bukavu',
    'Matadi',
    'Kisangani',
)

CURRENCIES = ('CDF', 'USD')
DEFAULT_CURRENCY = 'CDF'

CONDITIONS = ('neuf', 'comme neuf', 'bon état', 'à retaper')
DEFAULT_CONDITION = 'bon état'

ACCOUNT_TYPES = ('particulier', 'professionnel')
DEFAULT_ACCOUNT_TYPE = 'particulier'

MAX_PHOTOS = 4

TITLE_MIN_LENGTH = 3
TITLE_MAX_LENGTH = 200
DESCRIPTION_MIN_LENGTH = 10
DESCRIPTION_MAX_LENGTH = 2000

# Exclusive upper bound; products.price is Numeric(14, 2)
PRICE_MAX = 10 ** 12

MESSAGE_MAX_LENGTH = 5000
# Length of the last-message preview stored on a conversation
SNIPPET_LENGTH = 100

# Filter value the client sends for "no filter"
FILTER_ALL = 'all'

# Seed data for init_db.py
DEFAULT_CATEGORIES = (
    ('Électronique', 'electronique'),
    ('Téléphones', 'telephones'),
    ('Véhicules', 'vehicules'),
    ('Immobilier', 'immobilier'),
    ('Mode', 'mode'),
    ('Maison', 'maison'),
    ('Emploi', 'emploi'),
    ('Services', 'services'),
    ('Autres', 'autres'),
)


def is_filter_value(value):
    """Return True when value is an actual filter (not blank and not 'all')."""
    if value is None:
        return False
    value = str(value).strip()
    return bool(value) and value != FILTER_ALL
