"""Application-wide constants and configuration values.

Centralizes business constants and defaults to avoid duplication
and make changes easier.
"""

# ============== CART ==============
CART_STORAGE_KEY = "cart-storage"
DEFAULT_AVAILABLE_QUANTITY = 1

# ============== DISCOUNTS ==============
# Flat discount amounts in currency units, independent of the thresholds
DISCOUNT_TIER_LOW = 25
DISCOUNT_TIER_HIGH = 50

# ============== STORE DEFAULTS ==============
DEFAULT_CURRENCY = "AED"
DEFAULT_DELIVERY_CHARGE = 25.0
DEFAULT_FREE_DELIVERY_THRESHOLD = 70.0
DEFAULT_DISCOUNT_150_THRESHOLD = 150.0
DEFAULT_DISCOUNT_200_THRESHOLD = 200.0
DEFAULT_STORE_NAME = "Store"

# ============== CACHE TTL (seconds) ==============
SETTINGS_CACHE_TTL = 60

# ============== CHECKOUT ==============
WHATSAPP_BASE_URL = "https://wa.me"

# ============== HTTP ==============
CLIENT_ID_HEADER = "X-Client-Id"
BACKEND_TIMEOUT_SECONDS = 10

# ============== TIME (seconds) ==============
SECONDS_PER_DAY = 86400
