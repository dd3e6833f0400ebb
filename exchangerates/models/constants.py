"""Domain constants for validation."""

BASE_CURRENCY = "EUR"
CURRENCY_PATTERN = r"^[A-Z]{3}$"
