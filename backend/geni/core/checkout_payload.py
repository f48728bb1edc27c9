"""Checkout Payload: read the purchaser from a Polar checkout document.

Invariants:
    - Never raises on malformed payloads; missing data yields None / False
    - customer_email wins over customer.email when both are present
"""

CHECKOUT_SUCCEEDED = "succeeded"


def _non_empty_str(value: object) -> str | None:
    if isinstance(value, str) and value:
        return value
    return None


def extract_email_from_checkout(checkout: object) -> str | None:
    """Purchaser email from a checkout payload, or None."""
    if not isinstance(checkout, dict):
        return None

    # Polar's REST API uses snake_case; the JS SDK exposed camelCase
    for key in ("customer_email", "customerEmail"):
        email = _non_empty_str(checkout.get(key))
        if email:
            return email

    customer = checkout.get("customer")
    if isinstance(customer, dict):
        return _non_empty_str(customer.get("email"))
    return None


def is_checkout_succeeded(checkout: object) -> bool:
    return isinstance(checkout, dict) and checkout.get("status") == CHECKOUT_SUCCEEDED
