"""API key validation for admin endpoints."""

import hmac


def parse_api_keys(raw: str | None) -> list[str]:
    """Split a comma-separated ADMIN_API_KEY value into individual keys.

    Args:
        raw: Raw environment value, e.g. "key-a, key-b"

    Returns:
        list: Non-empty, stripped keys in their original order
    """
    if not raw:
        return []
    return [key.strip() for key in raw.split(",") if key.strip()]


class APIKeyValidator:
    """Validates X-API-Key values against the configured admin keys.

    Comparison is constant-time per key so response timing does not reveal
    how much of a key matched.
    """

    def __init__(self, api_keys: list[str]) -> None:
        """Initialize validator with the accepted keys.

        Args:
            api_keys: Accepted API key strings

        Raises:
            ValueError: If api_keys is empty
        """
        if not api_keys:
            raise ValueError("At least one API key must be provided")

        self._keys = [key.encode() for key in dict.fromkeys(api_keys)]

    def validate(self, api_key: str) -> bool:
        """Check whether an API key is one of the configured keys.

        Args:
            api_key: The API key presented by the caller

        Returns:
            bool: True if valid, False otherwise
        """
        candidate = api_key.encode()
        matched = False
        for key in self._keys:
            matched |= hmac.compare_digest(candidate, key)
        return matched
