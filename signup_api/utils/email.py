import re

# RFC 5321 caps a forward-path address at 254 characters.
MAX_EMAIL_LENGTH = 254

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


def normalize_email(raw: str) -> str:
    """Trim surrounding whitespace and lowercase the address."""
    return raw.strip().lower()


def is_valid_email(email: str) -> bool:
    """Cheap shape check run before calling the provider.

    Accepts exactly one ``@`` with no whitespace anywhere and at least one
    ``.`` after it. The provider still performs its own validation; this only
    keeps obviously bad input from costing an upstream request.

    Args:
        email: Already-normalized email address.

    Returns:
        bool: True if the address is non-empty, short enough and well shaped.
    """
    if not email or len(email) > MAX_EMAIL_LENGTH:
        return False
    return EMAIL_PATTERN.fullmatch(email) is not None
