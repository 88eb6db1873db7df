"""Fixed format grammars for the ``email`` and ``phone`` validators."""

import re

EMAIL_PATTERN = re.compile(r"^[a-zA-Z0-9_.+-]+@[a-zA-Z0-9-]+\.[a-zA-Z0-9-.]+\Z")

# Optional country code, area code (optionally parenthesized), exchange and
# subscriber number, with optional space, dot or dash separators.
US_PHONE_PATTERN = re.compile(r"^(\+\d{1,2}\s)?\(?\d{3}\)?[\s.-]?\d{3}[\s.-]?\d{4}\Z")


def is_email(value: object) -> bool:
    return isinstance(value, str) and EMAIL_PATTERN.search(value) is not None


def is_us_phone(value: object) -> bool:
    return isinstance(value, str) and US_PHONE_PATTERN.search(value) is not None
