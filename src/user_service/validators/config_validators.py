def to_uppercase(value: str | None) -> str | None:
    """
    Converts a string to uppercase if it's not None.
    """
    if value is None:
        return None
    return value.strip().upper()


def to_lowercase(value: str | None) -> str | None:
    """
    Converts a string to lowercase if it's not None.
    """
    if value is None:
        return None
    return value.strip().lower()


def normalize_api_prefix(value: str | None) -> str:
    """
    Normalize a router prefix so it always starts with "/" and never ends with one.

    "api/users/" -> "/api/users", "" or None -> "" (routes mounted at the root).
    """
    if not value:
        return ""
    cleaned = "/" + value.strip().strip("/")
    return "" if cleaned == "/" else cleaned
