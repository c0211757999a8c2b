def normalize_email(email: str) -> str:
    """Lower-case an address so lookups and unique constraints ignore case."""
    return email.strip().lower()
