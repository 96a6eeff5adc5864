def normalize_email(email: str) -> str:
    """Emails are matched case-insensitively and stored lower-cased"""
    return email.strip().lower()
