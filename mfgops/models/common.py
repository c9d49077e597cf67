import secrets
import string


def generate_custom_id(prefix: str, length: int = 8) -> str:
    random_part = ''.join(secrets.choice(string.ascii_uppercase)
                          for _ in range(length))
    return f"{prefix}-{random_part}"


def enum_values(enum_cls):
    """Persist str enums by value ("in-stock") rather than by member name."""
    return [member.value for member in enum_cls]
