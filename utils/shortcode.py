"""Short codes printed on marker QR labels, e.g. "1A2B3C4D"."""
import secrets

SHORT_CODE_LENGTH = 8
SHORT_CODE_ALPHABET = "0123456789ABCDEFGHIJKLMNOPQRSTUVWXYZ"


def generate_short_code() -> str:
    return "".join(secrets.choice(SHORT_CODE_ALPHABET) for _ in range(SHORT_CODE_LENGTH))


def normalize_short_code(value: str) -> str:
    return (value or "").strip().upper()
