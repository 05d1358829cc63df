from utils.security import DUMMY_PASSWORD_HASH, hash_password, verify_password


def test_hash_verify_round_trip():
    digest = hash_password("password123")
    assert digest != "password123"
    assert verify_password("password123", digest) is True


def test_verify_rejects_other_password():
    assert verify_password("password123", hash_password("password124")) is False


def test_hashes_are_salted():
    assert hash_password("same-password") != hash_password("same-password")


def test_verify_malformed_hash_is_false():
    assert verify_password("password123", "not-a-hash") is False
    assert verify_password("password123", "") is False


def test_dummy_hash_matches_nothing_obvious():
    assert DUMMY_PASSWORD_HASH.startswith("$argon2")
    assert verify_password("", DUMMY_PASSWORD_HASH) is False
    assert verify_password("password123", DUMMY_PASSWORD_HASH) is False
