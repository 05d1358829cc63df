from api.config import DevelopmentConfig, ProductionConfig, TestingConfig, get_config


def test_testing_config_uses_a_shared_file_database():
    assert ":memory:" not in TestingConfig.DATABASE_URL
    assert TestingConfig.DATABASE_URL.startswith("sqlite:///")


def test_get_config_by_name():
    assert get_config("testing") is TestingConfig
    assert get_config("TEST") is TestingConfig
    assert get_config("production") is ProductionConfig
    assert get_config("dev") is DevelopmentConfig
