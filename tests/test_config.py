import pytest

from videosgo.config import DatabaseConfig, RedisConfig, load


def test_defaults_without_file_or_environment(tmp_path):
    cfg = load(tmp_path / "missing.env", environ={})
    assert cfg.app.env == "development"
    assert cfg.app.port == "8080"
    assert cfg.database.host == "localhost"
    assert cfg.database.port == "5432"
    assert cfg.database.name == "videosgo"
    assert cfg.database.sslmode == "disable"
    assert cfg.database.max_idle_conns == 10
    assert cfg.database.max_open_conns == 100
    assert cfg.redis.port == "6379"
    assert cfg.redis.db == 0
    assert cfg.jwt.expire_hours == 72
    assert cfg.security.cors_origins == []


def test_env_file_overrides_defaults(tmp_path):
    env_file = tmp_path / ".env"
    env_file.write_text("DB_HOST=dbserver\nAPP_PORT=9000\nJWT_EXPIRE_HOURS=12\n", encoding="utf-8")
    cfg = load(env_file, environ={})
    assert cfg.database.host == "dbserver"
    assert cfg.app.port == "9000"
    assert cfg.jwt.expire_hours == 12
    assert cfg.database.user == "postgres"


def test_environment_overrides_file(tmp_path):
    env_file = tmp_path / ".env"
    env_file.write_text("DB_HOST=filehost\n", encoding="utf-8")
    cfg = load(env_file, environ={"DB_HOST": "envhost", "REDIS_DB": "3"})
    assert cfg.database.host == "envhost"
    assert cfg.redis.db == 3


def test_empty_environment_value_is_ignored(tmp_path):
    env_file = tmp_path / ".env"
    env_file.write_text("APP_ENV=staging\n", encoding="utf-8")
    cfg = load(env_file, environ={"APP_ENV": ""})
    assert cfg.app.env == "staging"


def test_cors_origins_split_on_commas(tmp_path):
    cfg = load(tmp_path / "none.env", environ={"CORS_ALLOWED_ORIGINS": "https://a.example.com,https://b.example.com"})
    assert cfg.security.cors_origins == ["https://a.example.com", "https://b.example.com"]


def test_cors_origins_from_file(tmp_path):
    env_file = tmp_path / ".env"
    env_file.write_text("CORS_ALLOWED_ORIGINS=https://a.example.com\n", encoding="utf-8")
    cfg = load(env_file, environ={})
    assert cfg.security.cors_origins == ["https://a.example.com"]


def test_invalid_integer_raises(tmp_path):
    with pytest.raises(ValueError, match="JWT_EXPIRE_HOURS"):
        load(tmp_path / "none.env", environ={"JWT_EXPIRE_HOURS": "many"})


def test_dsn_contains_every_field():
    password = "password"
    db = DatabaseConfig(host="h", port="1", user="u", password=password, name="n", sslmode="require")
    assert db.dsn() == "host=h port=1 user=u password=password dbname=n sslmode=require"


def test_loaded_dsn_uses_loaded_values(tmp_path):
    cfg = load(tmp_path / "none.env", environ={"DB_NAME": "catalog"})
    dsn = cfg.database.dsn()
    assert "dbname=catalog" in dsn
    assert "host=localhost" in dsn


def test_redis_addr():
    assert RedisConfig(host="cache", port="7000").addr() == "cache:7000"