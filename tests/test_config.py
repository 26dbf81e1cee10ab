from config import engine_options_for, normalize_database_url


def test_postgres_urls_use_psycopg_and_ssl():
    assert normalize_database_url("postgres://u:p@host/db") == "postgresql+psycopg://u:p@host/db?sslmode=require"
    assert (
        normalize_database_url("postgresql+psycopg2://u:p@host/db?x=1")
        == "postgresql+psycopg://u:p@host/db?x=1&sslmode=require"
    )


def test_sqlite_urls_pass_through():
    assert normalize_database_url("sqlite:///tmp/app.db") == "sqlite:///tmp/app.db"
    assert normalize_database_url(None) is None


def test_engine_options_depend_on_driver():
    assert "check_same_thread" in engine_options_for("sqlite:///x.db")["connect_args"]
    assert "keepalives" in engine_options_for("postgresql+psycopg://h/db")["connect_args"]
