import os

BASE_DIR = os.path.dirname(os.path.abspath(__file__))


def _env_bool(name: str, default: bool = False) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return str(value).strip().lower() in {"1", "true", "yes", "on"}


def _env_float(name: str, default: float) -> float:
    value = os.getenv(name)
    if value is None or not str(value).strip():
        return default
    try:
        return float(value)
    except (TypeError, ValueError):
        return default


def normalize_database_url(url: str | None) -> str | None:
    """Normaliza a DATABASE_URL para SQLAlchemy + psycopg (v3).

    URLs sqlite passam sem alteração.
    """
    if not url:
        return None

    # Alguns provedores usam "postgres://", SQLAlchemy prefere "postgresql://"
    if url.startswith("postgres://"):
        url = url.replace("postgres://", "postgresql://", 1)

    # Se vier apontando para psycopg2, converte para psycopg
    if url.startswith("postgresql+psycopg2://"):
        url = url.replace("postgresql+psycopg2://", "postgresql+psycopg://", 1)

    if url.startswith("postgresql://"):
        url = url.replace("postgresql://", "postgresql+psycopg://", 1)

    # Garante SSL no Postgres hospedado
    if url.startswith("postgresql+psycopg://") and "sslmode=" not in url:
        sep = "&" if "?" in url else "?"
        url = f"{url}{sep}sslmode=require"

    return url


def engine_options_for(url: str) -> dict:
    options = {"pool_pre_ping": True}
    if url.startswith("postgresql"):
        options["pool_recycle"] = int(os.getenv("DB_POOL_RECYCLE", "280"))
        options["pool_timeout"] = int(os.getenv("DB_POOL_TIMEOUT", "30"))
        options["connect_args"] = {
            "keepalives": 1,
            "keepalives_idle": 30,
            "keepalives_interval": 10,
            "keepalives_count": 5,
        }
    else:
        options["connect_args"] = {
            "check_same_thread": False,
            "timeout": int(os.getenv("SQLITE_TIMEOUT", "30")),
        }
    return options


class Config:
    APP_ENV = (
        os.getenv("APP_ENV")
        or os.getenv("FLASK_ENV")
        or os.getenv("ENV")
        or "development"
    ).lower()
    IS_PRODUCTION = APP_ENV in {"prod", "production"}

    def _is_weak_secret(value: str) -> bool:
        if not value:
            return True
        if value == "dev-secret-change-me":
            return True
        if len(value) < 32:
            return True
        return False

    # Essencial para sessão/login
    SECRET_KEY = os.getenv("SECRET_KEY", "")
    if not SECRET_KEY:
        SECRET_KEY = "dev-secret-change-me"
    if IS_PRODUCTION and _is_weak_secret(SECRET_KEY):
        raise RuntimeError("SECRET_KEY ausente ou fraco em produção.")

    # Banco:
    # - Local: sqlite
    # - Produção: DATABASE_URL (Postgres)
    DATABASE_URL = normalize_database_url(os.getenv("DATABASE_URL"))
    SQLALCHEMY_DATABASE_URI = DATABASE_URL or "sqlite:///" + os.path.join(BASE_DIR, "database.db")
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    SQLALCHEMY_ENGINE_OPTIONS = engine_options_for(SQLALCHEMY_DATABASE_URI)

    DEBUG = _env_bool("DEBUG", default=not IS_PRODUCTION)
    if IS_PRODUCTION:
        DEBUG = False
    TESTING = _env_bool("TESTING", default=False)

    SESSION_COOKIE_HTTPONLY = True
    SESSION_COOKIE_SAMESITE = os.getenv("SESSION_COOKIE_SAMESITE", "Lax")
    SESSION_COOKIE_SECURE = IS_PRODUCTION

    LOG_LEVEL = (os.getenv("LOG_LEVEL", "INFO") or "INFO").strip().upper()

    # Projeção de patrimônio (10 anos)
    # Taxas anuais: crescimento dos ativos e redução das dívidas.
    PROJECTION_ASSET_GROWTH_RATE = _env_float("PROJECTION_ASSET_GROWTH_RATE", 0.12)
    PROJECTION_LIABILITY_REDUCTION_RATE = _env_float("PROJECTION_LIABILITY_REDUCTION_RATE", 0.10)
    PROJECTION_YEARS = int(os.getenv("PROJECTION_YEARS", "10"))
    # Janela (em dias) usada para amostrar receitas/despesas mensais
    PROJECTION_SAMPLE_DAYS = int(os.getenv("PROJECTION_SAMPLE_DAYS", "30"))
