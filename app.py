import logging

import click
from flask import Flask
from flask_login import LoginManager
from dotenv import load_dotenv
from sqlalchemy.exc import OperationalError

# Carrega variaveis de ambiente de .env (desenvolvimento local)
load_dotenv()

from config import Config
from models.extensions import db
from models.transaction_model import init_db
from models.user_model import User
from routes.projection_routes import projection_bp
from services.projection_engine import (
    DEFAULT_SAMPLE_DAYS,
    initialize_user_projections,
    projection_params_from_config,
    recalculate_user_projections,
)
from services.projection_repository import SqlAlchemyProjectionRepository

logger = logging.getLogger(__name__)


def _configure_logging(app: Flask) -> None:
    level = getattr(logging, str(app.config.get("LOG_LEVEL", "INFO")).upper(), logging.INFO)
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    app.logger.setLevel(level)


def recalc_all_projections(app: Flask, user_id: int | None = None) -> tuple[int, int]:
    """Recalcula a projeção de um usuário (ou de todos). Retorna (ok, falhas)."""
    params = projection_params_from_config(app.config)
    sample_days = int(app.config.get("PROJECTION_SAMPLE_DAYS", DEFAULT_SAMPLE_DAYS))

    with app.app_context():
        if user_id is not None:
            user_ids = [user_id]
        else:
            user_ids = [row.id for row in db.session.query(User.id).order_by(User.id.asc()).all()]

        repo = SqlAlchemyProjectionRepository(db.session)
        ok = 0
        failed = 0
        for uid in user_ids:
            result = recalculate_user_projections(repo, uid, params=params, sample_days=sample_days)
            if result.success:
                ok += 1
            else:
                failed += 1
        return ok, failed


def create_app(config_class=Config) -> Flask:
    app = Flask(__name__)
    app.config.from_object(config_class)
    _configure_logging(app)

    # DB
    init_db(app)

    # Login manager (o fluxo de login fica fora deste serviço)
    login_manager = LoginManager()
    login_manager.init_app(app)

    @login_manager.user_loader
    def load_user(user_id):
        if not user_id:
            return None

        try:
            return db.session.get(User, int(user_id))
        except OperationalError:
            # Conexao SSL instavel em pools remotos: tenta limpar e reabrir.
            db.session.rollback()
            db.session.remove()
            db.engine.dispose()
            try:
                return db.session.get(User, int(user_id))
            except OperationalError:
                db.session.rollback()
                return None

    app.register_blueprint(projection_bp)

    @app.cli.command("recalc-projections")
    @click.option("--user-id", type=int, default=None, help="Recalcula somente este usuario.")
    def recalc_projections_command(user_id):
        """Recalcula as projecoes de patrimonio."""
        ok, failed = recalc_all_projections(app, user_id)
        click.echo(f"Projecoes recalculadas: {ok} ok, {failed} com falha.")
        if failed:
            raise SystemExit(1)

    @app.cli.command("init-user")
    @click.option("--user-id", type=int, required=True, help="Usuario recem-criado.")
    def init_user_command(user_id):
        """Cria o saldo zerado e a primeira projecao de uma conta nova."""
        result = initialize_user_projections(
            SqlAlchemyProjectionRepository(db.session),
            user_id,
            params=projection_params_from_config(app.config),
            sample_days=int(app.config.get("PROJECTION_SAMPLE_DAYS", DEFAULT_SAMPLE_DAYS)),
        )
        if not result.success:
            click.echo(f"Falha ao inicializar usuario {user_id}: {result.error.code}.")
            raise SystemExit(1)
        click.echo(f"Usuario {user_id} inicializado com {len(result.projections)} anos de projecao.")

    @app.get("/healthz")
    def healthz():
        return "ok", 200

    return app


if __name__ == "__main__":
    create_app().run(debug=True, use_reloader=False)
