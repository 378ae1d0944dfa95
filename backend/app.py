import logging

from flask import Flask
from flask_cors import CORS
from flask_jwt_extended import JWTManager

from models import db
from auth.routes import auth_bp
from copilot.routes import copilot_bp
from errors import register_error_handlers
from insights.routes import insights_bp
from ledger.routes import ledger_bp
from ledger.store import FinanceStore
from statements.routes import statements_bp
from config import Config


def create_app(overrides=None):
    app = Flask(__name__)
    app.config.from_object(Config)
    if overrides:
        app.config.update(overrides)

    logging.basicConfig(
        level=app.config.get("LOG_LEVEL", "INFO"),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    CORS(app)

    db.init_app(app)
    with app.app_context():
        db.create_all()
    JWTManager(app)
    FinanceStore(app)

    register_error_handlers(app)

    app.register_blueprint(auth_bp)
    app.register_blueprint(ledger_bp)
    app.register_blueprint(insights_bp)
    app.register_blueprint(statements_bp)
    app.register_blueprint(copilot_bp)

    return app


if __name__ == "__main__":
    create_app().run(debug=True)
