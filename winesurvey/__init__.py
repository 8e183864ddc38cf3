import logging

from flask import Flask, jsonify, request
from flask_cors import CORS

from .config import config
from .extensions import db


def configure_logging(level):
    logging.basicConfig(
        level=getattr(logging, str(level).upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def create_app(config_name="default", create_tables=True):
    app = Flask(__name__)
    app.config.from_object(config[config_name])
    app.url_map.strict_slashes = False  # avoid 308 redirects on trailing slashes
    configure_logging(app.config["LOG_LEVEL"])

    CORS(app, origins=app.config["CORS_ORIGINS"])
    db.init_app(app)

    from .routes.analytics import bp as analytics_bp
    from .routes.export import bp as export_bp
    from .routes.survey import bp as survey_bp

    app.register_blueprint(survey_bp)
    app.register_blueprint(analytics_bp)
    app.register_blueprint(export_bp)

    @app.get("/api/v1/health")
    def health():
        return {"status": "ok"}

    # every /api/* error is JSON so the form never has to parse an HTML page
    @app.errorhandler(404)
    def _404(e):
        if request.path.startswith("/api/"):
            return jsonify({"error": "not found", "path": request.path}), 404
        return e

    @app.errorhandler(405)
    def _405(e):
        if request.path.startswith("/api/"):
            return jsonify({"error": "method not allowed", "path": request.path}), 405
        return e

    if create_tables:
        with app.app_context():
            db.create_all()
    return app
