from flask import jsonify
from werkzeug.exceptions import HTTPException

from marto.errors import AppError


def register_error_handlers(app):
    """Render every failure as a JSON ``{error, details?}`` body."""

    @app.errorhandler(AppError)
    def handle_app_error(error):
        return jsonify(error.to_dict()), error.status_code

    @app.errorhandler(HTTPException)
    def handle_http_error(error):
        return jsonify({"error": error.description or error.name}), error.code

    @app.errorhandler(Exception)
    def handle_unexpected_error(error):
        app.logger.error(f"Internal Server Error: {error}", exc_info=True)
        body = {"error": "Internal server error"}
        if app.debug:
            body["details"] = str(error)
        return jsonify(body), 500
