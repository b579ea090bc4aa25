from marto.app import create_app
from marto.models.database import db

app = create_app()


if __name__ == "__main__":
    try:
        app.run(host="0.0.0.0", port=app.config["PORT"])
    finally:
        with app.app_context():
            db.engine.dispose()
