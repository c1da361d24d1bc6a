import os
from dotenv import load_dotenv
load_dotenv()
from flask import Flask, jsonify
from flask_cors import CORS
from flask_migrate import Migrate
from flask_session import Session
from config import config_dict, CurrentConfig
from models import db
from routes.quizzes import quiz_bp
from utils.logging_config import setup_logging

migrate = Migrate()
sess = Session()


def create_app(config_class=None):
    app = Flask(__name__)
    app.config.from_object(config_class or CurrentConfig)

    setup_logging(app)
    app.logger.info("Loaded DB URI: %s", app.config.get("SQLALCHEMY_DATABASE_URI"))

    CORS(app, resources={r"/api/*": {"origins": app.config["CORS_ORIGINS"], "supports_credentials": True}})
    sess.init_app(app)

    db.init_app(app)
    migrate.init_app(app, db)

    app.register_blueprint(quiz_bp, url_prefix='/api/quiz')

    @app.route('/')
    def home():
        return jsonify({"service": "quiz-attempt-engine", "status": "ok"})

    return app


app = create_app(config_dict.get(os.environ.get("FLASK_ENV", "production")))

if __name__ == '__main__':
    app.run(debug=app.config.get('DEBUG', False))
