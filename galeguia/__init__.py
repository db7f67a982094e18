"""
Main application initialization module.
Sets up the Flask app for the course administration API.
"""
from flask import Flask
from flask_cors import CORS
from dotenv import load_dotenv
import logging


# Load environment variables
load_dotenv()


def create_app(config_name=None, client_factory=None):
    """
    Create and configure the Flask application
    @param config_name: str - Name of the configuration object to load (dotted path), defaults to Config
    @param client_factory: callable - (access_token, refresh_token) -> Supabase client;
                           defaults to the real client built from the environment
    @returns: Flask - Configured Flask application instance
    """
    from .config import Config

    app = Flask(__name__)
    app.config.from_object(config_name or Config)

    if client_factory is None:
        from .utils.supabase_client import create_user_client
        Config.validate()
        client_factory = create_user_client
    app.config['SUPABASE_CLIENT_FACTORY'] = client_factory

    CORS(app, resources={
        r"/api/*": {
            "origins": app.config['CORS_ORIGINS'],
            "allow_headers": ["Authorization", "Content-Type", "X-Refresh-Token"]
        }
    })

    # Register blueprints with error handling
    try:
        from .controllers.auth_controller import auth_bp
        app.register_blueprint(auth_bp, url_prefix='/api')
        logging.info("Successfully registered auth blueprint")

        from .controllers.course_controller import course_bp
        app.register_blueprint(course_bp, url_prefix='/api')
        logging.info("Successfully registered course blueprint")

        from .controllers.content_controller import content_bp
        app.register_blueprint(content_bp, url_prefix='/api')
        logging.info("Successfully registered content blueprint")

        from .controllers.enrollment_controller import enrollment_bp
        app.register_blueprint(enrollment_bp, url_prefix='/api')
        logging.info("Successfully registered enrollment blueprint")

        from .controllers.admin_controller import admin_bp
        app.register_blueprint(admin_bp, url_prefix='/api')
        logging.info("Successfully registered admin blueprint")

        # Add a simple health check route
        @app.route('/health', methods=['GET'])
        def health_check():
            return {'status': 'healthy'}, 200

    except Exception as e:
        logging.error(f"Error registering blueprints: {str(e)}")
        raise

    return app
