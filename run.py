"""
Application entry point with environment-specific server configuration
"""
import os
import sys
import logging
from galeguia import create_app
from galeguia.config import Config
from galeguia.logger import custom_logger


def setup_logging():
    """Configure root logging level"""
    logger = logging.getLogger()
    logger.setLevel(logging.DEBUG if Config.DEBUG else logging.INFO)


@custom_logger.log_function_call
def run_development_server():
    """Run the development server with debug mode and hot reloading"""
    try:
        app = create_app()

        # Watch all Python files in the package directory
        extra_files = []
        for dirname, dirs, files in os.walk('galeguia'):
            for filename in files:
                filename = os.path.join(dirname, filename)
                if os.path.isfile(filename):
                    extra_files.append(filename)

        custom_logger.logger.info("Starting development server with hot reloading enabled...")
        app.run(
            host=Config.HOST,
            port=Config.PORT,
            debug=True,
            use_reloader=False,
            extra_files=extra_files
        )
    except Exception as e:
        custom_logger.logger.error(f"Failed to start development server: {str(e)}")
        sys.exit(1)


@custom_logger.log_function_call
def run_production_server():
    """Run the production server based on the operating system"""
    try:
        app = create_app()
        bind = f"{Config.HOST}:{Config.PORT}"

        if sys.platform == 'win32':
            # Windows: Use waitress
            try:
                from waitress import serve
                custom_logger.logger.info("Starting production server with waitress...")
                serve(app, host=Config.HOST, port=Config.PORT)
            except ImportError:
                custom_logger.logger.error("Please install waitress for Windows production deployment")
                custom_logger.logger.error("Run: pip install 'galeguia-admin[prod]'")
                sys.exit(1)
        else:
            # Unix/Linux: Use gunicorn
            try:
                import gunicorn.app.base

                class StandaloneApplication(gunicorn.app.base.BaseApplication):
                    def __init__(self, app, options=None):
                        self.options = options or {}
                        self.application = app
                        super().__init__()

                    def load_config(self):
                        for key, value in self.options.items():
                            self.cfg.set(key.lower(), value)

                    def load(self):
                        return self.application

                options = {
                    'bind': bind,
                    'workers': int(os.getenv('WEB_CONCURRENCY', '4')),
                }

                custom_logger.logger.info("Starting production server with gunicorn...")
                StandaloneApplication(app, options).run()

            except ImportError:
                custom_logger.logger.error("Failed to import gunicorn")
                custom_logger.logger.error("Run: pip install 'galeguia-admin[prod]'")
                sys.exit(1)

    except Exception as e:
        custom_logger.logger.error(f"Failed to start production server: {str(e)}")
        sys.exit(1)


if __name__ == '__main__':
    setup_logging()
    if Config.ENVIRONMENT == 'production':
        run_production_server()
    else:
        run_development_server()
