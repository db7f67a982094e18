"""
Configuration settings for the application
"""
import os
from dotenv import load_dotenv

# Load environment variables
load_dotenv()

# Environment settings
ENVIRONMENT = os.getenv('ENVIRONMENT', 'development')
DEBUG = ENVIRONMENT == 'development'

BACKEND_URLS = {
    'development': os.getenv('DEVELOPMENT_BACKEND_URL', 'http://localhost:5000'),
    'production': os.getenv('PRODUCTION_BACKEND_URL', 'https://galeguia-admin.onrender.com')
}
BACKEND_URL = BACKEND_URLS.get(ENVIRONMENT, BACKEND_URLS['development'])

# Module-level configuration variables
SUPABASE_URL = os.getenv('SUPABASE_URL')
SUPABASE_KEY = os.getenv('SUPABASE_ANON_KEY')

# Storage settings
STORAGE_BUCKET = os.getenv('STORAGE_BUCKET', 'course-materials')
STORAGE_CACHE_CONTROL = os.getenv('STORAGE_CACHE_CONTROL', '3600')

# Auth settings
PASSWORD_RESET_REDIRECT_URL = os.getenv(
    'PASSWORD_RESET_REDIRECT_URL', f'{BACKEND_URL}/reset-password'
)

# Read courses, modules and lessons through the row-level-checked remote functions
USE_SECURE_RPC = os.getenv('USE_SECURE_RPC', 'true').lower() in ('1', 'true', 'yes')

CORS_ORIGINS = [
    origin.strip()
    for origin in os.getenv('CORS_ORIGINS', 'http://localhost:5173').split(',')
    if origin.strip()
]


class Config:
    """
    Configuration class for the application.
    Contains all necessary settings and environment variables.
    """

    # Backend
    SUPABASE_URL = SUPABASE_URL
    SUPABASE_KEY = SUPABASE_KEY

    # Storage
    STORAGE_BUCKET = STORAGE_BUCKET
    STORAGE_CACHE_CONTROL = STORAGE_CACHE_CONTROL

    # Auth
    PASSWORD_RESET_REDIRECT_URL = PASSWORD_RESET_REDIRECT_URL

    # Data access
    USE_SECURE_RPC = USE_SECURE_RPC

    # Environment settings
    ENVIRONMENT = ENVIRONMENT
    DEBUG = DEBUG
    API_BASE_URL = BACKEND_URL
    CORS_ORIGINS = CORS_ORIGINS

    # Server settings
    HOST = os.getenv('HOST', '0.0.0.0')
    PORT = int(os.getenv('PORT', '5000'))
    MAX_CONTENT_LENGTH = 500 * 1024 * 1024  # lesson videos

    # Logging settings
    LOG_COLORS = {
        'DEBUG': 'cyan',
        'INFO': 'green',
        'WARNING': 'yellow',
        'ERROR': 'red',
        'CRITICAL': 'red,bg_white',
    }

    @classmethod
    def validate(cls) -> None:
        """
        Validate that all required configuration values are set.
        Raises ValueError if any required value is missing.
        """
        if not cls.SUPABASE_URL:
            raise ValueError("SUPABASE_URL environment variable is not set")
        if not cls.SUPABASE_KEY:
            raise ValueError("SUPABASE_ANON_KEY environment variable is not set")
