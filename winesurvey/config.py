import os
from dotenv import load_dotenv
load_dotenv()


def _database_url():
    url = os.getenv("DATABASE_URL")
    if not url:
        return "sqlite:///winesurvey.db"
    # Heroku/Railway still hand out postgres:// which SQLAlchemy 1.4+ rejects
    if url.startswith("postgres://"):
        url = url.replace("postgres://", "postgresql://", 1)
    return url


class Config:
    """Base configuration class"""

    SECRET_KEY = os.getenv("SECRET_KEY", "dev-key")

    SQLALCHEMY_DATABASE_URI = _database_url()
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    SQLALCHEMY_ENGINE_OPTIONS = {"pool_pre_ping": True}

    CORS_ORIGINS = os.getenv("CORS_ORIGINS", "*").split(",")
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

    # GET /api/survey returns at most this many responses
    SURVEY_LIST_LIMIT = int(os.getenv("SURVEY_LIST_LIMIT", 100))

    # Reports
    REPORT_OUTPUT_DIR = os.getenv("REPORT_OUTPUT_DIR", ".")
    MAP_JITTER_DEGREES = float(os.getenv("MAP_JITTER_DEGREES", 0.01))

    # Online geocoding (ViaCEP + Nominatim)
    VIACEP_URL = os.getenv("VIACEP_URL", "https://viacep.com.br/ws")
    NOMINATIM_URL = os.getenv("NOMINATIM_URL", "https://nominatim.openstreetmap.org/search")
    VIACEP_TIMEOUT = float(os.getenv("VIACEP_TIMEOUT", 5))
    NOMINATIM_TIMEOUT = float(os.getenv("NOMINATIM_TIMEOUT", 10))
    GEOCODE_DELAY_SECONDS = float(os.getenv("GEOCODE_DELAY_SECONDS", 1.0))
    GEOCODE_USER_AGENT = os.getenv("GEOCODE_USER_AGENT", "PesquisaVinhos/1.0 (contato@example.com)")


class DevelopmentConfig(Config):
    """Development configuration"""
    DEBUG = True
    TESTING = False


class ProductionConfig(Config):
    """Production configuration"""
    DEBUG = False
    TESTING = False

    SQLALCHEMY_ENGINE_OPTIONS = {
        'pool_timeout': 20,
        'pool_recycle': -1,
        'pool_pre_ping': True
    }

    SESSION_COOKIE_SECURE = True
    SESSION_COOKIE_HTTPONLY = True
    SESSION_COOKIE_SAMESITE = 'Lax'


class TestingConfig(Config):
    """Testing configuration"""
    TESTING = True
    SQLALCHEMY_DATABASE_URI = 'sqlite:///:memory:'
    GEOCODE_DELAY_SECONDS = 0.0
    REPORT_OUTPUT_DIR = os.getenv("REPORT_OUTPUT_DIR", "reports-test")


config = {
    'development': DevelopmentConfig,
    'production': ProductionConfig,
    'testing': TestingConfig,
    'default': DevelopmentConfig
}
