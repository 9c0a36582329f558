# config.py


class Config:
    DEBUG = False
    TESTING = False
    UPLOAD_FOLDER = "uploads"               # relative paths are anchored to the instance folder
    MAX_CONTENT_LENGTH = 20 * 1024 * 1024   # 20 MiB upload cap
    ALLOWED_ORIGINS = "*"
    DELETE_PASS = None


class ProductionConfig(Config):
    pass


class DevelopmentConfig(Config):
    DEBUG = True


class TestingConfig(Config):
    TESTING = True
    DEBUG = True
