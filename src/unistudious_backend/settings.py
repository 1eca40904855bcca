import os
import threading
from dotenv import load_dotenv

load_dotenv()

def _flag(value: str) -> bool:
    return value.lower() in ["true", "1", "yes", "on"]

class BackendSettings:
    _instance = None
    _lock = threading.Lock()

    def __init__(self):
        self.DEBUG_MODE = os.environ.get("DEBUG_MODE","development")
        self.LOG_LEVEL = os.environ.get("LOG_LEVEL","INFO")

        # Database
        self.DATABASE_URL = os.environ.get("DATABASE_URL", None)
        self.POSTGRES_HOST = os.environ.get("POSTGRES_HOST","localhost")
        self.POSTGRES_PORT = os.environ.get("POSTGRES_PORT","5432")
        self.POSTGRES_USER = os.environ.get("POSTGRES_USER","postgres")
        self.POSTGRES_PASSWORD = os.environ.get("POSTGRES_PASSWORD","")
        self.POSTGRES_DB = os.environ.get("POSTGRES_DB","unistudious")

        # Authentication
        self.JWT_SECRET_KEY = os.environ.get("JWT_SECRET_KEY", None)
        self.JWT_ALGORITHM = os.environ.get("JWT_ALGORITHM","HS256")
        self.ACCESS_TOKEN_EXPIRE_MINUTES = int(os.environ.get("ACCESS_TOKEN_EXPIRE_MINUTES", 60 * 24 * 7))
        self.AUTH_COOKIE_NAME = os.environ.get("AUTH_COOKIE_NAME","token")
        self.AUTH_COOKIE_SECURE = _flag(os.environ.get("AUTH_COOKIE_SECURE","false"))

        # Administrator account seeded at provisioning time
        self.ADMIN_EMAIL = os.environ.get("ADMIN_EMAIL", None)
        self.ADMIN_PASSWORD = os.environ.get("ADMIN_PASSWORD", None)
        self.ADMIN_USERNAME = os.environ.get("ADMIN_USERNAME","admin")

        self.CORS_ORIGINS = [origin.strip() for origin in os.environ.get("CORS_ORIGINS","*").split(",") if origin.strip()]

    def __new__(cls):
        if cls._instance is None:
            with cls._lock:
                if cls._instance is None:
                    cls._instance = super(BackendSettings, cls).__new__(cls)
        return cls._instance

    @property
    def database_url(self) -> str:
        if self.DATABASE_URL:
            return self.DATABASE_URL
        return f"postgresql://{self.POSTGRES_USER}:{self.POSTGRES_PASSWORD}@{self.POSTGRES_HOST}:{self.POSTGRES_PORT}/{self.POSTGRES_DB}"

settings = BackendSettings()
