import logging
import os

from dotenv import load_dotenv

load_dotenv()


class Settings:
    # ---------------------
    # Database
    # ---------------------
    DATABASE_URL = os.getenv("DATABASE_URL")
    DATABASE_NAME = os.getenv("DATABASE_NAME")

    # ---------------------
    # Server & Logging
    # ---------------------
    PORT = int(os.getenv("PORT", 8000))
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
    CORS_ORIGINS = [o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",") if o.strip()]

    # ---------------------
    # Domain
    # ---------------------
    BCRYPT_ROUNDS = int(os.getenv("BCRYPT_ROUNDS", 10))
    PASS_MARK = float(os.getenv("PASS_MARK", 50))


settings = Settings()


def configure_logging(level=None):
    root = logging.getLogger()
    if root.handlers:
        return
    root.setLevel(level or settings.LOG_LEVEL)
    console = logging.StreamHandler()
    console.setFormatter(logging.Formatter("[%(asctime)s] %(levelname)s in %(module)s: %(message)s"))
    root.addHandler(console)
