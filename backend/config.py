import os
from dotenv import load_dotenv

# load .env from backend folder
basedir = os.path.abspath(os.path.dirname(__file__))
load_dotenv(os.path.join(basedir, ".env"))


def _env_int(name: str, default: int) -> int:
    try:
        return int(os.getenv(name, default))
    except (TypeError, ValueError):
        return default


def _env_float(name: str, default: float) -> float:
    try:
        return float(os.getenv(name, default))
    except (TypeError, ValueError):
        return default


class Config:

    # -------------------------
    # Flask core
    # -------------------------
    SECRET_KEY = os.getenv("SECRET_KEY", "fallback-secret")
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

    # -------------------------
    # Database
    # -------------------------
    DB_USER = os.getenv("DB_USER")
    DB_PASSWORD = os.getenv("DB_PASSWORD")
    DB_HOST = os.getenv("DB_HOST")
    DB_PORT = os.getenv("DB_PORT")
    DB_NAME = os.getenv("DB_NAME")

    SQLALCHEMY_DATABASE_URI = os.getenv("SQLALCHEMY_DATABASE_URI")
    if not SQLALCHEMY_DATABASE_URI:
        if all([DB_USER, DB_PASSWORD, DB_HOST, DB_PORT, DB_NAME]):
            SQLALCHEMY_DATABASE_URI = (
                f"mysql+pymysql://{DB_USER}:{DB_PASSWORD}"
                f"@{DB_HOST}:{DB_PORT}/{DB_NAME}"
            )
        else:
            SQLALCHEMY_DATABASE_URI = f"sqlite:///{os.path.join(basedir, 'good_money.db')}"

    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # -------------------------
    # JWT
    # -------------------------
    JWT_SECRET_KEY = os.getenv("JWT_SECRET_KEY", SECRET_KEY)

    # -------------------------
    # Copilot (LLM)
    # -------------------------
    COPILOT_PROVIDER = os.getenv("COPILOT_PROVIDER", "together")  # together | groq | deepseek
    COPILOT_MODEL = os.getenv("COPILOT_MODEL")  # provider default when unset
    TOGETHER_API_KEY = os.getenv("TOGETHER_API_KEY")
    TOGETHER_BASE_URL = os.getenv("TOGETHER_BASE_URL", "https://api.together.xyz/v1")
    GROQ_API_KEY = os.getenv("GROQ_API_KEY")
    DEEPSEEK_API_KEY = os.getenv("DEEPSEEK_API_KEY")
    DEEPSEEK_BASE_URL = os.getenv("DEEPSEEK_BASE_URL", "https://api.deepseek.com")

    COPILOT_TEMPERATURE = _env_float("COPILOT_TEMPERATURE", 0.7)
    COPILOT_MAX_TOKENS = _env_int("COPILOT_MAX_TOKENS", 1000)
    COPILOT_TOP_P = _env_float("COPILOT_TOP_P", 0.95)
    COPILOT_FREQUENCY_PENALTY = _env_float("COPILOT_FREQUENCY_PENALTY", 0.0)
    COPILOT_PRESENCE_PENALTY = _env_float("COPILOT_PRESENCE_PENALTY", 0.0)
    COPILOT_TIMEOUT = _env_float("COPILOT_TIMEOUT", 60.0)

    # retry: up to N extra attempts, waiting base, 2*base, 4*base ... seconds
    COPILOT_MAX_RETRIES = _env_int("COPILOT_MAX_RETRIES", 3)
    COPILOT_RETRY_BASE_DELAY = _env_float("COPILOT_RETRY_BASE_DELAY", 1.0)

    COPILOT_HISTORY_LIMIT = _env_int("COPILOT_HISTORY_LIMIT", 10)

    # -------------------------
    # Statements (email)
    # -------------------------
    RESEND_API_KEY = os.getenv("RESEND_API_KEY")
    STATEMENT_FROM_EMAIL = os.getenv("STATEMENT_FROM_EMAIL", "Good Money <noreply@resend.dev>")
