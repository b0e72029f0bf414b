import os

BASE_DIR = os.path.abspath(os.path.dirname(__file__))

class Config:
    # Secrets
    SECRET_KEY = os.getenv("SECRET_KEY", "dev-only-change-me")

    # SQLite database file stored next to the app as doctors_portal.db
    SQLALCHEMY_DATABASE_URI = os.getenv(
        "DATABASE_URL",
        "sqlite:///" + os.path.join(BASE_DIR, "doctors_portal.db")
    )
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # Bearer tokens handed out by PUT /user/<email>
    ACCESS_TOKEN_SECRET = os.getenv("ACCESS_TOKEN_SECRET", "dev-only-token-secret")
    ACCESS_TOKEN_ALGORITHM = "HS256"
    ACCESS_TOKEN_LIFETIME_SECONDS = int(os.getenv("ACCESS_TOKEN_LIFETIME_SECONDS", str(24 * 60 * 60)))

    # Stripe (payment intents)
    STRIPE_SECRET_KEY = os.getenv("STRIPE_SECRET_KEY")
    PAYMENT_CURRENCY = "usd"

    # Email (SMTP)
    SMTP_HOST = os.getenv("SMTP_HOST")
    SMTP_PORT = int(os.getenv("SMTP_PORT", "587"))
    SMTP_USERNAME = os.getenv("SMTP_USERNAME")
    SMTP_PASSWORD = os.getenv("SMTP_PASSWORD")
    SMTP_FROM_EMAIL = os.getenv("SMTP_FROM_EMAIL")
    SMTP_USE_TLS = os.getenv("SMTP_USE_TLS", "true").lower() == "true"
    MAIL_FROM_NAME = os.getenv("MAIL_FROM_NAME", "Doctors Portal")
    REMINDER_URL = os.getenv("REMINDER_URL", "https://google.com")

    # Background notification workers
    NOTIFY_MAX_WORKERS = int(os.getenv("NOTIFY_MAX_WORKERS", "4"))

    # Browser client origins, comma separated; "*" allows any origin
    CORS_ORIGINS = [o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",") if o.strip()]

    # Basic app settings
    PORT = int(os.getenv("PORT", "5000"))
    DEBUG = False
