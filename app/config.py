import os
from dotenv import load_dotenv

load_dotenv()


class Settings:
    # Database
    POSTGRES_CONNECTION_STRING: str = os.getenv("POSTGRES_CONNECTION_STRING", "")

    # Printful
    PRINTFUL_API_KEY: str = os.getenv("PRINTFUL_API_KEY", "")
    PRINTFUL_BASE_URL: str = os.getenv("PRINTFUL_BASE_URL", "https://api.printful.com")

    # Stripe
    STRIPE_SECRET_KEY: str = os.getenv("STRIPE_SECRET_KEY", "")
    STRIPE_BASE_URL: str = os.getenv("STRIPE_BASE_URL", "https://api.stripe.com")

    # Google Cloud Storage
    GCS_BUCKET_NAME: str = os.getenv("GCS_BUCKET_NAME", "printful-designs")
    GCS_ACCESS_TOKEN: str = os.getenv("GCS_ACCESS_TOKEN", "")
    GCS_UPLOAD_URL: str = os.getenv("GCS_UPLOAD_URL", "https://storage.googleapis.com/upload/storage/v1")
    GCS_PUBLIC_URL: str = os.getenv("GCS_PUBLIC_URL", "https://storage.googleapis.com")

    # Mockups
    MOCKUP_MAX_ATTEMPTS: int = int(os.getenv("MOCKUP_MAX_ATTEMPTS", "30"))
    MOCKUP_POLL_INTERVAL: float = float(os.getenv("MOCKUP_POLL_INTERVAL", "2.0"))

    # Retry / timeouts
    RETRY_MAX_RETRIES: int = int(os.getenv("RETRY_MAX_RETRIES", "3"))
    RETRY_INITIAL_DELAY: float = float(os.getenv("RETRY_INITIAL_DELAY", "1.0"))
    FULFILLMENT_TIMEOUT: float = float(os.getenv("FULFILLMENT_TIMEOUT", "120"))
    HTTP_TIMEOUT: float = float(os.getenv("HTTP_TIMEOUT", "30"))

    @property
    def DATABASE_URL(self) -> str:
        """Асинхронный URL для приложения"""
        return self.POSTGRES_CONNECTION_STRING.replace("postgres://", "postgresql+asyncpg://")

    @property
    def SYNC_DATABASE_URL(self) -> str:
        """Синхронный URL для Alembic"""
        return self.POSTGRES_CONNECTION_STRING.replace("postgres://", "postgresql://")


settings = Settings()
