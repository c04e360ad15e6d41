import os


class Config:
    """Base configuration. Shared across all environments."""

    # --- Outbound SMTP relay (e.g. SendGrid: host smtp.sendgrid.net, user "apikey") ---
    SMTP_HOST = os.environ.get("SMTP_HOST")
    SMTP_PORT = int(os.environ.get("SMTP_PORT") or 587)  # 465 = implicit TLS, else STARTTLS
    SMTP_USER = os.environ.get("SMTP_USER")
    SMTP_PASS = os.environ.get("SMTP_PASS")
    SMTP_TIMEOUT = float(os.environ.get("SMTP_TIMEOUT") or 30)

    # --- Addresses ---
    MAIL_FROM = os.environ.get("MAIL_FROM")  # must be a sender verified with the relay
    MAIL_TO = os.environ.get("MAIL_TO")      # business inbox

    # --- Display names ---
    MAIL_FROM_NAME = os.environ.get("MAIL_FROM_NAME", "Website Contact")
    AUTO_REPLY_FROM_NAME = os.environ.get(
        "AUTO_REPLY_FROM_NAME", "赛格鞋业 SAIGE Footwear"
    )

    REQUIRED = [
        "SMTP_HOST",
        "SMTP_USER",
        "SMTP_PASS",
        "MAIL_FROM",
        "MAIL_TO",
    ]

    @classmethod
    def validate(cls):
        """Fail fast if required env vars are missing."""
        missing = [v for v in cls.REQUIRED if not os.environ.get(v)]
        if missing:
            raise RuntimeError(
                f"Missing required environment variables: {', '.join(missing)}"
            )


class DevConfig(Config):
    """Local development."""

    DEBUG = True


class TestConfig(Config):
    """Testing — fixed addresses, no real SMTP server."""

    TESTING = True
    DEBUG = True
    SMTP_HOST = "smtp.test.local"
    SMTP_PORT = 587
    SMTP_USER = "apikey"
    SMTP_PASS = "test-password-not-for-production"
    SMTP_TIMEOUT = 5
    MAIL_FROM = "contact@saige.test"
    MAIL_TO = "Inbox@Saige.test"
    MAIL_FROM_NAME = "Website Contact"
    AUTO_REPLY_FROM_NAME = "赛格鞋业 SAIGE Footwear"

    @classmethod
    def validate(cls):
        """Skip validation in test mode — everything is hardcoded."""
        pass


class ProdConfig(Config):
    """Production."""

    DEBUG = False


config_by_name = {
    "development": DevConfig,
    "production": ProdConfig,
    "testing": TestConfig,
}
