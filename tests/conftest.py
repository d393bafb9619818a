import os

# Must be set before stockive.core.config is imported
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ["CACHE_ENABLED"] = "false"
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ.setdefault("LOG_LEVEL", "WARNING")
