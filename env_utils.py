import os
from urllib.parse import urlsplit, urlunsplit

from dotenv import find_dotenv, load_dotenv


def _mask(url: str) -> str:
    """Hide the password part of a DSN for logging."""
    if not url:
        return ""
    parts = urlsplit(url)
    if parts.password is None:
        return url
    host = parts.netloc.rsplit("@", 1)[1]
    return urlunsplit(parts._replace(netloc=f"{parts.username}:***@{host}"))


def get_database_url() -> str:
    """Resolve a usable DATABASE_URL.

    DATABASE_PUBLIC_URL wins because it also works outside the private network.
    """
    db_url = os.getenv("DATABASE_PUBLIC_URL") or os.getenv("DATABASE_URL")
    if db_url:
        return db_url
    raise RuntimeError("DATABASE_URL or DATABASE_PUBLIC_URL must be set")


def bootstrap_runtime_env(dotenv_path: str = None) -> str:
    """Normalize env for cron contexts before any config is built.

    Loads a .env (from the working directory unless a path is given, never
    overriding real env vars) and fills DATABASE_URL from DATABASE_PUBLIC_URL
    when missing. Returns the effective DATABASE_URL, masked, for the caller
    to log once logging is configured.
    """
    load_dotenv(dotenv_path or find_dotenv(usecwd=True), override=False)

    db_url = os.getenv("DATABASE_URL")
    db_public = os.getenv("DATABASE_PUBLIC_URL")
    if not db_url and db_public:
        os.environ["DATABASE_URL"] = db_public
        db_url = db_public

    return _mask(db_url or "")
