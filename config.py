import json
import os
from dataclasses import dataclass, replace
from typing import Optional

from sqlalchemy.engine import URL, make_url

DEFAULT_DRIVER = "postgresql+psycopg2"

TRUTHY = {"1", "true", "yes", "on"}


def _flag(value):
    return (value or "").strip().lower() in TRUTHY


@dataclass(frozen=True)
class Settings:
    """Process-wide configuration, built once at startup."""

    database_url: str
    username: Optional[str] = None
    password: Optional[str] = None
    driver_name: Optional[str] = None
    create_tables: bool = False
    wait_for_database: bool = False

    @classmethod
    def from_env(cls, environ=None):
        environ = os.environ if environ is None else environ

        config_file = environ.get("configFile")
        if config_file:
            settings = cls.from_file(config_file)
            # Les variables d'environnement priment sur le fichier
            settings = replace(
                settings,
                username=environ.get("username") or settings.username,
                password=environ.get("password") or settings.password,
                driver_name=environ.get("driverName") or settings.driver_name,
            )
        else:
            database_url = environ.get("databaseUrl")
            if not database_url:
                raise ValueError("databaseUrl environment variable is not set")
            settings = cls(
                database_url=database_url,
                username=environ.get("username") or None,
                password=environ.get("password") or None,
                driver_name=environ.get("driverName") or None,
            )

        return replace(
            settings,
            create_tables=_flag(environ.get("createTables")),
            wait_for_database=_flag(environ.get("waitForDatabase")),
        )

    @classmethod
    def from_file(cls, path):
        """Load the JSON layout used by the stand-alone server's config.json."""
        with open(path) as f:
            data = json.load(f)

        missing = [key for key in ("db_host", "db_name") if not data.get(key)]
        if missing:
            raise ValueError(f"{path} is missing {', '.join(missing)}")

        url = URL.create(
            data.get("driver_name") or DEFAULT_DRIVER,
            host=data["db_host"],
            port=data.get("db_port"),
            database=data["db_name"],
        )
        return cls(
            database_url=url.render_as_string(hide_password=False),
            username=data.get("db_user") or None,
            password=data.get("db_password") or None,
            driver_name=data.get("driver_name") or None,
        )

    def url(self) -> URL:
        """SQLAlchemy URL with the configured driver and credentials applied.

        Raises ``sqlalchemy.exc.ArgumentError`` when ``database_url`` can't be parsed.
        """
        url = make_url(self.database_url)
        if self.driver_name:
            url = url.set(drivername=self.driver_name)
        if self.username:
            url = url.set(username=self.username)
        if self.password:
            url = url.set(password=self.password)
        return url
