import os
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv

load_dotenv()


def _env_int(var: str, default: int) -> int:
    try:
        return int(os.environ.get(var, default))
    except (TypeError, ValueError):
        return default


@dataclass(frozen=True)
class ProbeSettings:
    driver: str = "ODBC Driver 18 for SQL Server"
    default_database: str = "master"
    trust_cert: str = "yes"
    app_name: str = "sqlprobe"


@dataclass(frozen=True)
class ApiSettings:
    port: int = 8000


def get_probe_settings() -> ProbeSettings:
    return ProbeSettings(
        driver=os.environ.get("SQLPROBE_DRIVER", "ODBC Driver 18 for SQL Server"),
        default_database=os.environ.get("SQLPROBE_DEFAULT_DATABASE", "master"),
        trust_cert=os.environ.get("SQLPROBE_TRUST_CERT", "yes"),
        app_name=os.environ.get("SQLPROBE_APP_NAME", "sqlprobe"),
    )


def get_api_settings() -> ApiSettings:
    return ApiSettings(port=_env_int("SQLPROBE_API_PORT", 8000))


def get_env_password() -> Optional[str]:
    return os.environ.get("SQLPROBE_PASSWORD") or None
