import urllib.parse
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.pool import NullPool

from sqlprobe.config import ProbeSettings, get_probe_settings

REDACTED = "********"


@dataclass(frozen=True)
class Credential:
    username: str
    password: str = field(repr=False)


def _odbc_value(value: str) -> str:
    """Brace-quote a value that would otherwise break the ODBC key=value syntax."""
    if any(c in value for c in ";{}") or value != value.strip():
        return "{" + value.replace("}", "}}") + "}"
    return value


def _connection_parts(
    host: str,
    credential: Optional[Credential],
    database: Optional[str],
    encrypt: bool,
    port: Optional[int],
    settings: Optional[ProbeSettings],
    password: Optional[str],
) -> List[Tuple[str, str]]:
    if not host or not host.strip():
        raise ValueError("host is required")

    s = settings or get_probe_settings()
    server = host.strip() if port is None else f"{host.strip()},{port}"

    parts = [
        ("DRIVER", "{" + s.driver + "}"),
        ("SERVER", _odbc_value(server)),
        ("DATABASE", _odbc_value(database or s.default_database)),
    ]
    if credential is None:
        parts.append(("Trusted_Connection", "yes"))
    else:
        parts.append(("UID", _odbc_value(credential.username)))
        parts.append(("PWD", password))
    parts += [
        ("Encrypt", "yes" if encrypt else "no"),
        ("TrustServerCertificate", s.trust_cert),
        ("APP", _odbc_value(s.app_name)),
    ]
    return parts


def _join(parts: List[Tuple[str, str]]) -> str:
    return "".join(f"{k}={v};" for k, v in parts)


def build_connection_string(
    host: str,
    credential: Optional[Credential] = None,
    database: Optional[str] = None,
    encrypt: bool = False,
    port: Optional[int] = None,
    settings: Optional[ProbeSettings] = None,
) -> str:
    """
    ODBC connection string actually handed to the driver.
    Contains the real password when a credential is given.
    """
    password = _odbc_value(credential.password) if credential else None
    return _join(_connection_parts(host, credential, database, encrypt, port, settings, password))


def build_display_connection_string(
    host: str,
    credential: Optional[Credential] = None,
    database: Optional[str] = None,
    encrypt: bool = False,
    port: Optional[int] = None,
    settings: Optional[ProbeSettings] = None,
) -> str:
    """Same as build_connection_string, with the password masked. Safe to log."""
    password = REDACTED if credential else None
    return _join(_connection_parts(host, credential, database, encrypt, port, settings, password))


def build_url(odbc_str: str) -> str:
    return f"mssql+pyodbc:///?odbc_connect={urllib.parse.quote_plus(odbc_str)}"


def build_engine(odbc_str: str) -> Engine:
    """
    SQL Server engine over ODBC for a single probe.
    NullPool: closing the connection really closes it, nothing is kept around.
    """
    return create_engine(build_url(odbc_str), poolclass=NullPool, future=True)
