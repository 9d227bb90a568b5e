import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any, Dict, Optional, Tuple, Union

from sqlalchemy import text

from sqlprobe.config import ProbeSettings
from sqlprobe.db import (
    Credential,
    build_connection_string,
    build_display_connection_string,
    build_engine,
)

log = logging.getLogger("sqlprobe.probe")

# SERVERPROPERTY returns sql_variant, which pyodbc cannot fetch
SESSION_INFO_SQL = """
    SELECT
        @@SPID AS SessionId,
        ORIGINAL_LOGIN() AS LoginName,
        USER_NAME() AS ExecutionUser,
        CAST(SERVERPROPERTY('MachineName') AS NVARCHAR(128)) AS ServerName,
        @@SERVICENAME AS InstanceName,
        CAST(SERVERPROPERTY('ProductVersion') AS NVARCHAR(128)) AS Version,
        CAST(SERVERPROPERTY('Edition') AS NVARCHAR(128)) AS Edition,
        (SELECT create_date FROM sys.databases WHERE name = 'tempdb') AS StartDate,
        SYSDATETIME() AS ServerTime
"""

SECURITY_INFO_SQL = """
    SELECT net_transport AS Protocol, auth_scheme AS AuthScheme, encrypt_option AS Encrypted
    FROM sys.dm_exec_connections
    WHERE session_id = @@SPID
"""


class ProbeError(RuntimeError):
    pass


@dataclass(frozen=True)
class SecurityInfo:
    protocol: str = ""
    auth_scheme: str = ""
    encrypted: str = ""


@dataclass(frozen=True)
class ConnectionProbeResult:
    connection_string: str
    session_id: int
    login_name: str
    execution_user: str
    server_name: str
    instance_name: str
    version: str
    edition: str
    start_date: datetime
    uptime: timedelta
    protocol: str = ""
    auth_scheme: str = ""
    encrypted: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            "connection_string": self.connection_string,
            "session_id": self.session_id,
            "login_name": self.login_name,
            "execution_user": self.execution_user,
            "protocol": self.protocol,
            "auth_scheme": self.auth_scheme,
            "encrypted": self.encrypted,
            "server_name": self.server_name,
            "instance_name": self.instance_name,
            "version": self.version,
            "edition": self.edition,
            "start_date": self.start_date.isoformat(),
            "uptime_seconds": int(self.uptime.total_seconds()),
        }


def compute_uptime(start_date: datetime, now: Optional[datetime] = None) -> timedelta:
    if now is None:
        now = datetime.now(start_date.tzinfo)
    return max(now - start_date, timedelta(0))


def _fetch_security_info(conn) -> Tuple[Optional[SecurityInfo], Optional[Exception]]:
    try:
        row = conn.execute(text(SECURITY_INFO_SQL)).mappings().first()
    except Exception as e:
        return None, e
    if row is None:
        return SecurityInfo(), None
    return SecurityInfo(
        protocol=row["Protocol"] or "",
        auth_scheme=row["AuthScheme"] or "",
        encrypted=row["Encrypted"] or "",
    ), None


def _probe(odbc_str: str, display_str: str) -> ConnectionProbeResult:
    engine = build_engine(odbc_str)
    try:
        with engine.connect() as conn:
            row = conn.execute(text(SESSION_INFO_SQL)).mappings().first()
            if row is None:
                raise ProbeError("session info query returned no rows")

            security, err = _fetch_security_info(conn)
            if err is not None:
                log.warning("Could not read protocol/encryption for session %s: %s", row["SessionId"], err)
                conn.rollback()
                security = SecurityInfo()

        start_date = row["StartDate"]
        return ConnectionProbeResult(
            connection_string=display_str,
            session_id=row["SessionId"],
            login_name=row["LoginName"] or "",
            execution_user=row["ExecutionUser"] or "",
            server_name=row["ServerName"] or "",
            instance_name=row["InstanceName"] or "",
            version=row["Version"] or "",
            edition=row["Edition"] or "",
            start_date=start_date,
            uptime=compute_uptime(start_date, row["ServerTime"]),
            protocol=security.protocol,
            auth_scheme=security.auth_scheme,
            encrypted=security.encrypted,
        )
    finally:
        engine.dispose()


def test_connection(
    host: str,
    credential: Optional[Credential] = None,
    database: Optional[str] = None,
    encrypt: bool = False,
    quiet: bool = False,
    port: Optional[int] = None,
    settings: Optional[ProbeSettings] = None,
) -> Union[bool, ConnectionProbeResult]:
    """
    Connect to a SQL Server instance and read back who/what/where we landed.

    No credential means integrated (trusted) authentication.
    Normal mode returns a ConnectionProbeResult and lets errors propagate.
    Quiet mode returns True/False and never raises.
    """
    try:
        odbc_str = build_connection_string(host, credential, database, encrypt, port, settings)
        display_str = build_display_connection_string(host, credential, database, encrypt, port, settings)
        log.debug("Connecting with: %s", display_str)

        result = _probe(odbc_str, display_str)
    except Exception as e:
        if not quiet:
            raise
        log.debug("Probe of %s failed: %s", host, e)
        return False

    log.info(
        "Probe OK | server=%s | instance=%s | version=%s | login=%s | protocol=%s | encrypted=%s",
        result.server_name, result.instance_name, result.version,
        result.login_name, result.protocol, result.encrypted,
    )
    return True if quiet else result
