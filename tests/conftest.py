"""Pytest fixtures: an in-memory stand-in for a SQL Server engine."""

from datetime import datetime

import pytest

from sqlprobe import probe

START_DATE = datetime(2026, 10, 1, 8, 0, 0)
SERVER_TIME = datetime(2026, 10, 3, 9, 30, 0)


def session_row(**overrides):
    row = {
        "SessionId": 57,
        "LoginName": "CORP\\svc_probe",
        "ExecutionUser": "dbo",
        "ServerName": "SQL01",
        "InstanceName": "MSSQLSERVER",
        "Version": "16.0.4135.4",
        "Edition": "Developer Edition (64-bit)",
        "StartDate": START_DATE,
        "ServerTime": SERVER_TIME,
    }
    row.update(overrides)
    return row


class FakeResult:
    def __init__(self, row):
        self._row = row

    def mappings(self):
        return self

    def first(self):
        return self._row


class FakeConnection:
    def __init__(self, engine):
        self.engine = engine

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.close()
        return False

    def execute(self, stmt):
        sql = str(stmt)
        self.engine.executed.append(sql)
        if "sys.dm_exec_connections" in sql:
            if self.engine.security_error is not None:
                raise self.engine.security_error
            return FakeResult(self.engine.security_row)
        if self.engine.session_error is not None:
            raise self.engine.session_error
        return FakeResult(self.engine.session_row)

    def rollback(self):
        self.engine.rolled_back = True

    def close(self):
        self.engine.closed = True


class FakeEngine:
    def __init__(self):
        self.odbc_str = None
        self.executed = []
        self.session_row = session_row()
        self.security_row = {"Protocol": "TCP", "AuthScheme": "KERBEROS", "Encrypted": "TRUE"}
        self.connect_error = None
        self.session_error = None
        self.security_error = None
        self.closed = False
        self.rolled_back = False
        self.disposed = False

    def connect(self):
        if self.connect_error is not None:
            raise self.connect_error
        return FakeConnection(self)

    def dispose(self):
        self.disposed = True


@pytest.fixture
def fake_engine(monkeypatch):
    engine = FakeEngine()

    def _build_engine(odbc_str):
        engine.odbc_str = odbc_str
        return engine

    monkeypatch.setattr(probe, "build_engine", _build_engine)
    return engine
