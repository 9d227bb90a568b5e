from typing import Any, Dict, Optional

from fastapi import FastAPI, HTTPException
from pydantic import BaseModel, Field

from sqlprobe import probe
from sqlprobe.db import Credential

app = FastAPI(
    title="sqlprobe",
    version="1.0.0",
    description="Connectivity and identity checks against SQL Server instances.",
)


class ProbeRequest(BaseModel):
    host: str = Field(..., min_length=1)
    port: Optional[int] = Field(None, ge=1, le=65535)
    database: Optional[str] = None
    username: Optional[str] = None
    password: Optional[str] = None
    encrypt: bool = False
    quiet: bool = False


@app.get("/health")
def health() -> Dict[str, Any]:
    return {"status": "ok"}


@app.post("/probe")
def run_probe(req: ProbeRequest) -> Dict[str, Any]:
    credential = None
    if req.username:
        if req.password is None:
            raise HTTPException(status_code=422, detail="password is required when username is given")
        credential = Credential(req.username, req.password)

    if req.quiet:
        ok = probe.test_connection(
            req.host, credential, req.database, encrypt=req.encrypt, quiet=True, port=req.port,
        )
        return {"reachable": ok}

    try:
        result = probe.test_connection(
            req.host, credential, req.database, encrypt=req.encrypt, port=req.port,
        )
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e))
    except Exception as e:
        raise HTTPException(status_code=502, detail=str(e))

    return result.to_dict()
