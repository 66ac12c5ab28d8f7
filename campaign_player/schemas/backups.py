from __future__ import annotations

from typing import Literal

from pydantic import BaseModel

RestoreScope = Literal["full", "code", "database"]


class Backup(BaseModel):
    filename: str
    size: str = ""
    created_at: str | None = None
    download_url: str | None = None


class BackupCreated(BaseModel):
    filename: str
    message: str | None = None


class RestoreBackupRequest(BaseModel):
    scope: RestoreScope = "full"
