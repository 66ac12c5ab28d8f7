from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, status

from campaign_player.api_client import CampaignApiError
from campaign_player.auth.dependencies import require_admin
from campaign_player.auth.session import AuthSession
from campaign_player.deps import get_backups_service
from campaign_player.schemas.backups import Backup, BackupCreated, RestoreBackupRequest
from campaign_player.services.dashboard import BackupsService

router = APIRouter(prefix="/dashboard/admin/backups", tags=["backups"])


@router.get("", response_model=list[Backup])
async def list_backups(
    session: AuthSession = Depends(require_admin),
    service: BackupsService = Depends(get_backups_service),
):
    try:
        return await service.list(session)
    except CampaignApiError as exc:
        raise HTTPException(status_code=exc.status_code, detail=str(exc)) from exc


@router.post("", response_model=BackupCreated, status_code=status.HTTP_201_CREATED)
async def create_backup(
    session: AuthSession = Depends(require_admin),
    service: BackupsService = Depends(get_backups_service),
):
    try:
        return await service.create(session)
    except CampaignApiError as exc:
        raise HTTPException(status_code=exc.status_code, detail=str(exc)) from exc


@router.post("/{filename}/restore")
async def restore_backup(
    filename: str,
    payload: RestoreBackupRequest,
    session: AuthSession = Depends(require_admin),
    service: BackupsService = Depends(get_backups_service),
):
    try:
        message = await service.restore(session, filename, scope=payload.scope)
    except CampaignApiError as exc:
        raise HTTPException(status_code=exc.status_code, detail=str(exc)) from exc
    return {"message": message, "scope": payload.scope}


@router.delete("/{filename}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_backup(
    filename: str,
    session: AuthSession = Depends(require_admin),
    service: BackupsService = Depends(get_backups_service),
):
    try:
        await service.delete(session, filename)
    except CampaignApiError as exc:
        raise HTTPException(status_code=exc.status_code, detail=str(exc)) from exc
