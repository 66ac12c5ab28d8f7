from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, status

from campaign_player.deps import get_mount_registry
from campaign_player.schemas.public import (
    CtaOpenResponse,
    MediaEventRequest,
    PlayerCommandRequest,
    PlayerCommandResponse,
    PlayerState,
    WatchPage,
)
from campaign_player.services.player_mounts import MountStateError, PlayerMount, PlayerMountRegistry

# Handlers are async: tracked events are scheduled on the running loop.
router = APIRouter(prefix="/player", tags=["player"])


def _get_mount(mount_id: str, registry: PlayerMountRegistry) -> PlayerMount:
    mount = registry.get(mount_id)
    if mount is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Player not found")
    return mount


@router.get("/{mount_id}", response_model=WatchPage)
async def get_player(mount_id: str, registry: PlayerMountRegistry = Depends(get_mount_registry)):
    return _get_mount(mount_id, registry).to_page()


@router.post("/{mount_id}/media-events", response_model=PlayerState)
async def report_media_event(
    mount_id: str,
    event: MediaEventRequest,
    registry: PlayerMountRegistry = Depends(get_mount_registry),
):
    """Mirror a browser media event into the server-side player."""
    mount = _get_mount(mount_id, registry)
    try:
        return mount.handle_media_event(event)
    except MountStateError as exc:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc)) from exc


@router.post("/{mount_id}/commands", response_model=PlayerCommandResponse)
async def run_player_command(
    mount_id: str,
    command: PlayerCommandRequest,
    registry: PlayerMountRegistry = Depends(get_mount_registry),
):
    mount = _get_mount(mount_id, registry)
    try:
        return mount.run_command(command)
    except MountStateError as exc:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc)) from exc


@router.post("/{mount_id}/cta", response_model=CtaOpenResponse)
async def click_cta(mount_id: str, registry: PlayerMountRegistry = Depends(get_mount_registry)):
    mount = _get_mount(mount_id, registry)
    try:
        return mount.click_cta()
    except MountStateError as exc:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc)) from exc


@router.delete("/{mount_id}", status_code=status.HTTP_204_NO_CONTENT)
async def unmount_player(mount_id: str, registry: PlayerMountRegistry = Depends(get_mount_registry)):
    if registry.remove(mount_id) is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Player not found")
