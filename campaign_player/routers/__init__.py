from campaign_player.routers import (
    analytics,
    backups,
    campaigns,
    player,
    profile,
    public,
    session,
    users,
    videos,
)

__all__ = [
    "analytics",
    "backups",
    "campaigns",
    "player",
    "profile",
    "public",
    "session",
    "users",
    "videos",
]
