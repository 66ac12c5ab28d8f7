from campaign_player.schemas.analytics import AnalyticsEvent, AnalyticsSummary, TrackEventPayload
from campaign_player.schemas.campaigns import Campaign, CampaignForm, CampaignSettings
from campaign_player.schemas.common import FieldErrors, Paginated
from campaign_player.schemas.users import AuthResponse, User, UserCreateForm, UserUpdateForm
from campaign_player.schemas.videos import Video, VideoForm
