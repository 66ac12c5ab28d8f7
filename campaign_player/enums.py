from enum import Enum


class UserRoleEnum(str, Enum):
    admin = "admin"
    brand = "brand"
    agency = "agency"


class VideoStatusEnum(str, Enum):
    active = "active"
    draft = "draft"
    inactive = "inactive"


class VariantEnum(str, Enum):
    A = "A"
    B = "B"


class AnalyticsEventTypeEnum(str, Enum):
    page_view = "page_view"
    video_play = "video_play"
    video_view = "video_view"
    video_complete = "video_complete"
    cta_click = "cta_click"


class CtaRevealPolicyEnum(str, Enum):
    on_end = "on_end"
    after_delay = "after_delay"


class PageStatusEnum(str, Enum):
    loading = "loading"
    ready = "ready"
    not_found = "not_found"
    failed = "failed"
    unmounted = "unmounted"


class EditPhaseEnum(str, Enum):
    loading = "loading"
    populated = "populated"
    submitting = "submitting"
    success = "success"
    error = "error"
