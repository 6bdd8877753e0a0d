"""
Explicit UI context for the campaign wizard: user-visible notices, the
current navigation location and the campaign handed to verification intake.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional

logger = logging.getLogger(__name__)

DASHBOARD_CAMPAIGNS_PATH = "/dashboard/campaigns"
VERIFICATION_INTAKE_PATH = "/campaign-verification"


class NoticeVariant(str, Enum):
    DEFAULT = "default"
    DESTRUCTIVE = "destructive"


@dataclass(frozen=True)
class Notice:
    title: str
    description: str
    variant: NoticeVariant = NoticeVariant.DEFAULT


class NotificationCenter:
    """Collects non-blocking notices shown to the organizer"""

    def __init__(self):
        self.notices: List[Notice] = []

    def notify(self, title: str, description: str, variant: NoticeVariant = NoticeVariant.DEFAULT) -> Notice:
        notice = Notice(title=title, description=description, variant=variant)
        self.notices.append(notice)
        if variant == NoticeVariant.DESTRUCTIVE:
            logger.warning(f"Notice: {title} - {description}")
        else:
            logger.info(f"Notice: {title} - {description}")
        return notice

    def error(self, title: str, description: str) -> Notice:
        return self.notify(title, description, NoticeVariant.DESTRUCTIVE)

    @property
    def last(self) -> Optional[Notice]:
        return self.notices[-1] if self.notices else None

    def clear(self):
        self.notices.clear()


@dataclass
class WizardContext:
    notifier: NotificationCenter = field(default_factory=NotificationCenter)
    location: Optional[str] = None
    verification_campaign_id: Optional[str] = None

    def navigate(self, path: str):
        logger.info(f"Navigating to {path}")
        self.location = path
