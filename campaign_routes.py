"""
Campaign API Routes for the Minka Platform
Draft creation, partial updates and media management for organizer campaigns
"""

import logging
from typing import Dict, Any, List, Optional
from datetime import date, timedelta
from fastapi import APIRouter, HTTPException, Depends, Request, status
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel
from slowapi import Limiter
from slowapi.util import get_remote_address
from sqlalchemy.orm import Session

from auth_middleware import get_current_organizer
from config import get_settings
from database import get_db
from media import MediaItem, MediaType, normalize_media
from models import (
    Profile, Campaign, CampaignMedia, CampaignStatus, CampaignCategory,
    LegalEntity, Region, RecipientType, media_to_dict, active_media
)
from regions import is_province_in_department

logger = logging.getLogger(__name__)

settings = get_settings()

# Rate limiter
limiter = Limiter(key_func=get_remote_address, enabled=settings.rate_limit_enabled)

# Create router
campaign_router = APIRouter()

DELETABLE_STATUSES = (CampaignStatus.DRAFT, CampaignStatus.ACTIVE)

# Columns a client may explicitly clear with null
CLEARABLE_FIELDS = {
    "province", "youtube_url", "recipient_type", "beneficiary_name",
    "beneficiary_relationship", "beneficiary_reason", "legal_entity_id",
}


# Pydantic models
class CamelModel(BaseModel):
    """Accepts the camelCase keys sent by the web client"""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class MediaItemPayload(CamelModel):
    media_url: str
    type: MediaType = MediaType.IMAGE
    is_primary: bool = False
    order_index: int = Field(0, ge=0)

    @field_validator('media_url')
    @classmethod
    def validate_media_url(cls, v):
        if not v.startswith(("http://", "https://")):
            raise ValueError("Media URL must be an http(s) URL")
        return v


class CampaignFields(CamelModel):
    """Fields shared by draft saves and partial updates"""
    title: Optional[str] = Field(None, min_length=3, max_length=80)
    description: Optional[str] = Field(None, min_length=10, max_length=150)
    story: Optional[str] = Field(None, max_length=600)
    beneficiaries_description: Optional[str] = Field(None, max_length=600)
    category: Optional[CampaignCategory] = None
    goal_amount: Optional[int] = Field(None, ge=1)
    location: Optional[Region] = None
    province: Optional[str] = None
    end_date: Optional[date] = None
    youtube_url: Optional[str] = None
    youtube_urls: Optional[List[str]] = None
    media: Optional[List[MediaItemPayload]] = None

    @model_validator(mode='after')
    def validate_province(self):
        if self.province and self.location and not is_province_in_department(self.province, self.location.value):
            raise ValueError(f"Province {self.province} does not belong to {self.location.value}")
        return self


class CampaignDraftRequest(CampaignFields):
    campaign_id: Optional[str] = None


class CampaignUpdateRequest(CampaignFields):
    campaign_status: Optional[CampaignStatus] = None
    verification_requested: Optional[bool] = None
    recipient_type: Optional[RecipientType] = None
    beneficiary_name: Optional[str] = Field(None, max_length=255)
    beneficiary_relationship: Optional[str] = Field(None, max_length=255)
    beneficiary_reason: Optional[str] = None
    legal_entity_id: Optional[str] = None


class MediaCreateRequest(CamelModel):
    media_url: str
    type: MediaType = MediaType.IMAGE
    is_primary: bool = False


class MediaActionRequest(CamelModel):
    action: str
    media_id: str

    @field_validator('action')
    @classmethod
    def validate_action(cls, v):
        if v != "set_primary":
            raise ValueError("Unsupported media action")
        return v


# Helper function to format campaign response
def format_campaign_response(campaign: Campaign) -> Dict[str, Any]:
    """Format campaign for API response"""
    return {
        "id": campaign.id,
        "title": campaign.title,
        "description": campaign.description,
        "story": campaign.story,
        "beneficiaries_description": campaign.beneficiaries_description,
        "category": campaign.category.value if campaign.category else None,
        "location": campaign.location.value if campaign.location else None,
        "province": campaign.province,
        "goal_amount": campaign.goal_amount,
        "collected_amount": campaign.collected_amount,
        "donor_count": campaign.donor_count,
        "percentage_funded": campaign.percentage_funded,
        "end_date": campaign.end_date.isoformat() if campaign.end_date else None,
        "days_remaining": campaign.days_remaining,
        "youtube_url": campaign.youtube_url,
        "youtube_urls": campaign.youtube_urls or [],
        "status": campaign.campaign_status.value if campaign.campaign_status else None,
        "verification_requested": campaign.verification_requested,
        "recipient_type": campaign.recipient_type.value if campaign.recipient_type else None,
        "beneficiary_name": campaign.beneficiary_name,
        "beneficiary_relationship": campaign.beneficiary_relationship,
        "beneficiary_reason": campaign.beneficiary_reason,
        "legal_entity_id": campaign.legal_entity_id,
        "organizer": {
            "id": campaign.organizer.id,
            "name": campaign.organizer.name,
            "location": campaign.organizer.location,
            "profile_picture": campaign.organizer.profile_picture
        } if campaign.organizer else None,
        "media": [media_to_dict(m) for m in active_media(campaign)],
        "created_at": campaign.created_at.isoformat() if campaign.created_at else None,
        "updated_at": campaign.updated_at.isoformat() if campaign.updated_at else None
    }


def _days_until(end_date: Optional[date]) -> int:
    if not end_date:
        return 0
    return max((end_date - date.today()).days, 0)


def apply_campaign_fields(campaign: Campaign, fields: Dict[str, Any]):
    """Copy validated request fields onto the campaign"""
    fields = {k: v for k, v in fields.items() if v is not None or k in CLEARABLE_FIELDS}
    fields.pop("media", None)

    youtube_urls = fields.pop("youtube_urls", None)
    if youtube_urls is not None:
        campaign.youtube_urls = youtube_urls
        if "youtube_url" not in fields:
            fields["youtube_url"] = youtube_urls[0] if youtube_urls else None

    for name, value in fields.items():
        setattr(campaign, name, value)

    if "youtube_url" in fields and not campaign.youtube_url:
        campaign.youtube_url = None

    if "end_date" in fields:
        campaign.days_remaining = _days_until(campaign.end_date)

    # A new department drops a province that is not one of its own
    if campaign.province and campaign.location and \
            not is_province_in_department(campaign.province, campaign.location.value):
        if "province" in fields:
            raise ValueError(f"Province {campaign.province} does not belong to {campaign.location.value}")
        logger.info(f"Clearing province {campaign.province} after location change on {campaign.id}")
        campaign.province = None


def replace_campaign_media(campaign: Campaign, payload: List[MediaItemPayload]):
    """Replace the campaign media with a normalized copy of the payload"""
    items = normalize_media([
        MediaItem(
            media_url=item.media_url,
            type=item.type,
            is_primary=item.is_primary,
            order_index=item.order_index,
        )
        for item in sorted(payload, key=lambda item: item.order_index)
    ])
    campaign.media = [
        CampaignMedia(
            media_url=item.media_url,
            type=item.type,
            is_primary=item.is_primary,
            order_index=item.order_index,
        )
        for item in items
    ]


def reindex_media_rows(rows: List[CampaignMedia], primary_id: Optional[str] = None):
    """Keep order_index dense and exactly one primary row"""
    if not rows:
        return
    if primary_id is None or not any(row.id == primary_id for row in rows):
        primary_id = next((row.id for row in rows if row.is_primary), rows[0].id)
    for index, row in enumerate(rows):
        row.order_index = index
        row.is_primary = row.id == primary_id


def check_goal_amount(goal_amount: Optional[int]):
    if goal_amount is not None and goal_amount > settings.max_goal_amount:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Goal amount cannot exceed {settings.max_goal_amount}"
        )


def get_owned_campaign(db: Session, campaign_id: str, organizer: Profile) -> Campaign:
    campaign = db.query(Campaign).filter(Campaign.id == campaign_id).first()
    if not campaign:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Campaign not found"
        )
    if campaign.organizer_id != organizer.id:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="You don't have permission to modify this campaign"
        )
    return campaign


# Draft endpoints

@campaign_router.post("/draft", response_model=Dict[str, Any])
@limiter.limit(settings.draft_rate_limit)
async def save_campaign_draft(
    request: Request,
    draft: CampaignDraftRequest,
    organizer: Profile = Depends(get_current_organizer),
    db: Session = Depends(get_db)
):
    """Create a draft, or update an existing draft owned by the organizer"""
    try:
        fields = draft.model_dump(exclude_unset=True, exclude={"campaign_id", "media"})
        check_goal_amount(fields.get("goal_amount"))

        if draft.campaign_id:
            campaign = db.query(Campaign).filter(
                Campaign.id == draft.campaign_id,
                Campaign.organizer_id == organizer.id
            ).first()
            if not campaign:
                raise HTTPException(
                    status_code=status.HTTP_404_NOT_FOUND,
                    detail="Campaign not found or you don't have permission to edit it"
                )
        else:
            end_date = date.today() + timedelta(days=settings.default_campaign_days)
            campaign = Campaign(
                title="Untitled Campaign",
                description="Draft description",
                story="",
                beneficiaries_description="",
                category=CampaignCategory.OTROS,
                goal_amount=0,
                location=Region.LA_PAZ,
                end_date=end_date,
                days_remaining=_days_until(end_date),
                campaign_status=CampaignStatus.DRAFT,
                verification_requested=False,
                organizer_id=organizer.id
            )
            db.add(campaign)

        apply_campaign_fields(campaign, fields)
        if draft.media:
            replace_campaign_media(campaign, draft.media)

        db.commit()
        db.refresh(campaign)

        logger.info(f"Campaign draft {campaign.id} saved by organizer {organizer.id}")

        return {
            "message": "Campaign draft saved successfully",
            "campaignId": campaign.id
        }

    except HTTPException:
        raise
    except ValueError as e:
        db.rollback()
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e)
        )
    except Exception as e:
        db.rollback()
        logger.error(f"Save campaign draft error: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to save campaign draft"
        )


# Campaign endpoints

@campaign_router.get("/{campaign_id}", response_model=Dict[str, Any])
async def get_campaign(
    campaign_id: str,
    db: Session = Depends(get_db)
):
    """Get single campaign by ID - PUBLIC ACCESS"""
    try:
        campaign = db.query(Campaign).filter(Campaign.id == campaign_id).first()

        if not campaign:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Campaign not found"
            )

        return format_campaign_response(campaign)

    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Get campaign error: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to retrieve campaign"
        )


@campaign_router.patch("/{campaign_id}", response_model=Dict[str, Any])
async def update_campaign(
    campaign_id: str,
    campaign_data: CampaignUpdateRequest,
    organizer: Profile = Depends(get_current_organizer),
    db: Session = Depends(get_db)
):
    """Partially update a campaign owned by the organizer"""
    try:
        campaign = get_owned_campaign(db, campaign_id, organizer)

        fields = campaign_data.model_dump(exclude_unset=True, exclude={"media"})

        check_goal_amount(fields.get("goal_amount"))

        legal_entity_id = fields.get("legal_entity_id")
        if legal_entity_id:
            entity = db.query(LegalEntity).filter(
                LegalEntity.id == legal_entity_id,
                LegalEntity.is_active.is_(True)
            ).first()
            if not entity:
                raise HTTPException(
                    status_code=status.HTTP_400_BAD_REQUEST,
                    detail="Legal entity not found"
                )

        apply_campaign_fields(campaign, fields)
        if campaign_data.media is not None:
            replace_campaign_media(campaign, campaign_data.media)

        db.commit()
        db.refresh(campaign)

        logger.info(f"Campaign {campaign_id} updated by organizer {organizer.id}: {sorted(fields)}")

        return {
            "message": "Campaign updated successfully",
            "campaign": format_campaign_response(campaign)
        }

    except HTTPException:
        raise
    except ValueError as e:
        db.rollback()
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e)
        )
    except Exception as e:
        db.rollback()
        logger.error(f"Update campaign error: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to update campaign"
        )


@campaign_router.delete("/{campaign_id}")
async def delete_campaign(
    campaign_id: str,
    organizer: Profile = Depends(get_current_organizer),
    db: Session = Depends(get_db)
):
    """Delete an abandoned draft or an active campaign owned by the organizer"""
    try:
        campaign = get_owned_campaign(db, campaign_id, organizer)

        if campaign.campaign_status not in DELETABLE_STATUSES:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Only draft or active campaigns can be deleted"
            )

        db.delete(campaign)
        db.commit()

        logger.info(f"Campaign {campaign_id} deleted by organizer {organizer.id}")

        return {"message": "Campaign deleted successfully"}

    except HTTPException:
        raise
    except Exception as e:
        db.rollback()
        logger.error(f"Delete campaign error: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to delete campaign"
        )


# Media endpoints

@campaign_router.post("/{campaign_id}/media", response_model=Dict[str, Any])
async def add_campaign_media(
    campaign_id: str,
    media_data: MediaCreateRequest,
    organizer: Profile = Depends(get_current_organizer),
    db: Session = Depends(get_db)
):
    """Append a media item; the first item of a campaign becomes primary"""
    try:
        campaign = get_owned_campaign(db, campaign_id, organizer)
        rows = active_media(campaign)

        new_row = CampaignMedia(
            media_url=media_data.media_url,
            type=media_data.type,
            is_primary=False,
            order_index=len(rows),
        )
        campaign.media.append(new_row)
        db.flush()

        rows.append(new_row)
        reindex_media_rows(rows, new_row.id if media_data.is_primary else None)

        db.commit()
        db.refresh(campaign)

        logger.info(f"Media {new_row.id} added to campaign {campaign_id}")

        return {
            "message": "Media added successfully",
            "media": [media_to_dict(m) for m in active_media(campaign)]
        }

    except HTTPException:
        raise
    except Exception as e:
        db.rollback()
        logger.error(f"Add campaign media error: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to add media"
        )


@campaign_router.patch("/{campaign_id}/media", response_model=Dict[str, Any])
async def update_campaign_media(
    campaign_id: str,
    action_data: MediaActionRequest,
    organizer: Profile = Depends(get_current_organizer),
    db: Session = Depends(get_db)
):
    """Mark one media item as the campaign's primary image"""
    try:
        campaign = get_owned_campaign(db, campaign_id, organizer)
        rows = active_media(campaign)

        if not any(row.id == action_data.media_id for row in rows):
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Media not found"
            )

        reindex_media_rows(rows, action_data.media_id)

        db.commit()
        db.refresh(campaign)

        logger.info(f"Media {action_data.media_id} set as primary for campaign {campaign_id}")

        return {
            "message": "Primary media updated",
            "media": [media_to_dict(m) for m in active_media(campaign)]
        }

    except HTTPException:
        raise
    except Exception as e:
        db.rollback()
        logger.error(f"Update campaign media error: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to update media"
        )


@campaign_router.delete("/{campaign_id}/media/{media_id}", response_model=Dict[str, Any])
async def delete_campaign_media(
    campaign_id: str,
    media_id: str,
    organizer: Profile = Depends(get_current_organizer),
    db: Session = Depends(get_db)
):
    """Remove a media item, promoting the new first item if it was primary"""
    try:
        campaign = get_owned_campaign(db, campaign_id, organizer)
        rows = active_media(campaign)

        target = next((row for row in rows if row.id == media_id), None)
        if not target:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Media not found"
            )

        remaining = [row for row in rows if row.id != media_id]
        campaign.media.remove(target)
        reindex_media_rows(remaining, remaining[0].id if target.is_primary and remaining else None)

        db.commit()
        db.refresh(campaign)

        logger.info(f"Media {media_id} removed from campaign {campaign_id}")

        return {
            "message": "Media deleted successfully",
            "media": [media_to_dict(m) for m in active_media(campaign)]
        }

    except HTTPException:
        raise
    except Exception as e:
        db.rollback()
        logger.error(f"Delete campaign media error: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to delete media"
        )
