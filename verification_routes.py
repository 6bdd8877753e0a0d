"""
Verification API Routes for the Minka Platform
Intake of campaign verification requests and their status
"""

import logging
from typing import Dict, Any, List, Optional
from datetime import datetime
from fastapi import APIRouter, HTTPException, Depends, Query, status
from pydantic import Field, field_validator
from sqlalchemy.orm import Session

from auth_middleware import get_current_organizer
from campaign_routes import CamelModel, get_owned_campaign
from database import get_db
from models import (
    Profile, CampaignVerification, VerificationRequestStatus, verification_to_dict
)

logger = logging.getLogger(__name__)

verification_router = APIRouter()


class VerificationRequest(CamelModel):
    campaign_id: str
    id_document_url: Optional[str] = None
    id_documents_urls: Optional[List[str]] = None
    supporting_docs_urls: Optional[List[str]] = None
    campaign_story: Optional[str] = Field(None, min_length=10, max_length=5000)
    reference_contact_name: Optional[str] = Field(None, min_length=3, max_length=100)
    reference_contact_email: Optional[str] = None
    reference_contact_phone: Optional[str] = Field(None, min_length=5, max_length=20)

    @field_validator('reference_contact_email')
    @classmethod
    def validate_email(cls, v):
        if v and ("@" not in v or "." not in v.split("@")[-1]):
            raise ValueError("Invalid email address")
        return v

    def document_url(self) -> Optional[str]:
        if self.id_documents_urls:
            return self.id_documents_urls[0]
        return self.id_document_url


@verification_router.post("/verification", response_model=Dict[str, Any])
async def submit_verification(
    verification_data: VerificationRequest,
    organizer: Profile = Depends(get_current_organizer),
    db: Session = Depends(get_db)
):
    """Submit a verification request; a rejected request can be resubmitted"""
    try:
        campaign = get_owned_campaign(db, verification_data.campaign_id, organizer)
        existing = campaign.verification

        if existing and existing.verification_status != VerificationRequestStatus.REJECTED:
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail="Verification request already exists for this campaign"
            )

        if existing:
            existing.verification_status = VerificationRequestStatus.PENDING
            existing.request_date = datetime.utcnow()
            existing.id_document_url = verification_data.document_url() or existing.id_document_url
            existing.supporting_docs_urls = verification_data.supporting_docs_urls or existing.supporting_docs_urls
            existing.campaign_story = verification_data.campaign_story or existing.campaign_story
            existing.reference_contact_name = verification_data.reference_contact_name or existing.reference_contact_name
            existing.reference_contact_email = verification_data.reference_contact_email or existing.reference_contact_email
            existing.reference_contact_phone = verification_data.reference_contact_phone or existing.reference_contact_phone
            verification = existing
            message = "Campaign verification request updated successfully"
        else:
            verification = CampaignVerification(
                campaign_id=campaign.id,
                verification_status=VerificationRequestStatus.PENDING,
                id_document_url=verification_data.document_url(),
                supporting_docs_urls=verification_data.supporting_docs_urls or [],
                campaign_story=verification_data.campaign_story,
                reference_contact_name=verification_data.reference_contact_name,
                reference_contact_email=verification_data.reference_contact_email,
                reference_contact_phone=verification_data.reference_contact_phone
            )
            db.add(verification)
            message = "Campaign verification request submitted successfully"

        # The intake owns the flag; publishing never sets it
        campaign.verification_requested = True

        db.commit()
        db.refresh(verification)

        logger.info(f"Verification request {verification.id} recorded for campaign {campaign.id}")

        return {
            "message": message,
            "verificationId": verification.id,
            "verification": verification_to_dict(verification)
        }

    except HTTPException:
        raise
    except Exception as e:
        db.rollback()
        logger.error(f"Submit verification error: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to submit verification request"
        )


@verification_router.get("/verification/status", response_model=Dict[str, Any])
async def get_verification_status(
    campaign_id: str = Query(..., alias="campaignId"),
    db: Session = Depends(get_db)
):
    """Get the verification request status of a campaign"""
    try:
        verification = db.query(CampaignVerification).filter(
            CampaignVerification.campaign_id == campaign_id
        ).first()

        if not verification:
            return {
                "status": None,
                "message": "No verification request found for this campaign"
            }

        return {
            "status": verification.verification_status.value,
            "requestDate": verification.request_date.isoformat() if verification.request_date else None
        }

    except Exception as e:
        logger.error(f"Get verification status error: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to get verification status"
        )
