"""
Database Models for the Minka Platform
Organizer profiles, campaigns, campaign media, legal entities and verification requests
"""

from sqlalchemy import Column, Integer, String, Float, Boolean, DateTime, Date, Text, JSON, Enum as SQLEnum, Index, ForeignKey
from sqlalchemy.orm import declarative_base, relationship
from sqlalchemy.sql import func
from typing import Dict, Any, List
from enum import Enum
import uuid

from media import MediaType

Base = declarative_base()


# Enums
class CampaignStatus(str, Enum):
    DRAFT = "draft"
    ACTIVE = "active"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class CampaignCategory(str, Enum):
    CULTURA_ARTE = "cultura_arte"
    EDUCACION = "educacion"
    EMERGENCIA = "emergencia"
    IGUALDAD = "igualdad"
    MEDIOAMBIENTE = "medioambiente"
    SALUD = "salud"
    OTROS = "otros"


class Region(str, Enum):
    LA_PAZ = "la_paz"
    SANTA_CRUZ = "santa_cruz"
    COCHABAMBA = "cochabamba"
    SUCRE = "sucre"
    ORURO = "oruro"
    POTOSI = "potosi"
    TARIJA = "tarija"
    BENI = "beni"
    PANDO = "pando"


class RecipientType(str, Enum):
    TU_MISMO = "tu_mismo"
    OTRA_PERSONA = "otra_persona"
    PERSONA_JURIDICA = "persona_juridica"
    ORGANIZACION = "organizacion"


class VerificationRequestStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


def _uuid() -> str:
    return str(uuid.uuid4())


class Profile(Base):
    """Organizer profile, resolved from the identity provider's email"""
    __tablename__ = "profiles"

    id = Column(String, primary_key=True, default=_uuid)
    email = Column(String(255), unique=True, nullable=False, index=True)
    name = Column(String(255), nullable=True)
    location = Column(String(100), nullable=True)
    profile_picture = Column(String(500), nullable=True)

    created_at = Column(DateTime, default=func.now(), nullable=False)
    updated_at = Column(DateTime, default=func.now(), onupdate=func.now())

    campaigns = relationship("Campaign", back_populates="organizer")


class LegalEntity(Base):
    """Administratively registered organization selectable as a fund recipient"""
    __tablename__ = "legal_entities"

    id = Column(String, primary_key=True, default=_uuid)
    name = Column(String(255), nullable=False, index=True)
    tax_id = Column(String(50), nullable=True)
    entity_type = Column(String(100), nullable=True)
    department = Column(SQLEnum(Region), nullable=True)
    city = Column(String(100), nullable=True)
    description = Column(Text, nullable=True)
    is_active = Column(Boolean, default=True, nullable=False)

    created_at = Column(DateTime, default=func.now(), nullable=False)


class Campaign(Base):
    __tablename__ = "campaigns"

    id = Column(String, primary_key=True, default=_uuid)
    title = Column(String(80), nullable=False)
    description = Column(Text, nullable=False)
    story = Column(Text, nullable=False, default="")
    beneficiaries_description = Column(Text, nullable=False, default="")

    category = Column(SQLEnum(CampaignCategory), nullable=False, default=CampaignCategory.OTROS)
    location = Column(SQLEnum(Region), nullable=False, default=Region.LA_PAZ)
    province = Column(String(100), nullable=True)

    # Financial information, whole currency units
    goal_amount = Column(Integer, nullable=False, default=0)
    collected_amount = Column(Float, default=0.0)
    donor_count = Column(Integer, default=0)
    percentage_funded = Column(Float, default=0.0)

    # Timeline
    end_date = Column(Date, nullable=True)
    days_remaining = Column(Integer, default=0)

    # Video links; youtube_url mirrors the first link for older readers
    youtube_url = Column(String(500), nullable=True)
    youtube_urls = Column(JSON, nullable=True)

    # Lifecycle
    campaign_status = Column(SQLEnum(CampaignStatus), default=CampaignStatus.DRAFT, nullable=False)
    verification_requested = Column(Boolean, default=False, nullable=False)
    verification_date = Column(DateTime, nullable=True)

    # Recipient
    recipient_type = Column(SQLEnum(RecipientType), nullable=True)
    beneficiary_name = Column(String(255), nullable=True)
    beneficiary_relationship = Column(String(255), nullable=True)
    beneficiary_reason = Column(Text, nullable=True)
    legal_entity_id = Column(String, ForeignKey("legal_entities.id"), nullable=True)
    legal_entity = relationship("LegalEntity")

    organizer_id = Column(String, ForeignKey("profiles.id"), nullable=False)
    organizer = relationship("Profile", back_populates="campaigns")

    media = relationship(
        "CampaignMedia",
        back_populates="campaign",
        cascade="all, delete-orphan",
        order_by="CampaignMedia.order_index",
    )
    verification = relationship(
        "CampaignVerification",
        back_populates="campaign",
        cascade="all, delete-orphan",
        uselist=False,
    )

    created_at = Column(DateTime, default=func.now())
    updated_at = Column(DateTime, default=func.now(), onupdate=func.now())

    __table_args__ = (
        Index('idx_campaign_organizer', 'organizer_id'),
        Index('idx_campaign_status', 'campaign_status'),
    )


class CampaignMedia(Base):
    __tablename__ = "campaign_media"

    id = Column(String, primary_key=True, default=_uuid)
    campaign_id = Column(String, ForeignKey("campaigns.id"), nullable=False, index=True)
    media_url = Column(String(1000), nullable=False)
    type = Column(SQLEnum(MediaType), nullable=False, default=MediaType.IMAGE)
    is_primary = Column(Boolean, default=False, nullable=False)
    order_index = Column(Integer, default=0, nullable=False)
    status = Column(String(20), default="active", nullable=False)

    campaign = relationship("Campaign", back_populates="media")

    created_at = Column(DateTime, default=func.now())


class CampaignVerification(Base):
    """Verification intake record, one per campaign"""
    __tablename__ = "campaign_verifications"

    id = Column(String, primary_key=True, default=_uuid)
    campaign_id = Column(String, ForeignKey("campaigns.id"), unique=True, nullable=False)
    verification_status = Column(
        SQLEnum(VerificationRequestStatus),
        default=VerificationRequestStatus.PENDING,
        nullable=False,
    )
    id_document_url = Column(String(1000), nullable=True)
    supporting_docs_urls = Column(JSON, nullable=True)
    campaign_story = Column(Text, nullable=True)
    reference_contact_name = Column(String(100), nullable=True)
    reference_contact_email = Column(String(255), nullable=True)
    reference_contact_phone = Column(String(20), nullable=True)

    campaign = relationship("Campaign", back_populates="verification")

    request_date = Column(DateTime, default=func.now())
    updated_at = Column(DateTime, default=func.now(), onupdate=func.now())


# Utility functions

def media_to_dict(media: CampaignMedia) -> Dict[str, Any]:
    """Convert CampaignMedia to dictionary for API responses"""
    return {
        'id': media.id,
        'media_url': media.media_url,
        'type': media.type.value if media.type else None,
        'is_primary': media.is_primary,
        'order_index': media.order_index,
    }


def legal_entity_to_dict(entity: LegalEntity) -> Dict[str, Any]:
    """Convert LegalEntity to dictionary for API responses"""
    return {
        'id': entity.id,
        'name': entity.name,
        'taxId': entity.tax_id,
        'entityType': entity.entity_type,
        'department': entity.department.value if entity.department else None,
        'city': entity.city,
        'description': entity.description,
    }


def verification_to_dict(verification: CampaignVerification) -> Dict[str, Any]:
    """Convert CampaignVerification to dictionary for API responses"""
    return {
        'id': verification.id,
        'campaign_id': verification.campaign_id,
        'verification_status': verification.verification_status.value if verification.verification_status else None,
        'id_document_url': verification.id_document_url,
        'supporting_docs_urls': verification.supporting_docs_urls or [],
        'reference_contact_name': verification.reference_contact_name,
        'request_date': verification.request_date.isoformat() if verification.request_date else None,
    }


def active_media(campaign: Campaign) -> List[CampaignMedia]:
    return sorted(
        [m for m in campaign.media if m.status == "active"],
        key=lambda m: m.order_index,
    )
