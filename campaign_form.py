"""
Form state for the campaign-creation wizard.

Holds every field the organizer edits, a parallel error map keyed by field
name, and the validation rules for each of the seven compose sub-steps and
the recipient step. Validation never raises; it returns the violated fields
and refreshes the error map.
"""

import logging
import re
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Dict, Iterable, List, Optional

from media import MediaItem, normalize_media
from models import CampaignCategory, RecipientType
from regions import DEFAULT_DEPARTMENT, is_department, is_province_in_department

logger = logging.getLogger(__name__)

COMPOSE_SUBSTEPS = 7
MAX_GOAL_AMOUNT = 150000

TITLE_MIN, TITLE_MAX = 3, 80
DESCRIPTION_MIN, DESCRIPTION_MAX = 10, 150
STORY_MIN, STORY_MAX = 10, 600
BENEFICIARY_NAME_MIN = 3
BENEFICIARY_REASON_MIN = 10

YOUTUBE_URL_PATTERN = re.compile(r"^(https?://)?(www\.)?(youtube\.com|youtu\.?be)/.+$")
_THOUSANDS = re.compile(r"\B(?=(\d{3})+(?!\d))")
_NON_DIGITS = re.compile(r"\D")

# Fields checked by each compose sub-step
SUBSTEP_FIELDS = {
    1: ("title", "description"),
    2: ("category",),
    3: ("goal_amount",),
    4: ("media", "youtube_links"),
    5: ("location", "province"),
    6: ("end_date",),
    7: ("story",),
}

SUBSTEP_TITLES = {
    1: "Nombre y descripción",
    2: "Categoría",
    3: "Meta de recaudación",
    4: "Imágenes y videos",
    5: "Ubicación",
    6: "Fecha de finalización",
    7: "Presentación de la campaña",
}

RECIPIENT_FIELDS = (
    "recipient_type", "beneficiary_name", "beneficiary_relationship",
    "beneficiary_reason", "legal_entity_id",
)


def strip_separators(value) -> str:
    """Remove the thousands separators added by format_goal_amount"""
    return str(value if value is not None else "").replace(".", "")


def format_goal_amount(value) -> str:
    """Keep the digits and group them in thousands with '.'"""
    digits = _NON_DIGITS.sub("", str(value if value is not None else ""))
    return _THOUSANDS.sub(".", digits)


def parse_goal_amount(value) -> Optional[int]:
    digits = _NON_DIGITS.sub("", strip_separators(value))
    return int(digits) if digits else None


def is_valid_youtube_url(url: str) -> bool:
    return bool(YOUTUBE_URL_PATTERN.match(url or ""))


@dataclass(frozen=True)
class FieldError:
    field: str
    message: str


@dataclass
class CampaignFormState:
    campaign_id: Optional[str] = None
    status: str = "draft"
    verification_requested: bool = False

    title: str = ""
    description: str = ""
    category: str = ""
    goal_amount: str = ""
    story: str = ""
    beneficiaries_description: str = ""
    location: str = DEFAULT_DEPARTMENT
    province: Optional[str] = None
    end_date: Optional[date] = None
    youtube_links: List[str] = field(default_factory=list)
    media: List[MediaItem] = field(default_factory=list)

    recipient_type: Optional[str] = None
    beneficiary_name: str = ""
    beneficiary_relationship: str = ""
    beneficiary_reason: str = ""
    legal_entity_id: Optional[str] = None

    errors: Dict[str, str] = field(default_factory=dict)

    # Mutation

    def set(self, name: str, value):
        """Set a field, coercing it to its stored form"""
        if name in ("campaign_id", "errors") or name not in self.__dataclass_fields__:
            raise ValueError(f"Unknown form field: {name}")

        if name == "goal_amount":
            value = format_goal_amount(value)
        elif name == "end_date":
            value = _coerce_date(value)
        elif name == "youtube_links":
            value = [link.strip() for link in (value or []) if link and link.strip()]
        elif name == "media":
            value = normalize_media(list(value or []))
        elif name in ("title", "description", "story", "beneficiaries_description",
                      "beneficiary_name", "beneficiary_relationship", "beneficiary_reason"):
            value = value or ""

        setattr(self, name, value)
        self.errors.pop(name, None)

        if name == "location" and self.province and not is_province_in_department(self.province, value):
            logger.info(f"Province {self.province} cleared after location changed to {value}")
            self.province = None
            self.errors.pop("province", None)

    def update(self, **values):
        for name, value in values.items():
            self.set(name, value)

    @property
    def goal_amount_value(self) -> Optional[int]:
        return parse_goal_amount(self.goal_amount)

    # Validation

    def validate_step(self, substep: int) -> List[FieldError]:
        """Validate one compose sub-step (1-7)"""
        if substep not in SUBSTEP_FIELDS:
            raise ValueError(f"Invalid sub-step: {substep}")
        return self._validate(SUBSTEP_FIELDS[substep])

    def validate_compose(self) -> List[FieldError]:
        fields = [name for substep in sorted(SUBSTEP_FIELDS) for name in SUBSTEP_FIELDS[substep]]
        return self._validate(fields)

    def validate_recipient(self, legal_entity_ids: Optional[Iterable[str]] = None) -> List[FieldError]:
        """
        Validate the recipient selection of step 2.

        legal_entity_ids is the list loaded from the legal-entity lookup; a
        persona_juridica selection must be one of them.
        """
        violations = self._recipient_errors(legal_entity_ids)
        self._record(RECIPIENT_FIELDS, violations)
        return violations

    def validate_all(self, legal_entity_ids: Optional[Iterable[str]] = None) -> List[FieldError]:
        violations = self.validate_compose()
        recipient = self._recipient_errors(legal_entity_ids)
        for error in recipient:
            self.errors[error.field] = error.message
        return violations + recipient

    def _validate(self, fields: Iterable[str]) -> List[FieldError]:
        fields = list(fields)
        violations = []
        for name in fields:
            message = self._check(name)
            if message:
                violations.append(FieldError(name, message))
        self._record(fields, violations)
        return violations

    def _record(self, fields: Iterable[str], violations: List[FieldError]):
        for name in fields:
            self.errors.pop(name, None)
        for error in violations:
            self.errors[error.field] = error.message

    def _check(self, name: str) -> Optional[str]:
        if name == "title":
            if len(self.title) < TITLE_MIN:
                return "El título debe tener al menos 3 caracteres"
            if len(self.title) > TITLE_MAX:
                return "El título no puede tener más de 80 caracteres"
        elif name == "description":
            if len(self.description) < DESCRIPTION_MIN:
                return "La descripción debe tener al menos 10 caracteres"
            if len(self.description) > DESCRIPTION_MAX:
                return "La descripción no puede tener más de 150 caracteres"
        elif name == "category":
            if self.category not in {c.value for c in CampaignCategory}:
                return "Debes seleccionar una categoría"
        elif name == "goal_amount":
            amount = self.goal_amount_value
            if not amount:
                return "Debes establecer una meta de recaudación"
            if amount > MAX_GOAL_AMOUNT:
                return "La meta de recaudación no puede superar Bs. 150.000"
        elif name == "media":
            if not self.media:
                return "Debes subir al menos una imagen"
        elif name == "youtube_links":
            invalid = [link for link in self.youtube_links if not is_valid_youtube_url(link)]
            if invalid:
                return f"Enlace de YouTube no válido: {invalid[0]}"
        elif name == "location":
            if not is_department(self.location):
                return "Debes seleccionar una ubicación"
        elif name == "province":
            if self.province and not is_province_in_department(self.province, self.location):
                return "La provincia no corresponde al departamento seleccionado"
        elif name == "end_date":
            if not self.end_date:
                return "Debes seleccionar una fecha de finalización"
            if self.end_date <= date.today():
                return "La fecha de finalización debe ser posterior a hoy"
        elif name == "story":
            if len(self.story) < STORY_MIN:
                return "La presentación de la campaña debe tener al menos 10 caracteres"
            if len(self.story) > STORY_MAX:
                return "La presentación de la campaña no puede tener más de 600 caracteres"
        return None

    def _recipient_errors(self, legal_entity_ids: Optional[Iterable[str]]) -> List[FieldError]:
        if self.recipient_type not in {r.value for r in RecipientType}:
            return [FieldError("recipient_type", "Debes seleccionar quién recibirá los fondos")]

        violations = []
        if self.recipient_type == RecipientType.OTRA_PERSONA.value:
            required = ("beneficiary_name", "beneficiary_relationship", "beneficiary_reason")
            missing = [name for name in required if not getattr(self, name).strip()]
            for name in missing:
                violations.append(FieldError(name, "Por favor completa todos los campos requeridos."))
            if "beneficiary_name" not in missing and len(self.beneficiary_name.strip()) < BENEFICIARY_NAME_MIN:
                violations.append(FieldError("beneficiary_name", "El nombre debe tener al menos 3 caracteres."))
            if "beneficiary_reason" not in missing and len(self.beneficiary_reason.strip()) < BENEFICIARY_REASON_MIN:
                violations.append(FieldError("beneficiary_reason", "Por favor explica con más detalle el motivo."))

        elif self.recipient_type == RecipientType.PERSONA_JURIDICA.value:
            if not self.legal_entity_id:
                violations.append(FieldError("legal_entity_id", "Por favor selecciona una organización."))
            elif legal_entity_ids is None or self.legal_entity_id not in set(legal_entity_ids):
                violations.append(FieldError("legal_entity_id", "La organización seleccionada no es válida."))

        return violations


def _coerce_date(value) -> Optional[date]:
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(str(value)[:10])
    except ValueError:
        logger.warning(f"Ignoring unparseable end date: {value!r}")
        return None
