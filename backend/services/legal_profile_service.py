"""
Service des dados legais (RG, état civil, adresse...) des motoristas et proprietários
"""
from typing import Dict, List, Optional, Type, Union
from sqlalchemy.orm import Session

from constants import LEGAL_REQUIRED_FIELDS
from enums import PartySide
from models import MotoristaLegal, ProprietarioLegal
from schemas import DadosLegaisIn

LegalProfile = Union[MotoristaLegal, ProprietarioLegal]


class LegalProfileService:
    """
    Upsert paresseux et contrôle de complétude des dados legais.
    N'effectue aucun commit: l'appelant possède la transaction.
    """

    _MODELS: Dict[PartySide, Type] = {
        PartySide.MOTORISTA: MotoristaLegal,
        PartySide.PROPRIETARIO: ProprietarioLegal,
    }
    _KEYS = {
        PartySide.MOTORISTA: "motorista_id",
        PartySide.PROPRIETARIO: "proprietario_id",
    }

    @staticmethod
    def get(db: Session, side: PartySide, party_id: int) -> Optional[LegalProfile]:
        model = LegalProfileService._MODELS[side]
        return db.get(model, party_id)

    @staticmethod
    def upsert(
        db: Session,
        side: PartySide,
        party_id: int,
        payload: Optional[DadosLegaisIn]
    ) -> Optional[LegalProfile]:
        """
        Fusionne les champs non vides du payload dans le profil existant
        (créé au besoin) et retourne le profil relu.
        """
        profile = LegalProfileService.get(db, side, party_id)
        fields = payload.non_empty_fields() if payload else {}

        if not fields:
            return profile

        if profile is None:
            model = LegalProfileService._MODELS[side]
            profile = model(**{LegalProfileService._KEYS[side]: party_id})
            db.add(profile)

        for key, value in fields.items():
            setattr(profile, key, value)

        db.flush()
        return profile

    @staticmethod
    def missing_fields(profile: Optional[LegalProfile]) -> List[str]:
        """Champs obligatoires encore vides (tous si aucun profil)"""
        if profile is None:
            return list(LEGAL_REQUIRED_FIELDS)
        return [
            field for field in LEGAL_REQUIRED_FIELDS
            if not (getattr(profile, field, None) or "").strip()
        ]

    @staticmethod
    def describe(profile: Optional[LegalProfile]) -> dict:
        """Vue sérialisable d'un profil avec son état de complétude"""
        data = {field: getattr(profile, field, None) if profile else None for field in LEGAL_REQUIRED_FIELDS}
        missing = LegalProfileService.missing_fields(profile)
        data["completo"] = not missing
        data["campos_faltantes"] = missing
        return data
