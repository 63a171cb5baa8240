"""
Validateurs réutilisables pour l'application Drive Rent Hub
Centralisation de toute la logique de validation pour éviter la duplication
"""
import re
from typing import Optional


UF_CODES = {
    "AC", "AL", "AP", "AM", "BA", "CE", "DF", "ES", "GO", "MA", "MT", "MS", "MG", "PA",
    "PB", "PR", "PE", "PI", "RJ", "RN", "RS", "RO", "RR", "SC", "SP", "SE", "TO",
}


class CommonValidators:
    """Validateurs communs utilisés dans plusieurs schémas"""

    @staticmethod
    def blank_to_none(value: Optional[str]) -> Optional[str]:
        """
        Une chaîne vide équivaut à une valeur absente: elle ne doit jamais
        écraser une donnée existante lors d'un upsert
        """
        if value is None:
            return None
        value = str(value).strip()
        return value or None

    @staticmethod
    def validate_uf(uf: Optional[str]) -> Optional[str]:
        """
        Valide une sigle d'unité fédérative (SP, RJ, ...)
        """
        uf = CommonValidators.blank_to_none(uf)
        if uf is None:
            return uf

        uf = uf.upper()
        if uf not in UF_CODES:
            raise ValueError('UF inválida')
        return uf

    @staticmethod
    def validate_cep(cep: Optional[str]) -> Optional[str]:
        """
        Valide le CEP brésilien et le normalise au format 00000-000
        """
        cep = CommonValidators.blank_to_none(cep)
        if cep is None:
            return cep

        digits = re.sub(r'\D', '', cep)
        if len(digits) != 8:
            raise ValueError('CEP deve conter 8 dígitos')
        return f"{digits[:5]}-{digits[5:]}"
