"""
Paramètres de la plateforme repris dans chaque contrat
"""
from dataclasses import dataclass
import os

from dotenv import load_dotenv

from constants import APP_NAME, DEFAULT_CONTRACT_PENALTY

load_dotenv()


@dataclass(frozen=True)
class ContractSettings:
    """
    Informations fixes de la plateforme (coordonnées bancaires, pénalité).
    Injectées explicitement dans le générateur de snapshot, qui ne lit
    jamais l'environnement lui-même.
    """
    plataforma_nome: str = APP_NAME
    banco: str = ""
    agencia: str = ""
    conta: str = ""
    chave_pix: str = ""
    multa_rescisoria: str = DEFAULT_CONTRACT_PENALTY

    @classmethod
    def from_env(cls) -> "ContractSettings":
        return cls(
            plataforma_nome=os.getenv("PLATAFORMA_NOME", APP_NAME),
            banco=os.getenv("PLATAFORMA_BANCO", ""),
            agencia=os.getenv("PLATAFORMA_AGENCIA", ""),
            conta=os.getenv("PLATAFORMA_CONTA", ""),
            chave_pix=os.getenv("PLATAFORMA_CHAVE_PIX", ""),
            multa_rescisoria=os.getenv("CONTRATO_MULTA_RESCISORIA", DEFAULT_CONTRACT_PENALTY),
        )


def get_contract_settings() -> ContractSettings:
    """Dépendance FastAPI, surchargée dans les tests"""
    return ContractSettings.from_env()
