"""
Constantes centralisées pour l'application Drive Rent Hub
Standardisation des valeurs et conventions utilisées dans l'application
"""

# ==================== CONFIGURATION GÉNÉRALE ====================

APP_NAME = "Drive Rent Hub"
APP_VERSION = "1.0.0"
APP_DESCRIPTION = "Marketplace de locação de veículos entre proprietários e motoristas"

# ==================== CONFIGURATION DE SÉCURITÉ ====================

JWT_ALGORITHM = "HS256"
DEFAULT_ACCESS_TOKEN_EXPIRE_MINUTES = 60 * 24

# ==================== DADOS LEGAIS ====================

# Les 12 champs exigés pour chaque partie avant de générer un contrat
LEGAL_REQUIRED_FIELDS = (
    "rg",
    "orgao_expeditor",
    "uf_rg",
    "nacionalidade",
    "estado_civil",
    "profissao",
    "endereco_logradouro",
    "endereco_numero",
    "endereco_bairro",
    "endereco_cidade",
    "endereco_uf",
    "endereco_cep",
)

# ==================== CONTRATS ====================

DEFAULT_CONTRACT_PENALTY = "R$ 1.600,00 (mil e seiscentos reais)"

# Plafond de Aluguel.valor_total, colonne Numeric(10, 2)
MAX_RENTAL_TOTAL = 99_999_999.99

DATE_FORMAT_BR = "%d/%m/%Y"

# ==================== LISTES ====================

DEFAULT_LIST_LIMIT = 100

# ==================== MESSAGES D'ERREUR ====================

ERROR_MESSAGES = {
    "not_authenticated": "Usuário não autenticado",
    "invalid_token": "Token inválido",
    "forbidden": "Acesso negado",
    "only_drivers": "Apenas motoristas",
    "only_owners": "Apenas proprietários",
    "not_vehicle_owner": "Você não é o proprietário deste veículo",
    "vehicle_not_found": "Veículo não encontrado",
    "driver_not_found": "Motorista não encontrado",
    "owner_not_found": "Proprietário não encontrado",
    "vehicle_without_owner": "Veículo sem proprietário",
    "vehicle_unavailable": "Veículo não está disponível",
    "request_not_found": "Solicitação não encontrada",
    "request_not_pending": "Solicitação não está pendente",
    "contract_not_found": "Contrato não encontrado",
    "contract_not_negotiating": "Contrato não está em negociação",
    "contract_not_signable": "Contrato não pode ser assinado no status atual",
    "not_contract_driver": "Você não é o motorista deste contrato",
    "rental_conflict": "Conflito de datas com outro aluguel do veículo",
    "invalid_dates": "Datas inválidas",
    "invalid_daily_rate": "valor_por_dia deve ser um número positivo",
    "invalid_total": "valor_total fora do intervalo permitido",
    "incomplete_legal_data": "Dados legais incompletos",
    "nothing_to_update": "Nada para atualizar",
    "invalid_data": "Dados inválidos",
    "internal_error": "Erro interno do servidor",
}
