"""Canonical order vocabularies shared by every consumer (services, JSON, docs).

Status values form one ordered pipeline; the transition graph, the progress
step and the labels are all derived from ORDER_PIPELINE so they cannot drift.
"""
from __future__ import annotations

STATUS_PENDING = 'pending'
STATUS_QUOTING = 'quoting'
STATUS_PURCHASED = 'purchased'
STATUS_SHIPPING = 'shipping'
STATUS_DELIVERED = 'delivered'

ORDER_PIPELINE = (
    STATUS_PENDING,
    STATUS_QUOTING,
    STATUS_PURCHASED,
    STATUS_SHIPPING,
    STATUS_DELIVERED,
)
TERMINAL_STATUS = ORDER_PIPELINE[-1]
IN_PROGRESS_STATUSES = ORDER_PIPELINE[1:-1]

STATUS_LABELS = {
    STATUS_PENDING: 'Pendente',
    STATUS_QUOTING: 'Em Cotação',
    STATUS_PURCHASED: 'Comprado',
    STATUS_SHIPPING: 'Saiu para Entrega',
    STATUS_DELIVERED: 'Entregue/Recebido',
}

URGENCY_LOW = 'low'
URGENCY_NORMAL = 'normal'
URGENCY_HIGH = 'high'
ALL_URGENCIES = (URGENCY_LOW, URGENCY_NORMAL, URGENCY_HIGH)
DEFAULT_URGENCY = URGENCY_NORMAL

URGENCY_LABELS = {
    URGENCY_LOW: 'Baixa',
    URGENCY_NORMAL: 'Normal',
    URGENCY_HIGH: 'Alta',
}

COST_CENTERS = (
    'Fazenda JFI',
    'Sítio 2 Meninos',
    'Casa Felipe',
    'Casa Irineia',
    'Fazenda Palmeiras',
    'Fazenda Novo Horizonte',
    'Sítio Vale',
    'Quinta do Faia',
    'Sítio Varginha',
)
