# poolservice/estimates/status.py

"""Estimate workflow statuses and the transitions allowed between them."""

from types import MappingProxyType

DRAFT = 'draft'
SENT = 'sent'
INTERNAL_FINAL = 'internal_final'
CONVERTED = 'converted'
DECLINED = 'declined'

ESTIMATE_STATUSES = (DRAFT, SENT, INTERNAL_FINAL, CONVERTED, DECLINED)

STATUS_LABELS = MappingProxyType({
    DRAFT: 'Draft',
    SENT: 'Sent',
    INTERNAL_FINAL: 'Final',
    CONVERTED: 'Converted',
    DECLINED: 'Declined',
})

# converted is terminal; declined -> draft is the only way back
STATUS_TRANSITIONS = MappingProxyType({
    DRAFT: frozenset({SENT}),
    SENT: frozenset({INTERNAL_FINAL, CONVERTED, DECLINED}),
    INTERNAL_FINAL: frozenset({CONVERTED, DECLINED}),
    CONVERTED: frozenset(),
    DECLINED: frozenset({DRAFT}),
})


def is_valid_transition(current: str, target: str) -> bool:
    return target in STATUS_TRANSITIONS.get(current, frozenset())


def allowed_next_statuses(current: str) -> list:
    """Allowed targets for ``current`` in workflow order."""
    allowed = STATUS_TRANSITIONS.get(current, frozenset())
    return [s for s in ESTIMATE_STATUSES if s in allowed]


def status_label(status: str) -> str:
    return STATUS_LABELS.get(status, STATUS_LABELS[DRAFT])


def is_editable(status: str) -> bool:
    return status != CONVERTED
