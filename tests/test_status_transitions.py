import os
import sys

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from poolservice.estimates.status import (
    ESTIMATE_STATUSES,
    STATUS_TRANSITIONS,
    allowed_next_statuses,
    is_editable,
    is_valid_transition,
    status_label,
)
from poolservice.estimates.utils import check_status_change


def test_converted_is_terminal():
    for target in ESTIMATE_STATUSES:
        assert not is_valid_transition('converted', target)


def test_declined_reopens_to_draft_only():
    assert is_valid_transition('declined', 'draft')
    for target in ('sent', 'internal_final', 'converted', 'declined'):
        assert not is_valid_transition('declined', target)


def test_draft_cannot_jump_to_converted():
    assert not is_valid_transition('draft', 'converted')
    assert is_valid_transition('draft', 'sent')


def test_forward_paths():
    assert is_valid_transition('sent', 'internal_final')
    assert is_valid_transition('sent', 'converted')
    assert is_valid_transition('sent', 'declined')
    assert is_valid_transition('internal_final', 'converted')
    assert is_valid_transition('internal_final', 'declined')
    assert not is_valid_transition('internal_final', 'sent')


def test_unknown_statuses_rejected():
    assert not is_valid_transition('archived', 'draft')
    assert not is_valid_transition('draft', 'archived')


def test_table_is_read_only():
    try:
        STATUS_TRANSITIONS['converted'] = frozenset({'draft'})
    except TypeError:
        pass
    else:
        raise AssertionError('transition table should be immutable')


def test_allowed_next_statuses_in_workflow_order():
    assert allowed_next_statuses('sent') == ['internal_final', 'converted', 'declined']
    assert allowed_next_statuses('converted') == []


def test_labels_and_editability():
    assert status_label('internal_final') == 'Final'
    assert status_label('bogus') == 'Draft'
    assert is_editable('sent')
    assert not is_editable('converted')


def test_check_status_change_returns_named_error():
    result = check_status_change('draft', 'converted')
    assert not result.ok
    assert result.errors[0].field == 'invalid_transition'
    assert "from 'draft' to 'converted'" in result.errors[0].message

    result = check_status_change('draft', 'sent')
    assert result.ok
    assert result.value == 'sent'
