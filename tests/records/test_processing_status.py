import pytest

from extractly.records.models import ProcessingStatus

ALLOWED = {
    ("pending", "processing"),
    ("processing", "completed"),
    ("processing", "failed"),
}


@pytest.mark.parametrize("current", list(ProcessingStatus))
@pytest.mark.parametrize("target", list(ProcessingStatus))
def test_only_forward_transitions(current, target):
    expected = (current.value, target.value) in ALLOWED
    assert current.can_transition_to(target) is expected


def test_terminal_statuses():
    assert ProcessingStatus.COMPLETED.is_terminal
    assert ProcessingStatus.FAILED.is_terminal
    assert not ProcessingStatus.PENDING.is_terminal
    assert not ProcessingStatus.PROCESSING.is_terminal
