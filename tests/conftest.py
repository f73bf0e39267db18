import pytest

from confprime import templates
from confprime.experiment import Exper, SimClock
from confprime.record import TaskKind
from confprime.runner import load_config
from confprime.sender import DeliveryExhausted
from confprime.session import Session
from confprime.trials import TrialSpec


class RecordingSender:
    """Stands in for the save endpoint; remembers every submission.

    Submissions whose data contains any of the strings in
    ``fail_on`` raise DeliveryExhausted instead of being recorded.
    """

    def __init__(self, fail_on=()):
        self.calls = []
        self.fail_on = fail_on

    def save_data(self, name, data):
        if any(s in data for s in self.fail_on):
            raise DeliveryExhausted(3)
        self.calls.append((name, data))

    @property
    def lines(self):
        return [data for _, data in self.calls]


@pytest.fixture
def cfg():
    return load_config()


@pytest.fixture
def sender():
    return RecordingSender()


@pytest.fixture
def session():
    return Session('hmcondition', 'abc123')


@pytest.fixture
def short_trial_list():
    return [
        TrialSpec(TaskKind.PICTURE_SELECTION,
                  'The jeweler showed the rings to the couple.',
                  'crit_jeweler', 'd3'),
        TrialSpec(TaskKind.PICTURE_DESCRIPTION,
                  'discovers', 'fill_explorer', 'd2'),
    ]


@pytest.fixture
def make_exper(cfg, session, sender, short_trial_list):
    def make(**kwargs):
        kwargs.setdefault('session', session)
        kwargs.setdefault('sender', sender)
        kwargs.setdefault('clock', SimClock())
        kwargs.setdefault('trial_list', short_trial_list)
        return Exper(cfg, **kwargs)
    return make


@pytest.fixture(autouse=True)
def reset_template_override():
    yield
    templates.set_override_path(None)
