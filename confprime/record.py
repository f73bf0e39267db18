from __future__ import annotations

import csv
import io

from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Optional, TYPE_CHECKING

import confprime as cp

if TYPE_CHECKING:
    from .sender import Sender
    from .session import Session


# written in place of any column that doesn't apply to a trial's kind
NA = 'NA'

HEADER = (
    'participant_id', 'trial_index', 'participant_task', 'time_elapsed',
    'sound_file', 'target_image', 'foil_image',
    'button_choice0', 'button_choice1',
    'response', 'button_selected', 'rt'
)


class UnknownTaskKind(ValueError):
    def __init__(self, value: Any):
        super().__init__(f'unknown task kind \'{value}\'')
        self.value = value


class TaskKind(Enum):
    PICTURE_SELECTION = 'picture_selection'
    PICTURE_DESCRIPTION = 'picture_description'
    FREE_RESPONSE = 'free_response'

    @classmethod
    def parse(cls, value: TaskKind | str) -> TaskKind:
        if isinstance(value, cls):
            return value
        try:
            return cls(value)
        except ValueError:
            raise UnknownTaskKind(value) from None


@dataclass(frozen=True)
class TrialRecord:
    participant_id: str
    trial_index: int
    task_kind: TaskKind
    elapsed_ms: int
    stimulus: Optional[str] = None
    target_image: Optional[str] = None
    foil_image: Optional[str] = None
    choices: Optional[tuple[str, str]] = None
    response: Optional[int] = None
    button_selected: Optional[str] = None
    text_response: Optional[str] = None
    rt: Optional[int] = None

    def __post_init__(self):
        # frozen, so bypass __setattr__
        object.__setattr__(self, 'task_kind', TaskKind.parse(self.task_kind))
        if self.choices is not None:
            object.__setattr__(self, 'choices', tuple(self.choices))
        if self.task_kind == TaskKind.PICTURE_SELECTION and \
           (self.choices is None or len(self.choices) != 2):
            raise ValueError(
                f'picture selection trial needs two choices (got {self.choices})')


def _selection_cols(rec: TrialRecord) -> list[Any]:
    return [rec.stimulus, NA, NA, *rec.choices,
            rec.response, rec.button_selected, rec.rt]


def _description_cols(rec: TrialRecord) -> list[Any]:
    # text response goes in an extra column after button_selected
    return [NA, rec.target_image, rec.foil_image, NA, NA, NA, NA,
            rec.text_response, rec.rt]


def _free_response_cols(rec: TrialRecord) -> list[Any]:
    return [NA, NA, NA, NA, NA, NA, NA, rec.text_response, rec.rt]


_layouts: dict[TaskKind, Callable[[TrialRecord], list[Any]]] = {
    TaskKind.PICTURE_SELECTION: _selection_cols,
    TaskKind.PICTURE_DESCRIPTION: _description_cols,
    TaskKind.FREE_RESPONSE: _free_response_cols,
}

# every kind must have a layout
assert set(_layouts) == set(TaskKind), \
    f'no column layout for {set(TaskKind) - set(_layouts)}'


def _join(fields: list[Any] | tuple[Any, ...]) -> str:
    f = io.StringIO()
    # NB: None is written as the empty string
    csv.writer(f, lineterminator='\n').writerow(fields)
    return f.getvalue()


HEADER_LINE = _join(HEADER)


def format_line(rec: TrialRecord) -> str:
    fields = [rec.participant_id, rec.trial_index,
              rec.task_kind.value, rec.elapsed_ms]
    fields.extend(_layouts[rec.task_kind](rec))
    return _join(fields)


class DataSaver:
    """Writes one participant's data, line by line, via a Sender.

    The header line always goes out before the first trial line.
    """

    session: Session
    sender: Sender
    headers_written: bool

    def __init__(self, session: Session, sender: Sender):
        self.session = session
        self.sender = sender
        self.headers_written = False

    def write_headers(self):
        self.headers_written = True
        cp.log.info(f'writing headers to {self.session.filename}')
        self.sender.save_data(self.session.filename, HEADER_LINE)

    def save_trial(self, rec: TrialRecord):
        if not self.headers_written:
            self.write_headers()
        cp.log.debug(
            f'saving trial {rec.trial_index} ({rec.task_kind.value})'
            f' to {self.session.filename}')
        self.sender.save_data(self.session.filename, format_line(rec))
