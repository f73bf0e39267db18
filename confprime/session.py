import random

from dataclasses import dataclass
from functools import cached_property
from typing import Any


def make_participant_id(length: int, symbols: str) -> str:
    return ''.join(random.choice(symbols) for _ in range(length))


@dataclass(frozen=True)
class Session:
    """A single participant's run.

    The participant ID is generated once, when the session is created,
    and names the output file that all of the participant's data
    lines are appended to.
    """

    condition_prefix: str
    participant_id: str

    @classmethod
    def create(cls, cfg: dict[str, Any]):
        return cls(
            cfg['condition_prefix'],
            make_participant_id(
                cfg['participant_id_length'], cfg['participant_id_symbols']))

    @cached_property
    def filename(self):
        return f'{self.condition_prefix}_{self.participant_id}.csv'

    def __str__(self):
        return self.filename
