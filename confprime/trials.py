from __future__ import annotations

import csv
import random

from dataclasses import dataclass
from pathlib import Path
from typing import Any

import confprime as cp

from . import params
from .record import TaskKind, UnknownTaskKind
from .tasks import TaskDesc, Wait, PictureSelection, PictureDescription


@dataclass(frozen=True)
class TrialSpec:
    kind: TaskKind
    prompt: str
    target: str
    distractor: str


# Random waits simulate the partner pondering what to say
# or hunting for the correct image. Each returns a duration
# in msec drawn uniformly from the configured [lo, hi) range.

def _wait(rng: list[int]) -> int:
    lo, hi = rng
    return random.randrange(lo, hi)


def random_wait(cfg: dict[str, Any]):
    return _wait(cfg['random_wait_ms'])


def typing_random_wait(cfg: dict[str, Any]):
    return _wait(cfg['typing_random_wait_ms'])


def longer_random_wait(cfg: dict[str, Any]):
    return _wait(cfg['longer_random_wait_ms'])


def trial_list_path(cfg: dict[str, Any]) -> Path:
    path = Path(cfg['trial_list'])
    if path.is_absolute() or path.is_file():
        return path
    # bare names refer to the lists shipped with the package
    return cp.pkg_path / 'trial_lists' / path


def read_trial_list(path: Path | str) -> list[TrialSpec]:
    cp.log.info(f'reading trial list {path}')
    specs = []
    with open(path, newline='') as f:
        for row in csv.DictReader(f):
            kind = TaskKind.parse(row['participant_task'])
            if kind not in (TaskKind.PICTURE_SELECTION,
                            TaskKind.PICTURE_DESCRIPTION):
                raise UnknownTaskKind(row['participant_task'])
            specs.append(TrialSpec(
                kind, row['prompt'], row['target'], row['distractor']))
    cp.log.info(f'read {len(specs)} trials')
    return specs


def image_path(image_id: str, cfg: dict[str, Any]):
    return f'{cfg["image_dir"]}/{image_id}{cfg["image_ext"]}'


def preload_paths(specs: list[TrialSpec], cfg: dict[str, Any]) -> list[str]:
    # each image is requested once, in the order first referenced
    paths = {}
    for spec in specs:
        for image_id in (spec.target, spec.distractor):
            paths[image_path(image_id, cfg)] = None
    return list(paths)


def make_picture_selection_trial(spec: TrialSpec, cfg: dict[str, Any]):
    choices = random.sample([spec.target, spec.distractor], 2)
    return [
        # delay before the partner starts "speaking";
        # clicks on the pictures are ignored here
        TaskDesc([Wait, params.partner_typing_msg, typing_random_wait(cfg)],
                 {'choices': choices}),
        TaskDesc([PictureSelection, spec.prompt, choices],
                 {'post_trial_gap_ms': cfg['post_trial_gap_ms']})
    ]


def make_picture_description_trial(spec: TrialSpec, cfg: dict[str, Any]):
    image_order = random.sample([spec.target, spec.distractor], 2)
    return [
        TaskDesc([PictureDescription, spec.prompt, spec.target,
                  spec.distractor, image_order]),
        # the partner "selects" the picture that was described
        TaskDesc([Wait, params.partner_selecting_msg, random_wait(cfg)])
    ]


_trial_makers = {
    TaskKind.PICTURE_SELECTION: make_picture_selection_trial,
    TaskKind.PICTURE_DESCRIPTION: make_picture_description_trial,
}


def interaction_tasks(specs: list[TrialSpec], cfg: dict[str, Any]):
    tasks: list[TaskDesc] = []
    for spec in specs:
        tasks.extend(_trial_makers[spec.kind](spec, cfg))
    return tasks
