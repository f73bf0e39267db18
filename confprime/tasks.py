from __future__ import annotations

import random

from dataclasses import dataclass, field
from pathlib import Path
from typing import ClassVar, Any, Optional, TYPE_CHECKING

import confprime as cp

from . import templates, params
from .record import TaskKind, TrialRecord

if TYPE_CHECKING:
    from .experiment import Exper

# A Task represents a single console screen with some activity to be
# performed. Examples range from reading
# a page of text and pressing Enter, to choosing a picture
# during a trial, to waiting for the (simulated) partner.
# Tasks form a single chain; each is followed by at most one other.

@dataclass(frozen=True)
class TaskDesc:
    args: list[Any] = field(default_factory=list)
    kwargs: dict[str, Any] = field(default_factory=dict)


class TaskResponse:
    response: Any
    rt: Optional[int]

    def __init__(self, response: Any, rt: Optional[int] = None):
        self.response = response
        # msec from the start of the task to the response
        self.rt = rt


class Task:

    template: ClassVar[str] = ''
    # kind of trial data this task saves, if any
    task_kind: ClassVar[Optional[TaskKind]] = None
    needs_response: ClassVar[bool] = True

    inst: Exper
    template_name: str
    variables: dict[str, Any]
    prev_task: Optional[Task]
    successor: Optional[Task]
    duration_ms: Optional[int]
    post_trial_gap_ms: int
    id: int

    @classmethod
    def new(cls, inst: Exper, *posargs: Any, **kwargs: Any):
        if isinstance(posargs[0], type) and issubclass(posargs[0], Task):
            cls = posargs[0]
            posargs = posargs[1:]
        else:
            cls = Task
        return cls(inst, *posargs, **kwargs)

    def __init__(self, inst: Exper, template: str | None = None,
                 variables: dict[str, Any] | None = None,
                 duration_ms: int | None = None, post_trial_gap_ms: int = 0):
        self.inst = inst
        self.template_name = template or self.template
        self.variables = variables.copy() if variables else {}
        self.prev_task = None
        self.successor = None
        # if set, the screen advances on its own after this long
        self.duration_ms = duration_ms
        # pause after the response before the next task starts
        self.post_trial_gap_ms = post_trial_gap_ms
        self.inst.num_tasks_created += 1
        # tasks are numbered in the order they are created,
        # which is also the order they are completed
        self.id = self.inst.num_tasks_created
        self.inst.tasks_by_id[self.id] = self

    def template_filename(self):
        return f'task_{self.template_name}{templates.txt_ext}'

    def present(self) -> str:
        """Render the screen as console text.

        Task variables take precedence over the experiment-wide ones.
        """
        all_vars = self.inst.variables.copy()
        all_vars.update(self.variables)
        return templates.render(self.template_filename(), all_vars)

    def then(self, *posargs: Any, **kwargs: Any):
        assert self.successor is None, f'task {self.id} already has a successor'
        if isinstance(posargs[0], Task):
            task = posargs[0]
        else:
            task = self.new(self.inst, *posargs, **kwargs)
        task.prev_task = self
        self.successor = task
        return task

    def then_all(self, task_descriptors: list[Any]):
        cursor = self
        for task in task_descriptors:
            if isinstance(task, TaskDesc):
                cursor = cursor.then(*task.args, **task.kwargs)
            else:
                cursor = cursor.then(task)
        return cursor

    def next_task(self) -> Optional[Task]:
        return self.successor

    def start(self):
        """Called when the participant reaches this task."""
        pass

    def make_record(self, resp: TaskResponse, trial_index: int,
                    elapsed_ms: int) -> Optional[TrialRecord]:
        return None

    def parse_input(self, text: str) -> Any:
        """Turns a line of console input into a response.

        Raises ValueError (with a message for the participant)
        if the input is not acceptable.
        """
        return None

    def dummy_resp(self):
        return TaskResponse(None)


class Consent(Task):
    template = 'consent'

    def __init__(self, inst: Exper, **kwargs: Any):
        super().__init__(inst, variables={
            'title': params.consent_title,
            'paras': params.consent_paras,
            'button': params.consent_button
        }, **kwargs)

    def parse_input(self, text):
        if text.strip() not in ('', '1'):
            raise ValueError('Press 1 or Enter to consent')
        return 0

    def dummy_resp(self):
        # the only button is 'I consent'
        return TaskResponse(0, random.randint(2000, 8000))


class Preload(Task):
    template = 'preload'
    needs_response = False

    def __init__(self, inst: Exper, paths: list[str], **kwargs: Any):
        super().__init__(inst, variables={'paths': paths},
                         duration_ms=0, **kwargs)
        self.paths = paths

    def start(self):
        static_path = Path(self.inst.cfg['static_dir'])
        if not static_path.is_dir():
            cp.log.info(
                f'static dir \'{static_path}\' not found; not checking'
                f' {len(self.paths)} preload images')
            return
        missing = [p for p in self.paths if not (static_path / p).is_file()]
        for p in missing:
            cp.log.warning(f'preload image not found: {static_path / p}')
        cp.log.info(
            f'preloaded {len(self.paths) - len(missing)}'
            f'/{len(self.paths)} images')


class WriteHeaders(Task):
    template = 'write_headers'
    needs_response = False

    def __init__(self, inst: Exper, **kwargs: Any):
        super().__init__(inst, duration_ms=0, **kwargs)

    def start(self):
        self.inst.deliver(self.inst.saver.write_headers)


class Wait(Task):
    """A screen shown while the participant waits for their partner.

    Any response made during the wait is ignored.
    """

    template = 'wait'
    needs_response = False

    def __init__(self, inst: Exper, message: str, duration_ms: int,
                 choices: Optional[list[str]] = None, **kwargs: Any):
        super().__init__(inst, variables={
            'message': message,
            'choices': choices or []
        }, duration_ms=duration_ms, **kwargs)


class PictureSelection(Task):
    template = 'picture_selection'
    task_kind = TaskKind.PICTURE_SELECTION

    def __init__(self, inst: Exper, prompt: str, choices: list[str],
                 **kwargs: Any):
        super().__init__(inst, variables={
            'prompt': prompt,
            'choices': choices,
            'instruction': params.selection_instruction
        }, **kwargs)
        self.prompt = prompt
        self.choices = choices

    def make_record(self, resp, trial_index, elapsed_ms):
        if resp.response is None:
            button_selected = None
        else:
            button_selected = self.choices[resp.response]
        return TrialRecord(
            self.inst.session.participant_id, trial_index, self.task_kind,
            elapsed_ms, stimulus=self.prompt, choices=tuple(self.choices),
            response=resp.response, button_selected=button_selected,
            rt=resp.rt)

    def parse_input(self, text):
        try:
            choice = int(text)
        except ValueError:
            choice = 0
        if not 1 <= choice <= len(self.choices):
            raise ValueError(f'Enter a number from 1 to {len(self.choices)}')
        return choice - 1

    def dummy_resp(self):
        return TaskResponse(random.randrange(len(self.choices)),
                            random.randint(500, 3000))


class TextResponseTask(Task):
    """A task answered by typing some text (required)."""

    def parse_input(self, text):
        if not text.strip():
            raise ValueError('Please type a response')
        return text


class PictureDescription(TextResponseTask):
    template = 'picture_description'
    task_kind = TaskKind.PICTURE_DESCRIPTION

    def __init__(self, inst: Exper, prompt: str, target: str, foil: str,
                 image_order: list[str], **kwargs: Any):
        super().__init__(inst, variables={
            'prompt': prompt,
            'target': target,
            'images': image_order,
            'instruction': params.description_instruction
        }, **kwargs)
        self.prompt = prompt
        self.target = target
        self.foil = foil

    def make_record(self, resp, trial_index, elapsed_ms):
        return TrialRecord(
            self.inst.session.participant_id, trial_index, self.task_kind,
            elapsed_ms, target_image=self.target, foil_image=self.foil,
            text_response=resp.response, rt=resp.rt)

    def dummy_resp(self):
        return TaskResponse(f'the {self.target} {self.prompt}',
                            random.randint(4000, 15000))


class FreeResponse(TextResponseTask):
    template = 'free_response'
    task_kind = TaskKind.FREE_RESPONSE

    def __init__(self, inst: Exper, question: str, **kwargs: Any):
        super().__init__(inst, variables={'question': question}, **kwargs)

    def make_record(self, resp, trial_index, elapsed_ms):
        return TrialRecord(
            self.inst.session.participant_id, trial_index, self.task_kind,
            elapsed_ms, text_response=resp.response, rt=resp.rt)

    def dummy_resp(self):
        return TaskResponse('they seemed fine', random.randint(3000, 20000))


class Thankyou(Task):
    template = 'thankyou'

    def __init__(self, inst: Exper, **kwargs: Any):
        super().__init__(inst, variables={'paras': params.final_paras}, **kwargs)
