from __future__ import annotations

import sys
import time

from enum import Enum
from typing import Any, Callable, Optional, Protocol, TextIO

import confprime as cp

from . import tasks, trials, params
from .record import DataSaver
from .sender import DeliveryExhausted, Sender
from .session import Session


class State(Enum):
    ACTIVE = 0
    COMPLETE = 1
    TERMINATED = 2


class Clock:

    def monotonic(self) -> float:
        return time.monotonic()

    def sleep(self, secs: float):
        time.sleep(secs)


class SimClock(Clock):
    """Simulated time for dummy runs; sleeping advances
    the clock without actually waiting."""

    def __init__(self):
        self.now = 0.0

    def monotonic(self):
        return self.now

    def sleep(self, secs):
        self.now += secs


class Responder(Protocol):

    def show(self, task: tasks.Task) -> None:
        ...

    def respond(self, task: tasks.Task) -> tasks.TaskResponse:
        ...


class Exper:
    """One participant's run through the experiment timeline.

    Trial data is saved as each trial is completed; the save finishes
    (or finally fails) before the next task starts.
    """

    cfg: dict[str, Any]
    session: Session
    saver: DataSaver
    clock: Clock
    trial_list: list[trials.TrialSpec]
    task: tasks.Task
    first_task: tasks.Task
    tasks_by_id: dict[int, tasks.Task]
    num_tasks_created: int
    trial_index: int
    state: State
    start_time: float
    end_time: Optional[float]
    variables: dict[str, Any]

    def __init__(self, cfg: dict[str, Any], sender: Sender,
                 session: Optional[Session] = None, clock: Optional[Clock] = None,
                 trial_list: Optional[list[trials.TrialSpec]] = None):
        self.cfg = cfg
        self.session = session or Session.create(cfg)
        self.saver = DataSaver(self.session, sender)
        self.clock = clock or Clock()
        if trial_list is None:
            trial_list = trials.read_trial_list(trials.trial_list_path(cfg))
        self.trial_list = trial_list

        # total number of task instances created
        self.num_tasks_created = 0
        self.tasks_by_id = {}
        # number of tasks completed so far
        # (so also the index of the current task)
        self.trial_index = 0
        self.responder: Optional[Responder] = None

        self.state = State.ACTIVE
        self.start_time = self.clock.monotonic()
        self.end_time = None

        # template variables shared by all tasks
        self.variables = {
            'exp_participant_id': self.session.participant_id,
            'exp_img': cfg['image_dir'],
            'exp_img_ext': cfg['image_ext'],
        }

        cp.log.info(f'new session {self.session.participant_id}'
                    f' (saving to {self.session.filename})')
        self.create_tasks()
        self.first_task = self.task

    @property
    def pid(self):
        return self.session.participant_id

    def create_tasks(self):
        specs = self.trial_list
        self.task = tasks.Consent(self)
        (self.task.then(tasks.Preload, trials.preload_paths(specs, self.cfg))
         .then(tasks.WriteHeaders)
         .then('instructions', {'paras': params.instructions_paras})
         .then(tasks.Wait, params.waiting_room_msg,
               trials.longer_random_wait(self.cfg))
         .then_all(trials.interaction_tasks(specs, self.cfg))
         .then(tasks.FreeResponse, params.thoughts_on_partner)
         .then(tasks.Thankyou))

    @classmethod
    def dummy_run(cls, inst_count: int, cfg: dict[str, Any], sender: Sender,
                  realtime: bool = False):
        trial_list = trials.read_trial_list(trials.trial_list_path(cfg))
        insts = []
        for i in range(inst_count):
            clock = Clock() if realtime else SimClock()
            inst = cls(cfg, sender, clock=clock, trial_list=trial_list)
            cp.log.info(f'dummy run {i + 1}/{inst_count}: {inst.pid}')
            inst.run(DummyResponder(clock))
            insts.append(inst)
        return insts

    def run(self, responder: Responder):
        self.responder = responder
        try:
            self._start_task()
            while self.state == State.ACTIVE:
                if self.task.needs_response:
                    resp = responder.respond(self.task)
                else:
                    responder.show(self.task)
                    if self.task.duration_ms:
                        self.clock.sleep(self.task.duration_ms/1000)
                    resp = tasks.TaskResponse(None)
                self._next_task(resp)
        except (KeyboardInterrupt, EOFError):
            cp.log.info(f'{self.pid} interrupted')
            self.end(State.TERMINATED)
        return self.state

    def deliver(self, save: Callable[..., Any], *args: Any):
        try:
            save(*args)
        except DeliveryExhausted as exc:
            # the experiment carries on; this data is lost
            cp.log.error(f'{self.pid} failed to save data: {exc}')

    def status(self):
        elapsed = self._elapsed_time()
        elapsed_min = int(elapsed//60)
        elapsed_sec = int(elapsed) % 60
        return {
            'participant': self.pid,
            'task': self.task.id,
            'state': self.state.name,
            'elapsed': f'{elapsed_min:02}:{elapsed_sec:02}'
        }

    def end(self, state: State):
        self.end_time = self.clock.monotonic()
        self.state = state
        status = self.status()
        cp.log.info(f'{self.pid} ended ({state.name}) at task'
                    f' {status["task"]} after {status["elapsed"]}')

    def _start_task(self):
        self.task.start()
        if self.task.next_task() is None:
            # The final task is typically a "thank you" screen.
            # No response is collected from it.
            assert self.responder
            self.responder.show(self.task)
            self.end(State.COMPLETE)

    def _next_task(self, resp: tasks.TaskResponse):
        self._store_resp(resp)
        cp.log.debug(f'{self.pid} completed "{self.task.template_name}"'
                     f' ({self.task.id})')
        if self.task.post_trial_gap_ms:
            self.clock.sleep(self.task.post_trial_gap_ms/1000)
        self.trial_index += 1
        next_task = self.task.next_task()
        assert next_task
        self.task = next_task
        self._start_task()

    def _store_resp(self, resp: tasks.TaskResponse):
        rec = self.task.make_record(resp, self.trial_index, self._elapsed_ms())
        if rec:
            self.deliver(self.saver.save_trial, rec)

    def _elapsed_time(self):
        if self.state == State.ACTIVE:
            return self.clock.monotonic() - self.start_time
        else:
            assert self.end_time is not None
            return self.end_time - self.start_time

    def _elapsed_ms(self):
        return int(self._elapsed_time()*1000)


class DummyResponder:
    """Answers every task with its dummy response."""

    def __init__(self, clock: Clock):
        self.clock = clock

    def show(self, task):
        pass

    def respond(self, task):
        resp = task.dummy_resp()
        if resp.rt:
            # time passes while the dummy participant "thinks"
            self.clock.sleep(resp.rt/1000)
        return resp


class ConsoleResponder:
    """Shows each task in the terminal and reads the participant's
    response from standard input."""

    def __init__(self, clock: Clock, input: Callable[[str], str] = input,
                 output: TextIO = sys.stdout):
        self.clock = clock
        self.input = input
        self.output = output

    def show(self, task):
        print(task.present(), file=self.output)

    def respond(self, task):
        self.show(task)
        t0 = self.clock.monotonic()
        while True:
            try:
                resp = task.parse_input(self.input('> '))
                break
            except ValueError as exc:
                print(exc, file=self.output)
        rt = int((self.clock.monotonic() - t0)*1000)
        return tasks.TaskResponse(resp, rt)
