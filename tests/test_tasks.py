import logging

import pytest

from confprime import params, tasks
from confprime.record import TaskKind
from confprime.templates import BadTemplateNameError, render, set_override_path


def chain(task):
    names = []
    while task:
        names.append(task.template_name)
        task = task.next_task()
    return names


def find(inst, cls):
    return [t for t in inst.tasks_by_id.values() if isinstance(t, cls)]


def test_timeline(make_exper):
    inst = make_exper()
    assert chain(inst.first_task) == [
        'consent', 'preload', 'write_headers', 'instructions', 'wait',
        'wait', 'picture_selection', 'picture_description', 'wait',
        'free_response', 'thankyou']
    assert list(inst.tasks_by_id) == list(range(1, 12))


def test_then_all(make_exper):
    inst = make_exper()
    start = tasks.Task(inst, 'instructions', {'paras': []})
    end = start.then_all([
        tasks.TaskDesc(['instructions', {'paras': ['a']}]),
        tasks.TaskDesc([tasks.Wait, 'hold on', 1000]),
        tasks.Task(inst, 'instructions', {'paras': ['b']}),
    ])

    assert chain(start) == ['instructions', 'instructions', 'wait',
                            'instructions']
    assert end.variables['paras'] == ['b']
    assert end.prev_task.template_name == 'wait'
    assert end.prev_task.duration_ms == 1000
    assert end.next_task() is None


def test_task_has_one_successor(make_exper):
    inst = make_exper()
    start = tasks.Task(inst, 'instructions', {'paras': []})
    start.then('instructions', {'paras': ['left']})
    with pytest.raises(AssertionError):
        start.then('instructions', {'paras': ['right']})


def test_every_task_renders(make_exper):
    inst = make_exper()
    for task in inst.tasks_by_id.values():
        assert task.present().strip()


def test_picture_selection_screen(make_exper):
    inst = make_exper()
    task, = find(inst, tasks.PictureSelection)
    text = task.present()
    assert 'The jeweler showed the rings to the couple.' in text
    for i, choice in enumerate(task.choices):
        assert f'[{i + 1}] images/{choice}.png' in text
    assert params.selection_instruction in text


def test_picture_description_screen(make_exper):
    inst = make_exper()
    task, = find(inst, tasks.PictureDescription)
    text = task.present()
    assert 'discovers' in text
    assert 'images/fill_explorer.png  <== green box' in text
    assert 'images/d2.png  <==' not in text


def test_selection_record(make_exper):
    inst = make_exper()
    task, = find(inst, tasks.PictureSelection)
    rec = task.make_record(tasks.TaskResponse(1, 842), 6, 20000)
    assert rec.task_kind == TaskKind.PICTURE_SELECTION
    assert rec.participant_id == 'abc123'
    assert rec.choices == tuple(task.choices)
    assert rec.button_selected == task.choices[1]
    assert rec.response == 1
    assert rec.rt == 842


def test_description_record(make_exper):
    inst = make_exper()
    task, = find(inst, tasks.PictureDescription)
    rec = task.make_record(
        tasks.TaskResponse('the explorer discovers', 5000), 7, 30000)
    assert rec.target_image == 'fill_explorer'
    assert rec.foil_image == 'd2'
    assert rec.text_response == 'the explorer discovers'


def test_screens_without_data(make_exper):
    inst = make_exper()
    for cls in (tasks.Consent, tasks.Wait, tasks.Preload, tasks.Thankyou):
        for task in find(inst, cls):
            assert task.make_record(tasks.TaskResponse(0, 1), 0, 0) is None


def test_parse_selection_input(make_exper):
    inst = make_exper()
    task, = find(inst, tasks.PictureSelection)
    assert task.parse_input('1') == 0
    assert task.parse_input(' 2 ') == 1
    for text in ['0', '3', 'left', '']:
        with pytest.raises(ValueError):
            task.parse_input(text)


def test_parse_text_input(make_exper):
    inst = make_exper()
    task, = find(inst, tasks.FreeResponse)
    assert task.parse_input('they were nice') == 'they were nice'
    with pytest.raises(ValueError):
        task.parse_input('   ')


def test_dummy_responses(make_exper):
    inst = make_exper()
    task, = find(inst, tasks.PictureSelection)
    resp = task.dummy_resp()
    assert resp.response in (0, 1)
    assert 500 <= resp.rt <= 3000


def test_preload_reports_missing_images(make_exper, cfg, tmp_path, caplog):
    (tmp_path / 'images').mkdir()
    (tmp_path / 'images' / 'crit_jeweler.png').write_bytes(b'')
    cfg['static_dir'] = str(tmp_path)
    inst = make_exper()
    task, = find(inst, tasks.Preload)
    assert task.paths[0] == 'images/crit_jeweler.png'

    with caplog.at_level(logging.INFO, logger='confprime'):
        task.start()
    assert 'preload image not found' in caplog.text
    assert 'preloaded 1/4 images' in caplog.text


def test_bad_template_name():
    with pytest.raises(BadTemplateNameError):
        render('../cfg.json')


def test_template_override(make_exper, tmp_path):
    (tmp_path / 'task_thankyou.txt.jinja').write_text(
        'Thanks, {{ exp_participant_id }}!')
    set_override_path(tmp_path)
    inst = make_exper()
    task, = find(inst, tasks.Thankyou)
    assert task.present() == 'Thanks, abc123!'
    # other templates still come from the package
    consent, = find(inst, tasks.Consent)
    assert params.consent_title in consent.present()


def test_task_variables_take_precedence(make_exper):
    inst = make_exper()
    task = tasks.Task(inst, 'thankyou', {'paras': ['Bye.'],
                                        'exp_participant_id': 'zzz999'})
    text = task.present()
    assert 'Participant ID: zzz999' in text
    assert 'abc123' not in text
    assert task.template_filename() == 'task_thankyou.txt.jinja'
