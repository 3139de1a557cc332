from __future__ import annotations

import json
from pathlib import Path

import pytest

import main
from truckinspect.config import get_settings


@pytest.fixture(autouse=True)
def _isolated_settings(tmp_path: Path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv('TEMPLATE_SOURCE', raising=False)
    monkeypatch.delenv('LAYOUT_PATH', raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


def _answers(tmp_path: Path) -> Path:
    path = tmp_path / 'answers.json'
    path.write_text(
        json.dumps(
            {
                'header': {'date': '2024-05-01', 'truck': '47', 'operator': 'J. Doe', 'fuel': 'Diesel'},
                'checks': {'V1': {'checked': True, 'comment': 'leaking'}},
            }
        ),
        encoding='utf-8',
    )
    return path


def _output(capsys) -> dict:
    return json.loads(capsys.readouterr().out)


def test_checklist_command(capsys) -> None:
    assert main.main(['checklist']) == 0
    payload = _output(capsys)
    assert payload['visual'][0]['id'] == 'V1'
    assert payload['operational'][-1]['id'] == 'O-J'


def test_layout_command(capsys) -> None:
    assert main.main(['layout']) == 0
    payload = _output(capsys)
    assert payload['items']['V1'] == {'page': 0, 'x': 39.0, 'y': 436.0}
    assert payload['unknown'] == {'header': [], 'items': []}
    assert payload['unplaced'] == []


def test_generate_command(tmp_path: Path, template_path: Path, capsys) -> None:
    out_dir = tmp_path / 'pdfs'
    code = main.main(
        [
            'generate',
            '--answers',
            str(_answers(tmp_path)),
            '--template',
            str(template_path),
            '--output-dir',
            str(out_dir),
        ]
    )
    payload = _output(capsys)
    assert code == 0
    assert payload['status'] == 'ok'
    assert Path(payload['path']) == out_dir / 'truck-inspection-2024-05-01.pdf'
    assert Path(payload['path']).exists()
    assert payload['pages'] == 2


def test_generate_reports_missing_template(tmp_path: Path, capsys) -> None:
    code = main.main(
        ['generate', '--answers', str(_answers(tmp_path)), '--template', str(tmp_path / 'template.pdf')]
    )
    payload = _output(capsys)
    assert code == 2
    assert payload['error'] == 'template_not_found'


def test_review_command(tmp_path: Path, capsys) -> None:
    assert main.main(['review', '--answers', str(_answers(tmp_path))]) == 0
    payload = _output(capsys)
    assert payload['issues']['Visual Inspection'] == [{'id': 'V1', 'text': 'Propane — leaking'}]
    assert payload['has_comments'] is True


def test_missing_answers_file(tmp_path: Path, capsys) -> None:
    assert main.main(['review', '--answers', str(tmp_path / 'none.json')]) == 2
    assert _output(capsys)['status'] == 'error'


def test_generate_reports_unwritable_output(tmp_path: Path, template_path: Path, capsys) -> None:
    blocked = tmp_path / 'blocked'
    blocked.write_text('not a directory', encoding='utf-8')
    code = main.main(
        [
            'generate',
            '--answers',
            str(_answers(tmp_path)),
            '--template',
            str(template_path),
            '--output-dir',
            str(blocked),
        ]
    )
    payload = _output(capsys)
    assert code == 2
    assert payload['status'] == 'error'
    assert payload['error'] == 'ExportWriteError'
