"""End-to-end tests for the duet-render command with Python-only documents."""

import logging

import pytest

from duet.cli import main

DOCUMENT = """\
# Report

```{python}
total = sum(range(5))
total
```

Done.
"""


@pytest.fixture(autouse=True)
def reset_duet_logger():
    yield
    logging.getLogger('duet').handlers.clear()


@pytest.fixture
def config_file(tmp_path):
    path = tmp_path / 'config.yaml'
    path.write_text('log_level: WARNING\n')
    return path


def test_renders_next_to_input(tmp_path, config_file):
    source = tmp_path / 'report.Rmd'
    source.write_text(DOCUMENT, encoding='utf-8')

    assert main([str(source), '--config', str(config_file)]) == 0

    rendered = (tmp_path / 'report.md').read_text(encoding='utf-8')
    assert rendered.startswith('# Report\n')
    assert '## 10' in rendered
    assert rendered.endswith('Done.\n')


def test_plain_markdown_is_not_overwritten(tmp_path, config_file):
    source = tmp_path / 'notes.md'
    source.write_text(DOCUMENT, encoding='utf-8')

    assert main([str(source), '--config', str(config_file)]) == 0

    assert source.read_text(encoding='utf-8') == DOCUMENT
    assert (tmp_path / 'notes.out.md').exists()


def test_explicit_output(tmp_path, config_file):
    source = tmp_path / 'report.Rmd'
    source.write_text(DOCUMENT, encoding='utf-8')
    output = tmp_path / 'out' / 'rendered.md'

    assert main([str(source), '-o', str(output), '--config', str(config_file)]) == 0
    assert output.exists()


def test_failing_block_writes_nothing(tmp_path, config_file, caplog):
    source = tmp_path / 'broken.Rmd'
    source.write_text('```{python}\nraise RuntimeError("nope")\n```\n', encoding='utf-8')

    assert main([str(source), '--config', str(config_file)]) == 1

    assert not (tmp_path / 'broken.md').exists()
    assert 'block 0' in caplog.text


def test_missing_input(tmp_path, config_file, caplog):
    assert main([str(tmp_path / 'absent.Rmd'), '--config', str(config_file)]) == 1
    assert 'Cannot read' in caplog.text


def test_unwritable_output_is_reported(tmp_path, config_file, caplog):
    source = tmp_path / 'report.Rmd'
    source.write_text(DOCUMENT, encoding='utf-8')
    blocker = tmp_path / 'blocker'
    blocker.write_text('not a directory')

    status = main([str(source), '-o', str(blocker / 'rendered.md'), '--config', str(config_file)])

    assert status == 1
    assert 'Cannot read' not in caplog.text
    assert 'I/O error' in caplog.text


def test_sys_exit_in_block_fails_the_render(tmp_path, config_file):
    source = tmp_path / 'exits.Rmd'
    source.write_text('```{python}\nimport sys\nsys.exit(0)\n```\n', encoding='utf-8')

    assert main([str(source), '--config', str(config_file)]) == 1
    assert not (tmp_path / 'exits.md').exists()


def test_r_block_without_r_installation(tmp_path, config_file, monkeypatch):
    monkeypatch.delenv('DUET_R_HOME', raising=False)
    monkeypatch.delenv('R_HOME', raising=False)
    source = tmp_path / 'needs_r.Rmd'
    source.write_text('```{r}\nx <- 1\n```\n', encoding='utf-8')

    assert main([str(source), '--config', str(config_file)]) == 1
    assert not (tmp_path / 'needs_r.md').exists()
