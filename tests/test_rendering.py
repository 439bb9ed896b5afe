"""Tests for Markdown rendering of executed documents."""

from duet.rendering import format_output, render_markdown
from duet.runtimes import Figure

PNG = b'\x89PNG\r\n\x1a\nfake'


def test_format_output_prefixes_lines():
    assert format_output('a\nb\n') == '```\n## a\n## b\n```\n'


def test_format_output_empty():
    assert format_output('') == ''
    assert format_output('\n') == ''


def test_render_interleaves_narrative_code_and_output(orchestrator, make_document, tmp_path):
    doc = make_document('''
        Intro text.

        ```{python}
        print("hi")
        ```

        Outro.
        ''')
    results = orchestrator.run(doc)
    rendered = render_markdown(doc, results, tmp_path / 'figures')

    assert rendered == (
        "Intro text.\n\n"
        "```python\nprint(\"hi\")\n```\n"
        "\n"
        "```\n## hi\n```\n"
        "\nOutro.\n"
    )


def test_echo_false_hides_code(orchestrator, make_document, tmp_path):
    doc = make_document('''
        ```{python, echo=FALSE}
        print("shown")
        ```
        ''')
    rendered = render_markdown(doc, orchestrator.run(doc), tmp_path)
    assert 'print(' not in rendered
    assert '## shown' in rendered


def test_include_false_hides_everything_but_runs(orchestrator, make_document, tmp_path):
    doc = make_document('''
        ```{python, include=FALSE}
        hidden = 1
        print("invisible")
        ```
        ''')
    rendered = render_markdown(doc, orchestrator.run(doc), tmp_path)
    assert rendered == ''
    assert 'hidden' in orchestrator.bridge_for('pyb')


def test_skipped_block_shows_code_only(orchestrator, make_document, tmp_path):
    doc = make_document('''
        ```{python, eval=FALSE}
        print("not run")
        ```
        ''')
    rendered = render_markdown(doc, orchestrator.run(doc), tmp_path)
    assert rendered == '```python\nprint("not run")\n```\n'


def test_figures_are_written_and_linked(orchestrator, make_document, tmp_path):
    doc = make_document('''
        ```{python qq}
        x = 1
        ```
        ''')
    results = orchestrator.run(doc)
    result = results[0]
    results[0] = result._replace(output=result.output._replace(figures=[Figure('png', PNG)]))

    figure_dir = tmp_path / 'out_files' / 'figures'
    rendered = render_markdown(doc, results, figure_dir, link_base=tmp_path)

    written = figure_dir / 'qq-1.png'
    assert written.read_bytes() == PNG
    assert '![qq](out_files/figures/qq-1.png)' in rendered


def test_unlabelled_figures_use_chunk_number(orchestrator, make_document, tmp_path):
    doc = make_document('''
        ```{python}
        x = 1
        ```
        ''')
    results = orchestrator.run(doc)
    results[0] = results[0]._replace(output=results[0].output._replace(figures=[Figure('png', PNG)] * 2))
    render_markdown(doc, results, tmp_path)
    assert (tmp_path / 'chunk-1-1.png').exists()
    assert (tmp_path / 'chunk-1-2.png').exists()
