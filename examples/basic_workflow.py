#!/usr/bin/env python
"""
Basic DUET workflow example.

This script demonstrates running a document programmatically: parse it,
execute its blocks through a session, inspect what crossed the bridges and
write the rendered Markdown.
"""

import argparse
import logging
from pathlib import Path

from duet import Session, load_settings
from duet.document import read_document
from duet.rendering import render_markdown


def setup_logger():
    """Set up the logger."""
    logging.basicConfig(
        level=logging.INFO,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )
    return logging.getLogger('duet_basic_workflow')


def parse_args():
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(description='Run a basic DUET workflow')

    parser.add_argument('--document', default=str(Path(__file__).parent / 'regression_tutorial.Rmd'),
                        help='Path to the document to run')

    parser.add_argument('--output-dir', required=True,
                        help='Directory to save results')

    parser.add_argument('--config',
                        help='Path to configuration file')

    return parser.parse_args()


def main():
    args = parse_args()
    logger = setup_logger()

    output_dir = Path(args.output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)

    document = read_document(args.document)
    logger.info(f"Document uses languages: {', '.join(document.languages)}")

    with Session(load_settings(args.config)) as session:
        results = session.run(document)

        for result in results:
            if result.sync.changed:
                logger.info(
                    f"Block {result.index} ({result.block.language}) published "
                    f"{list(result.sync.added + result.sync.updated)}"
                )

        python_view = session.orchestrator.bridge_for('python')
        logger.info(f"Visible from Python through 'r': {python_view.names()}")

        rendered = render_markdown(document, results, output_dir / 'figures', link_base=output_dir)

    output_path = output_dir / 'regression_tutorial.md'
    output_path.write_text(rendered, encoding='utf-8')
    logger.info(f"Wrote {output_path}")


if __name__ == '__main__':
    main()
