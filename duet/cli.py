#!/usr/bin/env python
"""
Render a Python + R document from the command line.

Runs every code block of the input document in order and writes Markdown
with the captured output and figures.
"""

import argparse
import logging
import sys
from pathlib import Path

from .document import read_document
from .exceptions import DuetError
from .session import Session, load_settings
from .utils.file_handling import default_output_path, ensure_dir


def setup_logger(log_file=None, level=logging.INFO):
    """Set up the logger."""
    logger = logging.getLogger('duet')
    logger.setLevel(level)

    formatter = logging.Formatter('%(asctime)s - %(name)s - %(levelname)s - %(message)s')

    # Console handler
    console_handler = logging.StreamHandler()
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    # File handler
    if log_file:
        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    return logger


def parse_args(argv=None):
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(description='Render a document that interleaves Python and R code blocks')

    parser.add_argument('input',
                        help='Path to the document (.Rmd, .qmd or .md)')

    parser.add_argument('-o', '--output',
                        help='Path of the rendered Markdown (default: next to the input)')

    parser.add_argument('--figure-dir',
                        help='Directory for figures (default: <output stem>_files/figures)')

    parser.add_argument('--config',
                        help='Path to a YAML configuration file')

    parser.add_argument('--r-home',
                        help='R installation to use (overrides DUET_R_HOME)')

    parser.add_argument('--log-file',
                        help='Also write log messages to this file')

    parser.add_argument('--debug', action='store_true',
                        help='Enable debug logging')

    return parser.parse_args(argv)


def main(argv=None):
    """Main function."""
    args = parse_args(argv)

    logger = setup_logger(args.log_file, logging.DEBUG if args.debug else logging.INFO)

    input_path = Path(args.input)
    output_path = Path(args.output) if args.output else default_output_path(input_path)
    figure_dir = Path(args.figure_dir) if args.figure_dir else output_path.parent / f"{output_path.stem}_files" / 'figures'

    try:
        settings = load_settings(args.config)
        if not args.debug:
            logger.setLevel(str(settings.config.get('log_level', 'INFO')).upper())
        if args.r_home:
            settings.r_home = args.r_home

        try:
            document = read_document(input_path)
        except OSError as e:
            logger.error(f"Cannot read {input_path}: {e}")
            return 1

        with Session(settings) as session:
            rendered = session.render(document, figure_dir, link_base=output_path.parent)

        ensure_dir(output_path.parent)
        output_path.write_text(rendered, encoding='utf-8')
    except DuetError as e:
        logger.error(str(e))
        if e.block_index is not None:
            logger.error(f"Rendering stopped at block {e.block_index}; no output written")
        return 1
    except OSError as e:
        logger.error(f"I/O error while rendering {input_path}: {e}")
        return 1

    logger.info(f"Wrote {output_path}")
    return 0


if __name__ == '__main__':
    sys.exit(main())
