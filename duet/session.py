"""
Document sessions.

A session reads its settings once when it is created, builds the Python and
R runtimes, and renders documents through an orchestrator.
"""

import logging
import os
from pathlib import Path

from .exceptions import ConfigurationError
from .orchestrator import Orchestrator
from .r_integration import RRuntime
from .rendering import render_markdown
from .runtimes import PythonRuntime
from .utils.config import (
    DEFAULT_CONFIG,
    R_HOME_ENV_VAR,
    get_config_value,
    load_config,
    merge_configs,
    validate_config,
)


class Settings:
    """
    Resolved session settings.

    Args:
        config (dict): Configuration merged over ``DEFAULT_CONFIG``.
        r_home (str, optional): R installation selected for the session.
    """

    def __init__(self, config, r_home=None):
        self.config = config
        self.r_home = r_home

    @property
    def r_packages(self):
        return list(get_config_value(self.config, 'r_packages', []) or [])

    def bridge_name(self, language):
        return get_config_value(self.config, f'bridge_names.{language}')

    @property
    def figure_dpi(self):
        return get_config_value(self.config, 'figures.dpi', 100)

    @property
    def figure_size(self):
        return (
            get_config_value(self.config, 'figures.width', 7),
            get_config_value(self.config, 'figures.height', 5),
        )

    def __repr__(self):
        return f"Settings(r_home={self.r_home!r}, r_packages={self.r_packages!r})"


def load_settings(config_path=None, environ=None, overrides=None):
    """
    Load session settings.

    The R installation comes from ``DUET_R_HOME``, then the ``r_home``
    configuration key, then ``R_HOME``. It is only validated when the R
    runtime starts.

    Args:
        config_path (str, optional): YAML configuration file.
        environ (Mapping, optional): Environment to read. Defaults to os.environ.
        overrides (dict, optional): Values taking precedence over the file.

    Returns:
        Settings: The resolved settings.

    Raises:
        ConfigurationError: If the configuration is invalid.
    """
    logger = logging.getLogger(__name__)

    if environ is None:
        environ = os.environ

    config = merge_configs(DEFAULT_CONFIG, load_config(config_path))
    if overrides:
        config = merge_configs(config, overrides)

    is_valid, errors = validate_config(config)
    if not is_valid:
        raise ConfigurationError("Invalid configuration: " + "; ".join(errors))

    r_home = environ.get(R_HOME_ENV_VAR) or config.get('r_home') or environ.get('R_HOME')
    logger.debug(f"R home for this session: {r_home or '<unset>'}")
    return Settings(config, r_home=r_home)


class Session:
    """
    A Python + R document session.

    Args:
        settings (Settings, optional): Session settings. Loaded from the
            default locations when omitted.
    """

    def __init__(self, settings=None):
        self.settings = settings or load_settings()
        self.python = PythonRuntime(
            bridge_name=self.settings.bridge_name('python'),
            figure_dpi=self.settings.figure_dpi,
        )
        self.r = RRuntime(
            bridge_name=self.settings.bridge_name('r'),
            r_home=self.settings.r_home,
            packages=self.settings.r_packages,
            figure_dpi=self.settings.figure_dpi,
            figure_size=self.settings.figure_size,
        )
        self.orchestrator = Orchestrator(self.python, self.r)

    def run(self, document):
        """Execute a document and return its BlockResults."""
        return self.orchestrator.run(document)

    def render(self, document, figure_dir, link_base=None):
        """
        Execute a document and render it to Markdown.

        Args:
            document (Document): The parsed document.
            figure_dir (str or Path): Directory for figure files.
            link_base (str or Path, optional): Directory figure links are
                relative to.

        Returns:
            str: The rendered Markdown.
        """
        results = self.run(document)
        return render_markdown(document, results, Path(figure_dir), link_base)

    def close(self):
        self.orchestrator.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()
        return False
