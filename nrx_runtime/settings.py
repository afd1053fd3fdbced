"""
settings.py
~~~~~~~~~~~

Environment-driven configuration and logging setup.

Variables:
- ``NRX_LOG_LEVEL``: logging level name (default ``INFO``)
- ``NRX_MAX_WORKERS``: thread pool size for batch prediction (unset or
  ``0`` runs samples sequentially)
- ``NRX_MODEL_DIR``: base directory for relative model paths
"""

import logging
import os
from dataclasses import dataclass
from typing import Mapping, Optional

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


@dataclass(frozen=True)
class Settings:
    """Runtime configuration."""

    log_level: str = 'INFO'
    max_workers: Optional[int] = None
    model_dir: str = '.'

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> 'Settings':
        """
        Read settings from environment variables.

        Args:
            environ: Mapping to read instead of ``os.environ``

        Returns:
            Settings: The parsed settings

        Raises:
            ValueError: If ``NRX_MAX_WORKERS`` is not a non-negative integer
        """
        env = os.environ if environ is None else environ

        workers_str = env.get('NRX_MAX_WORKERS', '').strip()
        max_workers = None
        if workers_str:
            try:
                max_workers = int(workers_str)
            except ValueError:
                raise ValueError(
                    f"NRX_MAX_WORKERS must be an integer, got '{workers_str}'"
                ) from None
            if max_workers < 0:
                raise ValueError(
                    f"NRX_MAX_WORKERS must be non-negative, got {max_workers}"
                )
            max_workers = max_workers or None

        return cls(
            log_level=env.get('NRX_LOG_LEVEL', 'INFO').upper(),
            max_workers=max_workers,
            model_dir=env.get('NRX_MODEL_DIR', '.')
        )

    def resolve_model_path(self, path: str) -> str:
        """Resolve a model path relative to ``model_dir``."""
        if os.path.isabs(path):
            return path
        return os.path.join(self.model_dir, path)


def configure_logging(settings: Optional[Settings] = None) -> None:
    """
    Set up logging for applications built on the runtime.

    The library never calls this on import; entry points such as the CLI do.
    """
    settings = settings or Settings.from_env()
    log_level = getattr(logging, settings.log_level, logging.INFO)

    logging.basicConfig(level=log_level, format=LOG_FORMAT)
    logging.getLogger('nrx_runtime').setLevel(log_level)
