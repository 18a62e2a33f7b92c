"""The operator handed to callers once a configuration is resolved.

An :class:`Operator` bundles the three entry points of the library:
``process`` for reading a tree, and ``construct_filename`` /
``construct_output_directory`` for writing one. Which of them may be
used is decided by the feature set passed in, e.g. a tool that only
reads can be built with ``features={'input', 'structured-input'}``.
"""
import logging
from datetime import datetime
from pathlib import Path
from typing import FrozenSet, Iterable, Optional

from . import organize
from .config import Config
from .errors import ConfigurationError
from .structure import Granularity
from .traversal import Callback, Traversal

INPUT = "input"
OUTPUT = "output"
STRUCTURED_INPUT = "structured-input"
STRUCTURED_OUTPUT = "structured-output"
EXTENSIONS = "extensions"

ALL_FEATURES: FrozenSet[str] = frozenset(
    {INPUT, OUTPUT, STRUCTURED_INPUT, STRUCTURED_OUTPUT, EXTENSIONS}
)


class Operator:
    def __init__(
        self,
        config: Config,
        features: Iterable[str] = ALL_FEATURES,
        logger: Optional[logging.Logger] = None,
    ):
        self.config = config
        self.features = frozenset(features)
        unknown = self.features - ALL_FEATURES
        if unknown:
            raise ConfigurationError(f"Unknown features: {', '.join(sorted(unknown))}")
        self.logger = logger or logging.getLogger("datelayout")
        self.traversal = Traversal(
            config,
            logger=self.logger,
            structured=STRUCTURED_INPUT in self.features,
            use_extensions=EXTENSIONS in self.features,
        )

    @property
    def output_structure(self) -> Granularity:
        if STRUCTURED_OUTPUT in self.features:
            return self.config.output_structure
        return Granularity.NONE

    def _require(self, feature: str, what: str):
        if feature not in self.features:
            raise ConfigurationError(f"{feature.capitalize()} feature is not enabled, cannot {what}")

    def process(
        self,
        callback: Callback,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
    ) -> int:
        """Run ``callback(path, date)`` over the input tree.

        See :meth:`datelayout.traversal.Traversal.process`.
        """
        self._require(INPUT, "process input")
        return self.traversal.process(callback, start=start, end=end)

    def construct_filename(
        self,
        date: datetime,
        type_: str,
        hash_: str,
        subject: Optional[str] = None,
    ) -> str:
        self._require(OUTPUT, "construct output filenames")
        if STRUCTURED_OUTPUT in self.features:
            options = self.config.output_filename_options
        else:
            options = ()
        return organize.construct_filename(
            date, type_, hash_, subject,
            structure=self.output_structure,
            filename_options=options,
            tz=self.config.tzinfo,
        )

    def construct_output_directory(self, date: datetime) -> Path:
        self._require(OUTPUT, "construct output directories")
        path = organize.construct_output_directory(
            date, self.config.output_directory, self.output_structure, self.config.tzinfo
        )
        self.logger.debug("Output directory for %s: %s", date.isoformat(), path)
        return path
