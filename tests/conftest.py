from pathlib import Path

import pytest

from datelayout.config import Config
from datelayout.structure import Granularity


@pytest.fixture
def make_config(tmp_path):
    """Return a factory for :class:`Config` rooted in ``tmp_path``."""
    def _make(**overrides):
        values = dict(
            timezone="Etc/UTC",
            recursive=False,
            input_directory=tmp_path / "in",
            output_directory=tmp_path / "out",
            input_structure=Granularity.MONTH,
            output_structure=Granularity.MONTH,
            input_filename_options=("date", "time", "subject"),
            output_filename_options=("date", "time", "subject"),
            extensions=("md",),
            date_range=None,
        )
        values.update(overrides)
        Path(values["input_directory"]).mkdir(parents=True, exist_ok=True)
        Path(values["output_directory"]).mkdir(parents=True, exist_ok=True)
        return Config(**values)

    return _make
