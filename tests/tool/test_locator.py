import os
import shutil
import stat
from unittest.mock import patch

import pytest

from tinyrna_setup.tool import Conda, Mamba, Micromamba, ToolLocator

real_which = shutil.which


def make_executable(directory, name):
    directory.mkdir(parents=True, exist_ok=True)
    path = directory / name
    path.write_text("#!/bin/sh\n")
    path.chmod(path.stat().st_mode | stat.S_IXUSR)
    return path


def path_lookup(found):
    """
    shutil.which replacement: $PATH lookups answer from ``found``, explicit
    search paths hit the real filesystem.
    """
    def which(cmd, mode=os.F_OK | os.X_OK, path=None):
        if path is None:
            return found.get(cmd)
        return real_which(cmd, mode=mode, path=path)

    return which


@pytest.mark.unit
class TestToolLocator:
    def locate(self, found, extra_dirs=(), common_locations=()):
        locator = ToolLocator(common_locations=common_locations)
        with patch("tinyrna_setup.tool.base.shutil.which", side_effect=path_lookup(found)):
            return locator.locate(extra_dirs=extra_dirs)

    def test_conda_preferred(self):
        tool = self.locate({
            "micromamba": "/usr/bin/micromamba",
            "mamba": "/usr/bin/mamba",
            "conda": "/usr/bin/conda",
        })

        assert tool == Conda("/usr/bin/conda")

    def test_mamba_before_micromamba(self):
        tool = self.locate({"micromamba": "/usr/bin/micromamba", "mamba": "/usr/bin/mamba"})

        assert tool == Mamba("/usr/bin/mamba")

    def test_micromamba_alone(self):
        assert self.locate({"micromamba": "/usr/bin/micromamba"}) == Micromamba(
            "/usr/bin/micromamba"
        )

    def test_nothing_found(self, tmp_path):
        assert self.locate({}, common_locations=[str(tmp_path / "absent")]) is None

    def test_path_wins_over_install_prefixes(self, tmp_path):
        make_executable(tmp_path / "miniconda3" / "bin", "conda")

        tool = self.locate(
            {"micromamba": "/usr/bin/micromamba"},
            extra_dirs=[str(tmp_path / "miniconda3" / "bin")],
        )

        assert tool == Micromamba("/usr/bin/micromamba")

    def test_fresh_install_found_in_extra_dir(self, tmp_path):
        conda = make_executable(tmp_path / "miniconda3" / "bin", "conda")

        tool = self.locate({}, extra_dirs=[str(tmp_path / "miniconda3" / "bin")])

        assert tool == Conda(str(conda))

    def test_common_locations_expand_home(self, tmp_path, monkeypatch):
        monkeypatch.setenv("HOME", str(tmp_path))
        mamba = make_executable(tmp_path / "mambaforge" / "bin", "mamba")

        tool = self.locate({}, common_locations=["~/miniconda3/bin", "~/mambaforge/bin"])

        assert tool == Mamba(str(mamba))
