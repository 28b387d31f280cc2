"""Tests for driver lookup, distro detection and the ``none`` driver."""

from __future__ import annotations

import logging
from pathlib import Path

import pytest

from reprofetch.core.cache import ContentCache
from reprofetch.distro import (
    AlpineDriver,
    DebianDriver,
    DistroDriver,
    NoneDriver,
    detect,
    new_driver,
    read_os_release,
)
from reprofetch.errors import ConfigurationError, UnsupportedOperationError
from reprofetch.manifest import CollectingHashWriter
from reprofetch.models.distro import InstallScriptArgs
from reprofetch.models.filespec import FileSpec
from tests.conftest import FakeRunner

SPEC = FileSpec.from_manifest_entry("hello_2.10-2_amd64.deb", "a" * 64)


class TestNoneDriver:
    def test_is_never_installed(self):
        assert NoneDriver().is_installed(SPEC) is False

    def test_unsupported_capabilities(self, tmp_dir: Path, cache: ContentCache):
        driver = NoneDriver()
        with pytest.raises(UnsupportedOperationError):
            driver.generate_hash(CollectingHashWriter(), ["hello"])
        with pytest.raises(UnsupportedOperationError):
            driver.package_name(SPEC)
        with pytest.raises(UnsupportedOperationError):
            driver.install(cache, [SPEC])
        with pytest.raises(UnsupportedOperationError) as exc_info:
            driver.generate_install_script(tmp_dir, InstallScriptArgs(hash_files=["SUMS"]))
        assert exc_info.value.driver == "none"
        assert exc_info.value.feature == "generate_install_script"

    def test_empty_install_is_noop(self, cache: ContentCache):
        NoneDriver().install(cache, [])

    def test_has_no_default_providers(self):
        assert NoneDriver().info.default_providers == []


class TestNewDriver:
    @pytest.mark.parametrize(
        ("name", "cls"),
        [
            ("debian", DebianDriver),
            ("ubuntu", DebianDriver),
            ("alpine", AlpineDriver),
            ("none", NoneDriver),
        ],
    )
    def test_known_names(self, name, cls):
        driver = new_driver(name, FakeRunner())
        assert isinstance(driver, cls)
        assert driver.info.name == name
        assert isinstance(driver, DistroDriver)

    def test_unknown_name(self):
        with pytest.raises(ConfigurationError, match="gentoo"):
            new_driver("gentoo")

    def test_experimental_warning(self, caplog):
        with caplog.at_level(logging.WARNING, logger="reprofetch.distro"):
            new_driver("alpine", FakeRunner())
        assert "experimental" in caplog.text

    def test_runner_is_passed_through(self):
        runner = FakeRunner()
        assert new_driver("debian", runner).runner is runner


class TestDetect:
    def _write(self, tmp_dir: Path, text: str) -> Path:
        path = tmp_dir / "os-release"
        path.write_text(text)
        return path

    def test_read_os_release(self, tmp_dir: Path):
        path = self._write(tmp_dir, '# comment\nID=debian\nPRETTY_NAME="Debian GNU/Linux 12"\n')
        assert read_os_release(path) == {"ID": "debian", "PRETTY_NAME": "Debian GNU/Linux 12"}

    def test_id(self, tmp_dir: Path):
        assert detect((self._write(tmp_dir, "ID=alpine\n"),)) == "alpine"

    def test_id_like(self, tmp_dir: Path):
        path = self._write(tmp_dir, 'ID=linuxmint\nID_LIKE="ubuntu debian"\n')
        assert detect((path,)) == "ubuntu"

    def test_unknown_distro(self, tmp_dir: Path):
        assert detect((self._write(tmp_dir, "ID=fedora\n"),)) == "none"

    def test_missing_file(self, tmp_dir: Path):
        assert detect((tmp_dir / "absent",)) == "none"

    def test_first_existing_file_wins(self, tmp_dir: Path):
        path = self._write(tmp_dir, "ID=debian\n")
        assert detect((tmp_dir / "absent", path)) == "debian"
