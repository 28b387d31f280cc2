"""Tests for FileSpec construction, identity extraction and URL templates."""

from __future__ import annotations

import pydantic
import pytest

from reprofetch.errors import ConfigurationError, NotFoundError
from reprofetch.models.filespec import (
    FileSpec,
    PackageIdentity,
    filespecs_from_manifest,
    split_apk_name,
    split_deb_basename,
)

A = "a" * 64
B = "b" * 64


class TestFileSpec:
    def test_from_manifest_entry_deb(self):
        sp = FileSpec.from_manifest_entry("pool/main/h/hello/hello_2.10-2_amd64.deb", A)
        assert sp.basename == "hello_2.10-2_amd64.deb"
        assert sp.package == PackageIdentity(
            package="hello", version="2.10-2", architecture="amd64"
        )

    def test_from_manifest_entry_plain_file(self):
        sp = FileSpec.from_manifest_entry("tools/blob.tar.gz", A)
        assert sp.basename == "blob.tar.gz"
        assert sp.package is None

    def test_digest_must_be_lowercase_hex(self):
        with pytest.raises(pydantic.ValidationError):
            FileSpec(name="x", basename="x", sha256="A" * 64)
        with pytest.raises(pydantic.ValidationError):
            FileSpec(name="x", basename="x", sha256="a" * 63)

    def test_digest_is_immutable(self):
        sp = FileSpec(name="x", basename="x", sha256=A)
        with pytest.raises(pydantic.ValidationError):
            sp.sha256 = B

    def test_basename_cannot_escape(self):
        with pytest.raises(pydantic.ValidationError):
            FileSpec(name="x", basename="../x", sha256=A)
        with pytest.raises(pydantic.ValidationError):
            FileSpec(name="x", basename="..", sha256=A)


class TestURLTemplates:
    def test_name_and_digest_fields(self):
        sp = FileSpec.from_manifest_entry("pool/main/h/hello/hello_2.10-2_amd64.deb", A)
        assert sp.url("http://deb.debian.org/debian/{name}") == (
            "http://deb.debian.org/debian/pool/main/h/hello/hello_2.10-2_amd64.deb"
        )
        assert sp.url("http://snapshot.test/by-hash/SHA256/{sha256}") == (
            f"http://snapshot.test/by-hash/SHA256/{A}"
        )
        assert sp.url("file:///srv/mirror/{basename}") == (
            "file:///srv/mirror/hello_2.10-2_amd64.deb"
        )

    def test_unknown_field_is_configuration_error(self):
        sp = FileSpec(name="x", basename="x", sha256=A)
        with pytest.raises(ConfigurationError, match="version"):
            sp.url("http://mirror.test/{version}")


class TestIdentity:
    def test_deb_epoch_is_unescaped(self):
        pkg = split_deb_basename("libc6_1%3a2.36-9_arm64.deb")
        assert pkg is not None
        assert pkg.version == "1:2.36-9"
        assert pkg.key == "libc6:arm64"

    def test_malformed_deb(self):
        assert split_deb_basename("hello.deb") is None
        assert split_deb_basename("hello_1.0.deb") is None

    def test_apk(self):
        pkg = split_apk_name("ca-certificates-bundle-20220614-r0.apk")
        assert pkg == PackageIdentity(package="ca-certificates-bundle", version="20220614-r0")
        assert pkg.key == "ca-certificates-bundle"

    def test_apk_name_with_digits(self):
        pkg = split_apk_name("py3-six-1.16.0-r3")
        assert pkg is not None
        assert (pkg.package, pkg.version) == ("py3-six", "1.16.0-r3")

    def test_malformed_apk(self):
        assert split_apk_name("musl") is None
        assert split_apk_name("musl-latest-r0") is None
        assert split_apk_name("musl-1.2.3-rc") is None


class TestFilespecsFromManifest:
    SUMS = {
        "pool/main/h/hello/hello_2.10-2_amd64.deb": A,
        "pool/main/b/bash/bash_5.2-1_amd64.deb": B,
    }

    def test_all_entries(self):
        specs = filespecs_from_manifest(self.SUMS)
        assert set(specs) == set(self.SUMS)
        assert specs["pool/main/b/bash/bash_5.2-1_amd64.deb"].sha256 == B

    def test_filter_by_package(self):
        specs = filespecs_from_manifest(self.SUMS, ["hello"])
        assert list(specs) == ["pool/main/h/hello/hello_2.10-2_amd64.deb"]

    def test_unknown_package(self):
        with pytest.raises(NotFoundError, match="curl"):
            filespecs_from_manifest(self.SUMS, ["hello", "curl"])
