"""
Tests for OS detection.
"""

import sys

import pytest

from devinit.core.services.bootstrap.detection.platform import OSKind, detect_os


class TestDetectOS:
    @pytest.mark.parametrize(
        ("tag", "expected"),
        [
            ("darwin23", OSKind.MACOS),
            ("linux-gnu", OSKind.LINUX),
            ("linux", OSKind.LINUX),
            ("msys", OSKind.WINDOWS),
            ("cygwin", OSKind.WINDOWS),
            ("win32", OSKind.WINDOWS),
            ("freebsd14", OSKind.UNKNOWN),
        ],
    )
    def test_tags(self, tag, expected):
        assert detect_os(tag) == expected

    def test_environment_ostype(self, monkeypatch):
        monkeypatch.setenv("OSTYPE", "darwin22")
        assert detect_os() == OSKind.MACOS

    def test_falls_back_to_sys_platform(self, monkeypatch):
        monkeypatch.delenv("OSTYPE", raising=False)
        monkeypatch.setattr(sys, "platform", "linux")
        assert detect_os() == OSKind.LINUX
