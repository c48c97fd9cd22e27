"""Shared test fixtures for mbuild.

Provides an isolated config environment, a reset of the global output
manager, and a throw-away Leaf project whose toolchain is made of small
Python scripts run through ``sys.executable``. The real ``swift`` and
``zip`` binaries are never needed.

The fake tools are steered with environment variables, which the child
processes inherit:

* ``FAKE_BUILD_EXIT`` -- exit status of the fake build tool.
* ``FAKE_BUILD_SKIP_ARTIFACT`` -- build "succeeds" without writing the library.
* ``FAKE_ZIP_SKIP`` -- archiver exits without writing the archive.
* ``FAKE_PREFS_EXIT`` -- exit status of the preferences program.
"""

from __future__ import annotations

import json
import sys
import textwrap
from dataclasses import dataclass
from pathlib import Path

import pytest

from mbuild.models import MbuildConfig
from mbuild.output import reset_output


LEAF_NAME = "Foo"
METADATA = b"name = Foo\nversion = 1.0\n"

_FAKE_BUILD = textwrap.dedent(
    """\
    import os
    import sys

    assert sys.argv[1] == "-c", sys.argv
    mode = sys.argv[2]
    print(f"Building for {mode}")
    sys.stderr.write("warning: this is stderr\\n")
    if os.environ.get("FAKE_BUILD_SKIP_ARTIFACT") is None:
        out = os.path.join(".build", mode)
        os.makedirs(out, exist_ok=True)
        for target in os.listdir("Sources"):
            print(f"Compiling {target}")
            with open(os.path.join(out, f"lib{target}.dylib"), "wb") as f:
                f.write(b"\\xcf\\xfa\\xed\\xfe" + target.encode())
    sys.exit(int(os.environ.get("FAKE_BUILD_EXIT", "0")))
    """
)

_FAKE_ZIP = textwrap.dedent(
    """\
    import os
    import sys
    import zipfile

    assert sys.argv[1] == "-r", sys.argv
    archive, source = sys.argv[2], sys.argv[3]
    print("adding stuff nobody should see")
    if os.environ.get("FAKE_ZIP_SKIP") is not None:
        sys.exit(12)
    with zipfile.ZipFile(archive, "w") as zf:
        for dirpath, _dirs, files in os.walk(source):
            for filename in files:
                zf.write(os.path.join(dirpath, filename))
    """
)

_FAKE_PREFS = textwrap.dedent(
    """\
    import json
    import os
    import sys

    print("Compiling preferences for Foo")
    with open(sys.argv[1], "w") as f:
        json.dump({"enabled": True, "interval": 5}, f)
    sys.exit(int(os.environ.get("FAKE_PREFS_EXIT", "0")))
    """
)


@dataclass
class LeafProject:
    """A Leaf project on disk plus a config that drives the fake toolchain."""

    root: Path
    name: str
    tools: Path
    install_dir: Path
    config: MbuildConfig
    metadata: bytes = METADATA

    @property
    def staging(self) -> Path:
        return self.root / "LeafContainer"

    @property
    def archive(self) -> Path:
        return self.root / f"{self.name}.zip"

    @property
    def installed(self) -> Path:
        return self.install_dir / f"{self.name}.zip"

    def config_overrides(self) -> dict:
        """The config as it would appear in a project ``mbuild.json``."""
        return self.config.model_dump(mode="json", exclude_defaults=True)


# ---------------------------------------------------------------------------
# Auto-reset global output state between tests
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _reset_output_between_tests() -> None:
    """Reset the global OutputManager after every test.

    The manager's Rich console keeps a reference to the sys.stderr it saw
    at creation time, which pytest and CliRunner swap out per test.
    """
    yield
    reset_output()


# ---------------------------------------------------------------------------
# Config isolation fixture
# ---------------------------------------------------------------------------


@pytest.fixture
def isolated_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Isolate configuration to a temporary directory.

    Points the XDG directories at subdirectories of tmp_path, clears all
    MBUILD_* and FAKE_* environment variables, and forces the XDG code
    paths regardless of the host platform.

    Returns:
        The tmp_path root directory.
    """
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "config"))
    monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path / "data"))
    monkeypatch.setattr("mbuild.config._is_xdg_platform", lambda: True)

    for var in [
        "MBUILD_HOST",
        "MBUILD_INSTALL_DIR",
        "FAKE_BUILD_EXIT",
        "FAKE_BUILD_SKIP_ARTIFACT",
        "FAKE_ZIP_SKIP",
        "FAKE_PREFS_EXIT",
        "NO_COLOR",
    ]:
        monkeypatch.delenv(var, raising=False)

    return tmp_path


# ---------------------------------------------------------------------------
# Leaf project fixture
# ---------------------------------------------------------------------------


@pytest.fixture
def leaf_project(isolated_config: Path) -> LeafProject:
    """A valid project named ``Foo`` with ``info.sap`` and a preferences script.

    Layout::

        project/Sources/Foo/info.sap
        project/Sources/Foo/FooPreferences.py
        tools/fake_build.py, tools/fake_zip.py
        install/                       (not created)
    """
    root = isolated_config / "project"
    source = root / "Sources" / LEAF_NAME
    source.mkdir(parents=True)
    (source / "info.sap").write_bytes(METADATA)
    (source / f"{LEAF_NAME}Preferences.py").write_text(_FAKE_PREFS)

    tools = isolated_config / "tools"
    tools.mkdir()
    (tools / "fake_build.py").write_text(_FAKE_BUILD)
    (tools / "fake_zip.py").write_text(_FAKE_ZIP)

    install_dir = isolated_config / "install" / "Maple" / "Development"

    config = MbuildConfig(
        build_tool=[sys.executable, str(tools / "fake_build.py")],
        archiver=[sys.executable, str(tools / "fake_zip.py")],
        prefs_runner=[sys.executable],
        prefs_extension=".py",
        library_suffix=".dylib",
        install_dir=str(install_dir),
    )
    return LeafProject(
        root=root,
        name=LEAF_NAME,
        tools=tools,
        install_dir=install_dir,
        config=config,
    )


@pytest.fixture
def cli_project(leaf_project: LeafProject, monkeypatch: pytest.MonkeyPatch) -> LeafProject:
    """The Leaf project with its config written to ``mbuild.json`` and cwd set to it."""
    (leaf_project.root / "mbuild.json").write_text(
        json.dumps(leaf_project.config_overrides(), indent=2)
    )
    monkeypatch.chdir(leaf_project.root)
    return leaf_project
