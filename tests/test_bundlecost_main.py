"""End-to-end tests for the bundlecost entry point."""

import json

import pytest

from bundlecost import main
from constants import Constants, ExitCodes

from conftest import recorded_argv


@pytest.fixture
def workspace(tmp_path, monkeypatch, fake_bundler, fake_minifier, fake_npm):
    """Working directory plus a config wiring every external tool to a stand-in."""
    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv(Constants.ENV_CONFIG, raising=False)
    monkeypatch.delenv(Constants.ENV_CACHE_DIR, raising=False)
    cache = tmp_path / "cache"

    def _configure(npm_stdout=json.dumps({"dependencies": {}}), npm_exit=0):
        npm, marker = fake_npm(npm_stdout, npm_exit)
        cfg = tmp_path / "bundlecost.yml"
        cfg.write_text(json.dumps({"bundlecost": {
            "cache_dir": str(cache),
            "npm_command": npm,
            "bundler_command": fake_bundler,
            "minifier_command": fake_minifier,
        }}), encoding="utf-8")
        return str(cfg), marker

    _configure.cache = cache
    return _configure


def _run(argv):
    with pytest.raises(SystemExit) as exc:
        main(argv)
    return exc.value.code


class TestMain:
    """Full runs through install, resolve and measure."""

    def test_local_module(self, workspace, local_module, capsys):
        cfg, npm_marker = workspace()

        code = _run(["./path.js", "--config", cfg])

        out = capsys.readouterr().out
        assert code == ExitCodes.SUCCESS.value
        assert not npm_marker.exists()
        assert f"[module]  {local_module}" in out
        assert "Uncompressed: ~" in out
        assert "Minified: " in out
        assert "Minified + gzipped (level: default): ~" in out
        assert "approximate" in out

    def test_builtin(self, workspace, fake_bundler, capsys):
        cfg, npm_marker = workspace()

        code = _run(["fs", "-g", "9", "--config", cfg])

        out = capsys.readouterr().out
        assert code == ExitCodes.SUCCESS.value
        assert not npm_marker.exists()
        assert "[builtin] fs" in out
        assert "(level: 9)" in out
        assert recorded_argv(fake_bundler)[-2:] == ["-r", "fs"]

    def test_package(self, workspace, fake_bundler, fake_minifier, capsys):
        cfg, npm_marker = workspace(json.dumps({"dependencies": {"tiny": {"version": "1.0.0"}}}))
        pkg_dir = workspace.cache / "node_modules" / "tiny"
        pkg_dir.mkdir(parents=True)
        (pkg_dir / "index.js").write_text("module.exports = 1;\n", encoding="utf-8")

        code = _run(["tiny@1.0.0", "--config", cfg, "--", "--beautify"])

        out = capsys.readouterr().out
        assert code == ExitCodes.SUCCESS.value
        assert len(npm_marker.read_text().splitlines()) == 1
        assert "[package] tiny@1.0.0" in out
        assert "Using uglify arguments: --beautify" in out
        assert recorded_argv(fake_bundler)[0] == str(pkg_dir / "index.js")
        assert recorded_argv(fake_minifier) == ["--beautify"]

    def test_malformed_installer_output_aborts(self, workspace, capsys):
        cfg, _ = workspace("npm notice created a lockfile\nall good!\n")

        code = _run(["lodash", "--config", cfg])

        out = capsys.readouterr().out
        assert code == ExitCodes.INSTALL_ERROR.value
        assert "Unable to parse installer output" in out
        assert "Uncompressed" not in out

    def test_installer_failure_aborts(self, workspace, capsys):
        cfg, _ = workspace("", npm_exit=1)
        assert _run(["lodash", "--config", cfg]) == ExitCodes.INSTALL_ERROR.value
        assert "Weighing modules" not in capsys.readouterr().out

    def test_missing_local_file(self, workspace, capsys):
        cfg, _ = workspace()
        assert _run(["./missing.js", "--config", cfg]) == ExitCodes.RESOLUTION_ERROR.value
        assert "Cannot find module './missing.js'" in capsys.readouterr().out

    def test_bundle_failure(self, workspace, local_module, failing_tool, fake_minifier,
                            tmp_path, capsys):
        workspace()
        bad = tmp_path / "bad.yml"
        bad.write_text(json.dumps({
            "bundler_command": failing_tool,
            "minifier_command": fake_minifier,
        }), encoding="utf-8")

        code = _run(["./path.js", "--config", str(bad)])

        assert code == ExitCodes.BUNDLE_ERROR.value
        assert "Uncompressed" not in capsys.readouterr().out

    def test_bad_config(self, workspace, tmp_path):
        bad = tmp_path / "bad.yml"
        bad.write_text("gzip_level: [1\n", encoding="utf-8")
        assert _run(["fs", "--config", str(bad)]) == ExitCodes.USAGE_ERROR.value
