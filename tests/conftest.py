"""Shared fixtures: stand-in external tools written as small Python scripts."""

import json
import sys
import textwrap

import pytest

FAKE_BUNDLER = r'''
import json, sys
argv = sys.argv[1:]
with open(sys.argv[0] + ".argv.json", "w") as f:
    json.dump(argv, f)
entries, builtins, i = [], [], 0
while i < len(argv):
    if argv[i] == "-t":
        i = argv.index("]", i) + 1
    elif argv[i] == "-r":
        builtins.append(argv[i + 1])
        i += 2
    else:
        entries.append(argv[i])
        i += 1
out = sys.stdout
out.write("(function prelude(modules, cache, entry) {\n")
for n in range(40):
    out.write("    /* runtime scaffolding line %d */ var required_%d = modules[%d];\n" % (n, n, n))
out.write("})({\n")
for name in builtins:
    out.write("    /* builtin */ %s: function (require, module, exports) {},\n" % json.dumps(name))
for path in entries:
    with open(path) as src:
        out.write(src.read())
out.write("});\n")
'''

FAKE_MINIFIER = r'''
import json, re, sys
with open(sys.argv[0] + ".argv.json", "w") as f:
    json.dump(sys.argv[1:], f)
data = sys.stdin.read()
data = re.sub(r"/\*.*?\*/", "", data, flags=re.S)
data = re.sub(r"\s+", " ", data)
sys.stdout.write(data.strip())
'''

FAILING_TOOL = r'''
import sys
sys.stdin.read() if not sys.stdin.isatty() else None
sys.stderr.write("Error: Cannot find module 'missing-dep'\n")
sys.exit(1)
'''


def _write_tool(tmp_path, name, body):
    path = tmp_path / f"{name}.py"
    path.write_text(textwrap.dedent(body), encoding="utf-8")
    return [sys.executable, str(path)]


def recorded_argv(command):
    """Return the argv a stand-in tool recorded on its last run."""
    with open(command[-1] + ".argv.json", encoding="utf-8") as f:
        return json.load(f)


@pytest.fixture
def make_tool(tmp_path):
    """Factory writing a Python script and returning its command line."""
    def _make(name, body):
        return _write_tool(tmp_path, name, body)
    return _make


@pytest.fixture
def fake_bundler(make_tool):
    return make_tool("bundler", FAKE_BUNDLER)


@pytest.fixture
def fake_minifier(make_tool):
    return make_tool("minifier", FAKE_MINIFIER)


@pytest.fixture
def failing_tool(make_tool):
    return make_tool("failing", FAILING_TOOL)


@pytest.fixture
def fake_npm(make_tool, tmp_path):
    """Installer stand-in: records its argv and prints ``stdout`` as given."""
    def _make(stdout, exit_code=0):
        marker = tmp_path / "npm-called"
        body = (
            "import json, sys\n"
            f"open({str(marker)!r}, 'a').write(json.dumps(sys.argv[1:]) + '\\n')\n"
            f"sys.stdout.write({stdout!r})\n"
            f"sys.exit({exit_code})\n"
        )
        return make_tool("npm", body), marker
    return _make


@pytest.fixture
def local_module(tmp_path):
    """A trivial local module with no dependencies."""
    path = tmp_path / "path.js"
    path.write_text(
        "// a trivial module\n"
        "module.exports = function add (first, second) {\n"
        "    /* adds two numbers together */\n"
        "    return first + second;\n"
        "};\n",
        encoding="utf-8",
    )
    return path
