import os
import subprocess
import sys
from pathlib import Path

_MODULES = {
    "meadow.app.headless": ("app", "headless.py"),
    "meadow.sim.core.engine": ("sim", "core", "engine.py"),
}


def _import_from_checkout(repo_root: Path, module: str) -> subprocess.CompletedProcess:
    env = os.environ.copy()
    env.pop("PYTHONPATH", None)
    env.setdefault("PYGAME_HIDE_SUPPORT_PROMPT", "1")
    code = f"import importlib; print(importlib.import_module({module!r}).__file__)"
    return subprocess.run([sys.executable, "-c", code], cwd=repo_root, env=env, capture_output=True, text=True)


def test_checkout_imports_resolve_to_src_tree():
    repo_root = Path(__file__).resolve().parents[2]
    for module, parts in _MODULES.items():
        proc = _import_from_checkout(repo_root, module)
        assert proc.returncode == 0, proc.stderr

        lines = proc.stdout.strip().splitlines()
        assert lines, f"{module} path not printed"
        expected = repo_root.joinpath("src", "meadow", *parts)
        assert Path(lines[-1]).resolve().samefile(expected)
