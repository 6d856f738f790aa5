import tempfile
from pathlib import Path

from funcbridge import App, AppConfig

repo_root = Path(__file__).resolve().parents[1]

with tempfile.TemporaryDirectory() as sandbox:
    app = App(AppConfig(env={"DEBUG": "true"}, mounts=[(sandbox, "/")], tools_root=repo_root / "tools"))
    app.discover()

    # should coerce text to int, return ok and write /debug.log
    res = app.call("calculator.add", {"x": "10", "y": "20"})
    print("status:", res.status)
    print("envelope:", res.envelope())
    print("meta:", res.meta)
    print("debug.log:", (Path(sandbox) / "debug.log").read_text())

    # conversion failure
    res = app.call("calculator.add", {"x": "abc", "y": "20"})
    print("status:", res.status)
    print("error:", res.error)
