from pathlib import Path

from funcbridge.registry import FunctionRegistry, request_schema, response_schema

repo_root = Path(__file__).resolve().parents[1]
r = FunctionRegistry()
r.discover(repo_root / "tools")

print("Discovered functions:")
for name, d in r.list().items():
    print("-", name, [a.name for a in d.args], d.source)

d = r.get("calculator.add")
print("request schema:", request_schema(d))
print("response schema:", response_schema(d))
