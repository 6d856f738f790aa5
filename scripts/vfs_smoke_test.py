import tempfile
from pathlib import Path

from funcbridge.errors import PathNotMounted
from funcbridge.vfs import VirtualEnvironment

with tempfile.TemporaryDirectory() as root, tempfile.TemporaryDirectory() as data:
    env = VirtualEnvironment({"HOME": "/"}, [(root, "/"), (data, "/data")])

    env.write_file("/data/notes/../hello.txt", b"hello world")
    print("host path:", env.resolve_path("/data/hello.txt"))
    print("read:", env.read_file("/data/hello.txt", 6, 5))

    env.rewrite_file("/data/hello.txt", 0, b"HELLO")
    print("rewritten:", Path(data, "hello.txt").read_bytes())

    Path(root, "sub").mkdir()
    env.change_current_directory("/sub")
    env.write_file("rel.txt", "relative")
    print("cwd:", env.get_current_directory())
    print("list /:", env.list_file("/"))
    print("find *.txt:", env.find_file("/", "*.txt", recursive=True))

    try:
        VirtualEnvironment().read_file("/x", 0, 1)
    except PathNotMounted as e:
        print("no mounts:", e.code, e)
