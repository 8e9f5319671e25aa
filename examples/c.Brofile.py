"""This example builds a typical C/C++ project with `bro`:
- src/core/*.c builds into a static library, libcore.a
- src/app/*.cpp builds into an executable linked against it
- `bro core` builds only the library, `bro -- -app` everything but the executable
- `bro --ninja` and `bro --makefile` write the same build as build.ninja or a Makefile

Objects are only rebuilt if their source is newer, and the executable only if an object
or the library is newer.
"""

bro.register_cmd("cc", ["${cc}", "-Wall", "-O2", "-c", "${in}", "-o", "${out}"], ".c")
bro.register_cmd("cxx", ["${cxx}", "-Wall", "-O2", "-c", "${in}", "-o", "${out}"], ".cpp", ".cc")

bro.register_module("core", "src/core", kind=LIB)
bro.use("core", "cc")

bro.register_module("app", "src/app")
bro.use("app", "cxx")
bro.depend("app", "core")
bro.link("app", f"{bro.root}/lib/libcore.a", "-lstdc++")
