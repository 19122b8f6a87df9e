[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "dirserve"
version = "0.1.0"
description = "A small TCP directory-browsing server and interactive client with a line-based command protocol"
requires-python = ">=3.10"
dependencies = []
keywords = ["tcp", "server", "client", "file browsing", "directory listing"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Environment :: Console",
    "Intended Audience :: Developers",
    "Intended Audience :: System Administrators",
    "Operating System :: POSIX",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Internet :: File Transfer Protocol (FTP)",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
dirserve-server = "dirserve.server:main"
dirserve-client = "dirserve.client:main"

[tool.hatch.build.targets.wheel]
packages = ["dirserve"]

[tool.pytest.ini_options]
addopts = "-ra"
