[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "pluginhub"
version = "0.1.0"
description = "E-mail verified accounts, hashed tokens, a SQLite schema with migrations and a plugin registry"
requires-python = ">=3.10"
dependencies = []
keywords = ["plugins", "authentication", "tokens", "email verification", "migrations", "sqlite"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Internet :: WWW/HTTP :: Dynamic Content",
    "Topic :: Database",
]

[project.optional-dependencies]
test = [
    "pytest",
    "pytest-asyncio",
]

[project.scripts]
pluginhub-migrate = "pluginhub.schema:main"

[tool.hatch.build.targets.wheel]
packages = ["pluginhub"]

[tool.pytest.ini_options]
addopts = "-ra"
