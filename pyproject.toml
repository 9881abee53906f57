[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "drinkctl"
version = "0.1.0"
description = "Drink machine controller: recipe database, order queue, admin TCP server and admin client"
requires-python = ">=3.10"
dependencies = []
keywords = ["drink machine", "cocktail", "sqlite", "controller", "tcp", "spi"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Environment :: Console",
    "Intended Audience :: End Users/Desktop",
    "Operating System :: POSIX :: Linux",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Home Automation",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
drinkctl = "drinkctl.cli:main"
drinkctl-admin = "drinkctl.admin_client:main"

[tool.hatch.build.targets.wheel]
packages = ["drinkctl"]

[tool.pytest.ini_options]
addopts = "-ra"
