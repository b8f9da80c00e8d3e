[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "vertexsim"
version = "0.1.0"
description = "Monte Carlo simulation and reconstruction of the primary collision vertex in a two-layer cylindrical silicon tracker"
requires-python = ">=3.10"
keywords = [
    "physics",
    "monte-carlo",
    "vertex",
    "tracking",
    "tracklets",
    "multiple-scattering",
    "reconstruction",
]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Science/Research",
    "Intended Audience :: Education",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Scientific/Engineering :: Physics",
]
dependencies = [
    "matplotlib",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[project.scripts]
vertexsim-generate = "vertexsim.simulation:main"
vertexsim-analyse = "vertexsim.analysis:main"

[tool.hatch.build.targets.wheel]
packages = ["vertexsim"]

[tool.hatch.build.targets.sdist]
include = [
    "vertexsim",
    "tests",
    "pyproject.toml",
]

[tool.pytest.ini_options]
addopts = "-ra"
