[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "puppetkin"
version = "0.1.0"
description = "Kinematic joints, collision surfaces, hitboxes, a camera and level management for small 3D games"
requires-python = ">=3.10"
dependencies = ["numpy"]
keywords = ["kinematics", "game", "collision", "joints", "hitbox", "levels"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Operating System :: OS Independent",
    "Topic :: Games/Entertainment",
    "Topic :: Scientific/Engineering :: Mathematics",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["puppetkin"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"
