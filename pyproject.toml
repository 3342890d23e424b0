[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "fvecrypt"
version = "0.1.0"
description = "Building blocks for BitLocker (FVE) volumes: AES-XTS/XEX, the Elephant diffuser, AES-CCM key unwrapping and metadata structures"
requires-python = ">=3.10"
dependencies = [
    "cryptography",
]
keywords = ["bitlocker", "fve", "aes-xts", "aes-ccm", "elephant diffuser", "disk encryption", "forensics"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Intended Audience :: System Administrators",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Security :: Cryptography",
    "Topic :: System :: Filesystems",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[tool.hatch.build.targets.wheel]
packages = ["fvecrypt"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
