[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "siomon"
version = "0.1.2"
description = "Linux hardware information parsers: SMBIOS/DMI, EDID, procfs, sysfs, NVMe and SATA SMART, Super I/O register access and sensor alerts"
requires-python = ">=3.10"
keywords = ["hardware", "sensors", "hwmon", "smbios", "edid", "smart", "monitoring"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Intended Audience :: System Administrators",
    "Operating System :: POSIX :: Linux",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Monitoring",
    "Topic :: System :: Hardware",
]
dependencies = []

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["siomon"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
