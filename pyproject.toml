[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "spectroscope"
version = "0.1.0"
description = "Live time-domain and FFT spectrum viewer for 16-bit ADC sample streams"
requires-python = ">=3.10"
keywords = ["fft", "spectrum", "adc", "signal processing", "plotting", "matplotlib"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Science/Research",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Scientific/Engineering :: Visualization",
]
dependencies = [
    "numpy",
    "matplotlib",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[project.scripts]
spectroscope = "spectroscope.app:main"

[tool.hatch.build.targets.wheel]
packages = ["spectroscope"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
