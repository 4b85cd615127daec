from setuptools import setup, find_packages
from os import path, environ
import re


def read_file(name):
    """Returns a file's contents"""
    with open(path.join(path.dirname(__file__), name), encoding="utf-8") as f:
        return f.read()

# Read the version without importing the package, whose dependencies may not
# be installed yet in an isolated build environment.
owntime_version = re.search(
    r'^owntime_version = "([^"]+)"',
    read_file(path.join("owntime", "owntime_config.py")),
    re.MULTILINE,
).group(1)

# If we're testing packaging, build using a ".devN" suffix in the version number,
# so that we can upload new files (as testpypi/pypi don't allow re-uploading files with
# the same name as previously uploaded).
# Numbering scheme: https://www.python.org/dev/peps/pep-0440
dev_build = ('.dev' + environ['DEV_BUILD']) if 'DEV_BUILD' in environ else ''

setup(
    name="owntime",
    version=owntime_version + dev_build,
    description="Own-time and total-time breakdowns of statistical profiler samples",
    packages=find_packages(exclude=["tests", "tests.*"]),
    python_requires=">=3.8",
    install_requires=[
        "pydantic>=2.0",
        "rich>=10.7.0",
    ],
    extras_require={
        "test": [
            "pytest",
            "hypothesis",
        ],
    },
)
