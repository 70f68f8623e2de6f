#!/usr/bin/env python3

import os
import re

from setuptools import setup


def read(fname):
    with open(os.path.join(os.path.dirname(__file__), fname)) as f:
        return f.read()


def version():
    match = re.search(
        r"^__version__ = ['\"]([^'\"]*)['\"]", read("src/patchable/__init__.py"), re.M
    )
    if not match:
        raise RuntimeError("failed to parse version")
    return match.group(1)


install_requires = ["jsonpatch >= 1.32", "jsonpointer >= 2.0", "WebOb >= 1.8.1", "wrapt >= 1.10.11"]

extras_require = {"test": ["pytest >= 6.0"]}

classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "License :: OSI Approved :: Mozilla Public License 2.0 (MPL 2.0)",
    "Programming Language :: Python :: 3",
    "Topic :: Internet :: WWW/HTTP :: WSGI :: Application",
]

setup(
    name="patchable",
    version=version(),
    description="Customer resource with JSON Patch and partial patch support.",
    long_description=read("README.rst"),
    classifiers=classifiers,
    packages=["patchable"],
    package_dir={"": "src"},
    python_requires=">= 3.8",
    install_requires=install_requires,
    extras_require=extras_require,
    entry_points={"console_scripts": ["patchable = patchable.app:main"]},
    license="Mozilla Public License 2.0",
    keywords="wsgi http resource json patch",
)
