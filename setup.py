#!/usr/bin/env python
# -*- encoding: utf-8 -*-
import io
import re
from os.path import dirname, join

from setuptools import find_packages, setup


def read(*names, **kwargs):
    return io.open(
        join(dirname(__file__), *names), encoding=kwargs.get("encoding", "utf8")
    ).read()


def find_version(*file_paths):
    contents = read(*file_paths)
    match = re.search(r"^__version__ = ['\"]([^'\"]*)['\"]", contents, re.M)
    if match:
        return match.group(1)
    raise RuntimeError("Unable to find version string.")


TESTS_REQUIRE = ["pytest", "pytest-mock"]

setup(
    name="podcreds",
    python_requires=">=3.7",
    version=find_version("src", "podcreds", "__init__.py"),
    license="MIT",
    description="Resolve AWS sessions from Kubernetes secret locators",
    long_description="""`podcreds` turns references to Kubernetes secrets, exposed to a
pod through environment variables or a mounted volume, into Boto3 sessions bound
to a region. Sessions can also assume an IAM role or fall back to the default
credential chain.""",
    long_description_content_type="text/markdown",
    packages=find_packages("src"),
    package_dir={"": "src"},
    include_package_data=True,
    zip_safe=False,
    classifiers=[
        "Development Status :: 5 - Production/Stable",
        "Intended Audience :: Developers",
        "License :: OSI Approved :: MIT License",
        "Operating System :: POSIX",
        "Programming Language :: Python",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: Implementation :: CPython",
        "Topic :: Utilities",
    ],
    keywords=["aws", "kubernetes", "credentials", "boto3"],
    install_requires=[
        "boto3>=1.12.39",
        "PyYAML>=3.10",
    ],
    tests_require=TESTS_REQUIRE,
    extras_require={"test": TESTS_REQUIRE},
    entry_points={
        "console_scripts": [
            "podcreds = podcreds.cli:main",
        ]
    },
)
