# -*- coding: utf-8 -*-
"""settings-resolver a module for resolving secret placeholders in json setting documents.

This module replaces replacement tokens embedded in the string values of json setting
documents with secrets fetched from pluggable secret backends, optionally through pluggable
caches.

"""

import setuptools
import re
from io import open

VERSIONFILE="settings_resolver/_version.py"
verstrline = open(VERSIONFILE, "rt").read()
VSRE = r"^__version__ = ['\"]([^'\"]*)['\"]"
mo = re.search(VSRE, verstrline, re.M)
if mo:
    verstr = mo.group(1)
else:
    raise RuntimeError("Unable to find version string in %s." % (VERSIONFILE,))

with open("README.md", "r", encoding='utf-8') as fh:
    long_description = fh.read()

setuptools.setup(
    name='settings_resolver',
    version=verstr,
    author="Mike Moore",
    author_email="z_z_zebra@yahoo.com",
    description="Resolve secret replacement tokens in json setting documents through pluggable secret and cache providers",
    long_description_content_type="text/markdown",
    long_description=long_description,
    packages=setuptools.find_packages(),
    python_requires=">=3.8",
    tests_require=['pytest'],
    extras_require={
        "test": ["pytest"],
    },
    include_package_data=True,
    license="MIT",
    scripts=[],
    install_requires=[
        "google-cloud-secret-manager~=2.0",
        "google-auth>=2.0,<3.0",
        "google-api-core>=2.0,<3.0",
        "google-crc32c~=1.0",
        "grpcio~=1.0",
        "redis>=4.0"
    ],
    classifiers=[
        "Programming Language :: Python :: 3",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
    ],

)
