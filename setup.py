#!/usr/bin/env python
import codecs
import os
import re

from setuptools import find_packages
from setuptools import setup


def read(*parts):
    path = os.path.join(os.path.dirname(__file__), *parts)
    with codecs.open(path, encoding='utf-8') as fobj:
        return fobj.read()


def find_version(*file_paths):
    version_file = read(*file_paths)
    version_match = re.search(r"^__version__ = ['\"]([^'\"]*)['\"]",
                              version_file, re.M)
    if version_match:
        return version_match.group(1)
    raise RuntimeError("Unable to find version string.")


install_requires = [
    'PyYAML >= 5.1, < 7',
    'requests >= 2.20.0, < 3',
    'docker >= 5',
    'jsonschema >= 3.0, < 5',
    'python-dotenv >= 0.13.0, < 2',
]


tests_require = [
    'ddt >= 1.2.2, < 2',
    'pytest',
]


extras_require = {
    'tests': tests_require,
}


setup(
    name='orchestriq',
    version=find_version("orchestriq", "__init__.py"),
    description='Compile container templates and image builds into Docker Engine requests',
    long_description=read('README.md'),
    long_description_content_type='text/markdown',
    license='Apache License 2.0',
    packages=find_packages(exclude=['tests.*', 'tests']),
    package_data={'orchestriq.config': ['*.json']},
    include_package_data=True,
    install_requires=install_requires,
    extras_require=extras_require,
    python_requires='>=3.7',
    classifiers=[
        'Development Status :: 4 - Beta',
        'Intended Audience :: Developers',
        'License :: OSI Approved :: Apache Software License',
        'Programming Language :: Python :: 3',
    ],
)
