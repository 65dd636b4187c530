#!/usr/bin/env python
# -*- coding: utf-8 -*-
from setuptools import find_packages, setup

# There are problems running setup.py on Windows if the encoding is not set
with open('README.md', encoding='utf8') as readme_file:
    readme = readme_file.read()


setup(
    name='tinyrna-setup',
    version='1.0.0',
    description="Bootstraps Miniconda and the tinyRNA conda environment from a platform lockfile.",
    long_description=readme,
    long_description_content_type="text/markdown",
    author="tinyRNA",
    packages=find_packages(include=['tinyrna_setup', 'tinyrna_setup.*']),
    entry_points={
        'console_scripts': [
            'tinyrna-setup=tinyrna_setup.cli:cli'
        ]
    },
    include_package_data=True,
    install_requires=[
        'setuptools',
        'Click>=8.0.2',
        'typer>=0.12.1',
        'rich',
        'requests',
        'psutil',
        'typing-extensions>=4.7.1',
    ],
    extras_require={
        'test': [
            'pytest',
        ],
    },
    python_requires=">=3.8",
    license="GPLv3",
    zip_safe=False,
    keywords='tinyrna conda miniconda setup',
    classifiers=[
        'Development Status :: 5 - Production/Stable',
        'Intended Audience :: Science/Research',
        'License :: OSI Approved :: GNU General Public License v3 (GPLv3)',
        'Natural Language :: English',
        'Operating System :: MacOS',
        'Operating System :: POSIX :: Linux',
        'Programming Language :: Python :: 3',
        'Programming Language :: Python :: 3.8',
        'Programming Language :: Python :: 3.9',
        'Programming Language :: Python :: 3.10',
        'Programming Language :: Python :: 3.11',
        'Programming Language :: Python :: 3.12',
    ]
)
