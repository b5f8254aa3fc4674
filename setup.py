#!/usr/bin/env python3
"""
Setup script for sitepipe - static site build tasks.
"""

from setuptools import setup, find_packages
import os

# Read the contents of README file
this_directory = os.path.abspath(os.path.dirname(__file__))
with open(os.path.join(this_directory, 'README.md'), encoding='utf-8') as f:
    long_description = f.read()

setup(
    name='sitepipe',
    version='1.0.0',
    description='Static site build tasks: Markdown and Jinja2 pages, assets, watch and reports',
    long_description=long_description,
    long_description_content_type='text/markdown',
    packages=find_packages(exclude=['tests', 'tests.*']),
    classifiers=[
        'Development Status :: 4 - Beta',
        'Intended Audience :: Developers',
        'License :: OSI Approved :: MIT License',
        'Operating System :: OS Independent',
        'Programming Language :: Python :: 3',
        'Programming Language :: Python :: 3.8',
        'Programming Language :: Python :: 3.9',
        'Programming Language :: Python :: 3.10',
        'Programming Language :: Python :: 3.11',
        'Programming Language :: Python :: 3.12',
        'Programming Language :: Python :: 3.13',
        'Topic :: Internet :: WWW/HTTP :: Site Management',
        'Topic :: Software Development :: Build Tools',
        'Topic :: Text Processing :: Markup :: HTML',
    ],
    python_requires='>=3.8',
    install_requires=[
        'PyYAML>=6.0',
        'Jinja2>=3.0',
        'mistune>=3.0',
        'htmlmin2>=0.1.13',
        'csscompressor>=0.9.5',
        'rjsmin>=1.2',
        'watchdog>=3.0',
    ],
    extras_require={
        'test': [
            'pytest>=7.0',
            'beautifulsoup4>=4.11',
        ],
    },
    entry_points={
        'console_scripts': [
            'sitepipe=sitepipe.cli:main',
        ],
    },
    keywords='static site generator, markdown, jinja2, build tasks, front matter',
)
