# SPDX-FileCopyrightText: 2020,2021 University of Rochester
#
# SPDX-License-Identifier: MIT

from setuptools import setup, find_packages

setup(name='ebnfrr',
      version='0.1',
      packages=find_packages(exclude=['tests']),
      python_requires='>=3.8',
      install_requires=['railroad-diagrams', 'requests'],
      extras_require={'test': ['pytest']},
      scripts=['ebnfrr/generate.py']
)
