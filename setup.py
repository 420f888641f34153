#!/usr/bin/env python
# -*- coding: utf-8 -*-
#
# growthfit:
# Nonlinear growth curves with block-bootstrap forecasting.
#
# Copyright (C) 2020 by Edwin A. Suominen,
# http://edsuom.com
#
# See edsuom.com for API documentation as well as information about
# Ed's background and other projects, software and otherwise.
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the
# License. You may obtain a copy of the License at
#
#   http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing,
# software distributed under the License is distributed on an "AS
# IS" BASIS, WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either
# express or implied. See the License for the specific language
# governing permissions and limitations under the License.


NAME = "growthfit"


### Imports and support
from setuptools import setup

### Define requirements
required = [
    'Twisted', 'numpy', 'scipy', 'matplotlib',
    # Other EAS projects
    'AsynQueue>=0.9.8', 'yampex>=0.9.5',
]


### Define setup options
kw = {'version': '0.1.0',
      'license': 'Apache License (2.0)',
      'platforms': 'OS Independent',

      'url': "http://edsuom.com/{}.html".format(NAME),
      'project_urls': {
          'GitHub': "https://github.com/edsuom/{}".format(NAME),
          },
      'author': "Edwin A. Suominen",
      'author_email': "foss@edsuom.com",
      'maintainer': 'Edwin A. Suominen',
      'maintainer_email': "foss@edsuom.com",

      'python_requires': '>=3.6',
      'install_requires': required,
      'extras_require': {
          'test': ['pytest'],
      },
      'packages': ['growthfit', 'growthfit.test', 'growthfit.scripts'],
      'entry_points': {
          'console_scripts': [
              "gf-forecast = growthfit.scripts.forecast:main",
          ],
      },
      'zip_safe': True,
      'long_description_content_type': "text/markdown",
}

kw['keywords'] = [
    'Twisted', 'asynchronous', 'nonlinear regression',
    'growth curve', 'logistic', 'gompertz', 'richards',
    'block bootstrap', 'forecast', 'covid-19',
]


kw['classifiers'] = [
    'Development Status :: 4 - Beta',

    'Intended Audience :: Science/Research',

    'License :: OSI Approved :: Apache Software License',
    'Operating System :: OS Independent',
    'Programming Language :: Python :: 3',
    'Framework :: Twisted',

    'Topic :: Scientific/Engineering :: Mathematics',
    'Topic :: Scientific/Engineering :: Medical Science Apps.',
]

# You get 77 characters. Use them wisely.
#----------------------------------------------------------------------------
#        10        20        30        40        50        60        70
#2345678901234567890123456789012345678901234567890123456789012345678901234567
kw['description'] = " ".join("""
Growth-curve fits of epidemic counts with block-bootstrap forecasts.
""".split("\n"))

kw['long_description'] = """
Fits exponential, logistic, Gompertz, and Richards growth curves to
cumulative epidemic counts by nonlinear least squares, compares the
fits by log-likelihood, R-squared, AIC, AICc, and BIC, and forecasts
two weeks ahead with prediction intervals from a moving block
bootstrap of the residuals.

The bootstrap refits can be dispatched to worker threads or processes
with *AsynQueue*, driven by the Twisted reactor.

The *gf-forecast* shell command does all that for the national
COVID-19 data of the Italian Civil Protection Department, read from a
local copy of *dpc-covid19-ita-andamento-nazionale.csv*.
"""

### Finally, run the setup
setup(name=NAME, **kw)
