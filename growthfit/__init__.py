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

"""
Growth-curve fitting, model comparison, and moving-block-bootstrap
forecasting for cumulative epidemic counts.

Fit a L{growth.Curve} to a series with L{fit.Fitter}, compare fits
with L{compare.Comparison}, and get prediction intervals with
L{bootstrap.BlockBootstrap}. Or just give some L{data.Series} objects
to a L{pipeline.Pipeline} and let it do all that for you.
"""
