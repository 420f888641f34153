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
Plots of observed data, fitted growth curves, and bootstrap
prediction bands, one subplot per fitted family, using C{yampex}.
"""

import numpy as np
from yampex.plot import Plotter

from .util import sub


class ForecastPlotter(object):
    """
    I plot a L{pipeline.SeriesResult} to an image file at
    I{filePath}. Construct me with that and, optionally, the I{width}
    and I{height} of the figure in inches. Then call my instance with
    the result.
    """
    def __init__(self, filePath, width=12, height=None):
        self.filePath = filePath
        self.width = width
        self.height = height

    def add_model(self, ax, x, X, color='red'):
        ax.plot(x, X, color=color, linewidth=2)

    def add_band(self, ax, prediction):
        K = prediction.future
        if not np.any(np.isfinite(prediction.lower[K])):
            return
        ax.fill_between(
            prediction.x[K], prediction.lower[K], prediction.upper[K],
            color='red', alpha=0.2, linewidth=0)

    def subplot(self, sp, result, name):
        """
        Draws the data and the fit and forecast of family I{name} from
        the I{result} into subplot I{sp}.
        """
        series = result.series
        prediction = result.predictions[name]
        row = result.comparison[name]
        sp.add_line('')
        sp.add_marker('o', 3)
        sp.add_axvline(len(series))
        sp.add_textBox('NW', "{}: {}", name, prediction.fit.curve.text)
        sp.add_textBox(
            'NW', "R2={:.4f}, AICc={:.5g} {}", row.R2, row.AICc, row.marker)
        for pname, value in zip(prediction.fit.curve.names, prediction.fit.theta):
            sp.add_textBox('SE', "{}: {:.5g}", pname, value)
        ax = sp(series.x, series.y)
        self.add_model(ax, prediction.x, prediction.fitted)
        self.add_band(ax, prediction)

    def __call__(self, result):
        names = list(result.predictions.keys())
        if not names:
            return
        N = len(names)
        height = self.height if self.height else 4 + 4*N
        pt = Plotter(
            1, N, filePath=self.filePath, width=self.width, height=height)
        pt.use_grid()
        pt.set_title(
            "Observed (dots) vs fitted and forecast (red): {}", result.name)
        pt.set_xlabel(sub("Days since {}", result.series.date(0)))
        pt.set_ylabel("Cumulative count")
        with pt as sp:
            for name in names:
                self.subplot(sp, result, name)
        pt.show()
