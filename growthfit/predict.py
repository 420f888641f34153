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
The prediction frame of a fitted growth curve: fitted values over the
observed days and some days beyond, with bootstrap prediction
intervals for the future ones.
"""

import numpy as np

from .util import sub, numText


class Prediction(object):
    """
    I hold the predictions of one fitted model for one series.

    Construct me with a L{fit.Fit}, the L{data.Series} it was fitted
    to, the number of I{daysAhead} to forecast beyond the last
    observation, and, optionally, the L{bootstrap.Intervals} for those
    future days.

    My rows run over every day offset I{x} from the first observation
    through I{daysAhead} days after the last, with the date, the
    fitted value, the lower and upper interval bounds, and the daily
    increment given by the first derivative of the fitted curve. The
    bounds are NaN for observed days and whenever there are no
    intervals.
    """
    def __init__(self, fit, series, daysAhead=14, intervals=None):
        self.fit = fit
        self.series = series
        self.daysAhead = daysAhead
        n = fit.n
        self.x = np.arange(1, n+daysAhead+1, dtype=float)
        self.dates = [series.date(x) for x in self.x]
        self.fitted = fit.predict(self.x)
        self.increments = fit.increments(self.x)
        self.lower = np.full(len(self.x), np.nan)
        self.upper = np.full(len(self.x), np.nan)
        self.intervals = intervals
        if intervals is not None:
            self.setIntervals(intervals)

    def setIntervals(self, intervals):
        """
        Sets my lower and upper bounds for the future offsets of the
        supplied L{bootstrap.Intervals}, ignoring any that aren't in my
        range.
        """
        self.intervals = intervals
        n = self.fit.n
        for x, lower, upper in intervals:
            k = int(round(x)) - 1
            if n <= k < len(self.x):
                self.lower[k] = lower
                self.upper[k] = upper

    @property
    def future(self):
        """
        A boolean array that is C{True} for my rows beyond the observed
        days.
        """
        return self.x > self.fit.n

    def futureX(self):
        """
        Returns an array of my day offsets beyond the observed days.
        """
        return self.x[self.future]

    def __len__(self):
        return len(self.x)

    def __iter__(self):
        """
        I iterate over my rows as tuples of (x, date, fitted, lower,
        upper).
        """
        for k, x in enumerate(self.x):
            yield (
                int(x), self.dates[k], self.fitted[k],
                self.lower[k], self.upper[k])

    def __str__(self):
        lines = [sub(
            "{:>4s}  {:<10s} {:>12s} {:>12s} {:>12s} {:>10s}",
            "x", "date", "fitted", "lower", "upper", "daily")]
        for k, row in enumerate(self):
            lines.append(sub(
                "{:>4d}  {} {:>12s} {:>12s} {:>12s} {:>10s}",
                row[0], row[1].isoformat(),
                *[numText(x, 7) for x in row[2:]],
                numText(self.increments[k], 5)))
        return "\n".join(lines)
