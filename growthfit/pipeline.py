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
The pipeline driver: fits every growth-curve family to each series,
compares the fits, and forecasts with bootstrap prediction intervals.

A failure of one family or one bootstrap is recorded with the
series' result and doesn't stop anything else.
"""

import numpy as np
from twisted.internet import defer

from .util import sub, msg
from .growth import FAMILIES
from .fit import Fitter, ConvergenceError
from .compare import Comparison
from .bootstrap import BlockBootstrap, BlockLengthError, BootstrapError
from .predict import Prediction


class SeriesResult(object):
    """
    Everything the pipeline produced for one L{data.Series}.

    @ivar series: The series analyzed.
    @ivar fits: A dict of L{fit.Fit} objects keyed by family name, in
        the order they were fitted.
    @ivar failures: A dict of exceptions keyed by the name of the
        family whose fit failed.
    @ivar comparison: The L{compare.Comparison} of the successful
        fits.
    @ivar predictions: A dict of L{predict.Prediction} objects keyed by
        family name.
    @ivar bootstrapFailures: A dict of exceptions keyed by the name of
        the family whose bootstrap intervals couldn't be computed.
    """
    __slots__ = [
        'series', 'fits', 'failures', 'comparison',
        'predictions', 'bootstrapFailures']

    def __init__(self, series):
        self.series = series
        self.fits = {}
        self.failures = {}
        self.comparison = None
        self.predictions = {}
        self.bootstrapFailures = {}

    @property
    def name(self):
        return self.series.name

    def __str__(self):
        lines = [sub(
            "Series '{}', {:d} days from {} to {}", self.name,
            len(self.series), self.series.dates[0], self.series.dates[-1])]
        for name, e in self.failures.items():
            lines.append(sub("  {} fit failed: {}", name, e))
        for name, e in self.bootstrapFailures.items():
            lines.append(sub("  {} bootstrap failed: {}", name, e))
        if self.comparison is not None:
            lines.extend(["", str(self.comparison)])
        return "\n".join(lines)


class Pipeline(object):
    """
    I analyze observation series: fit each growth-curve family in
    L{growth.FAMILIES}, compare the fits, and predict I{daysAhead}
    days beyond the last observation with bootstrap intervals.

    Construct me with an optional C{asynqueue} task queue I{q} for
    the bootstrap refits and any of the keywords in my I{attributes}
    dict or in that of L{bootstrap.BlockBootstrap}.

    Call my instance with a sequence of L{data.Series} objects to get
    a C{Deferred} that fires with a dict of L{SeriesResult} objects
    keyed by series name. Each series is analyzed on its own, one
    after the other.

    @keyword daysAhead: The number of days to forecast.
    @keyword fitterKW: A dict of keywords for each L{fit.Fitter}.
    """
    attributes = {
        'daysAhead': 14,
        'fitterKW': {},
    }

    def __init__(self, q=None, **kw):
        self.q = q
        for name, value in self.attributes.items():
            setattr(self, name, kw.pop(name, value))
        self.fitterKW = dict(self.fitterKW)
        if not int(self.daysAhead) == self.daysAhead or self.daysAhead < 1:
            raise ValueError(sub("Invalid days ahead {}", self.daysAhead))
        self.bootstrap = BlockBootstrap(q=q, **kw)

    def fitAll(self, series, result):
        """
        Fits each growth-curve family to the I{series}, recording fits
        and failures in I{result}.

        The Richards start uses the fitted logistic asymptote, if
        there is one.
        """
        for curve in FAMILIES:
            kw = {'name': series.name}
            if curve.name == 'richards' and 'logistic' in result.fits:
                kw['asymptote'] = result.fits['logistic'].theta[0]
            try:
                fit = Fitter(curve, **self.fitterKW)(
                    series.x, series.y, **kw)
            except (ConvergenceError, ValueError) as e:
                msg("{}: {} fit failed, {}", series.name, curve.name, e)
                result.failures[curve.name] = e
                continue
            result.fits[curve.name] = fit

    @defer.inlineCallbacks
    def analyze(self, series):
        """
        Analyzes one I{series}, returning a C{Deferred} that fires with
        its L{SeriesResult}.
        """
        msg(0, "Analyzing '{}'...", series.name, '-')
        result = SeriesResult(series)
        self.fitAll(series, result)
        result.comparison = Comparison(result.fits.values())
        n = len(series)
        xf = np.arange(n+1, n+self.daysAhead+1, dtype=float)
        for name, fit in result.fits.items():
            prediction = Prediction(fit, series, self.daysAhead)
            result.predictions[name] = prediction
            try:
                intervals = yield self.bootstrap(fit, xf)
            except (BlockLengthError, BootstrapError) as e:
                msg("{}: {} bootstrap failed, {}", series.name, name, e)
                result.bootstrapFailures[name] = e
                continue
            prediction.setIntervals(intervals)
        msg(str(result))
        return result

    @defer.inlineCallbacks
    def __call__(self, seriesList):
        results = {}
        for series in seriesList:
            result = yield self.analyze(series)
            results[series.name] = result
        return results
