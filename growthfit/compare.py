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
Model comparison: information criteria and goodness of fit for
several fits of the same data, with a tiered marker for the models
the criteria favor.

The number of estimated parameters I{k} counts the error variance as
well as the curve parameters, as R's C{logLik} does for C{nls} fits.
"""

import numpy as np

from .util import sub, numText


CRITERIA = ('AIC', 'AICc', 'BIC')


def criteria(logLik, n, k):
    """
    Returns a 3-tuple with the AIC, AICc, and BIC of a model with
    log-likelihood I{logLik} fitted to I{n} observations with I{k}
    estimated parameters.

    The AICc is infinite when there aren't more than M{k+1}
    observations.
    """
    AIC = -2*logLik + 2*k
    N = n - k - 1
    AICc = AIC + 2.0*k*(k+1)/N if N > 0 else np.inf
    BIC = -2*logLik + k*np.log(n)
    return AIC, AICc, BIC

def rSquared(y, fitted):
    """
    Returns the squared Pearson correlation between observations I{y}
    and I{fitted} values, or NaN if either is constant.
    """
    y = np.asarray(y, dtype=float)
    fitted = np.asarray(fitted, dtype=float)
    if np.ptp(y) == 0 or np.ptp(fitted) == 0:
        return np.nan
    return np.corrcoef(y, fitted)[0,1]**2

def marker(count):
    """
    Returns the tiered marker for a model selected by I{count}
    criteria: "", "*", "**", or "***".
    """
    return "*"*count


class Row(object):
    """
    One row of a L{Comparison} table.
    """
    __slots__ = [
        'name', 'logLik', 'df', 'k', 'R2', 'AIC', 'AICc', 'BIC', 'count']

    def __init__(self, fit):
        self.name = fit.curve.name
        self.logLik = fit.logLik
        self.df = fit.df
        self.k = fit.k
        self.R2 = fit.R2
        self.AIC, self.AICc, self.BIC = fit.AIC, fit.AICc, fit.BIC
        self.count = 0

    @property
    def marker(self):
        return marker(self.count)

    def values(self):
        return [
            self.logLik, self.df, self.R2,
            self.AIC, self.AICc, self.BIC, self.marker]


class Comparison(object):
    """
    I compare fits of different growth-curve families to the same
    observations.

    Construct me with a sequence of L{fit.Fit} objects. All of them
    must be for the same I{x} and I{y} or a C{ValueError} is raised.

    For each of the information criteria in L{CRITERIA}, every model
    that attains the minimum (to within 1E-9) gets
    one selection count. Without ties, the counts total three.

    Access my rows by iterating over me or as items keyed by family
    name. C{str(comparison)} renders the table as text.
    """
    columns = ('loglik', 'df', 'R2', 'AIC', 'AICc', 'BIC', 'marker')

    def __init__(self, fits):
        self.fits = list(fits)
        self.checkData()
        self.rows = [Row(fit) for fit in self.fits]
        for name in CRITERIA:
            for k in self.selectedIndices(name):
                self.rows[k].count += 1

    def checkData(self):
        """
        Raises a C{ValueError} unless all my fits are of the same data.
        """
        if not self.fits:
            return
        x, y = self.fits[0].x, self.fits[0].y
        for fit in self.fits[1:]:
            if fit.x.shape != x.shape or \
               not np.array_equal(fit.x, x) or \
               not np.array_equal(fit.y, y, equal_nan=True):
                raise ValueError(sub(
                    "Can't compare the {} fit with the {} fit, "+\
                    "they are of different data",
                    fit.curve.name, self.fits[0].curve.name))

    def selectedIndices(self, name):
        """
        Returns a list of the indices of my rows whose criterion I{name}
        attains the minimum.
        """
        values = np.array([getattr(row, name) for row in self.rows])
        finite = values[~np.isnan(values)]
        if not len(finite):
            return []
        best = finite.min()
        return [
            k for k, value in enumerate(values)
            if value == best or np.isclose(value, best, rtol=0, atol=1e-9)]

    def selected(self, name):
        """
        Returns a list of the family names selected by criterion
        I{name}.
        """
        return [self.rows[k].name for k in self.selectedIndices(name)]

    def counts(self):
        """
        Returns a dict of selection counts keyed by family name.
        """
        return {row.name: row.count for row in self.rows}

    def best(self, name='AICc'):
        """
        Returns the first of my fits selected by criterion I{name}, or
        C{None} if I have no fits.
        """
        indices = self.selectedIndices(name)
        if indices:
            return self.fits[indices[0]]

    def __len__(self):
        return len(self.rows)

    def __iter__(self):
        for row in self.rows:
            yield row

    def __getitem__(self, name):
        for row in self.rows:
            if row.name == name:
                return row
        raise KeyError(name)

    def __contains__(self, name):
        return any(row.name == name for row in self.rows)

    def __str__(self):
        if not self.rows:
            return "(no fitted models)"
        lines = [sub(
            "{:<12s}" + "{:>12s}"*(len(self.columns)-1) + "  {}",
            "model", *self.columns)]
        for row in self.rows:
            values = row.values()
            lines.append(sub(
                "{:<12s}{:>12s}{:>12d}" + "{:>12s}"*4 + "  {}",
                row.name, numText(values[0], 6), values[1],
                *[numText(x, 6) for x in values[2:6]], values[6]))
        return "\n".join(lines)
