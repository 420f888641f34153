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
Starting-value estimators for the growth curves in L{growth}.

The exponential start is a log-linear regression. The logistic and
Gompertz starts follow the self-starting models of R's C{nls}
(C{SSlogis}, C{SSgompertz}): a linearizing transform gets rough
values and then a partially linear refinement, with the asymptote
solved in closed form, polishes the nonlinear ones. The Richards
start is a Nelder-Mead search on the sum of squared residuals,
seeded from a logistic asymptote.

Each function returns a 1-D array of parameter values in the order of
the curve family's C{names}.
"""

import numpy as np
from scipy import stats, optimize

from .util import sub


class NonPositiveDataError(ValueError):
    """
    A log transform was needed for data that has zero or negative
    values.
    """


def arrays(x, y):
    """
    Returns I{x} and I{y} as float arrays, raising a C{ValueError} if
    they are not the same length or are too short for a regression.
    """
    x = np.asarray(x, dtype=float)
    y = np.asarray(y, dtype=float)
    if x.shape != y.shape:
        raise ValueError(sub(
            "Mismatched x and y shapes {} and {}", x.shape, y.shape))
    if len(x) < 3:
        raise ValueError("Need at least three observations")
    return x, y

def logPositive(y, name=None):
    """
    Returns the natural log of I{y}, raising L{NonPositiveDataError}
    if any value is not positive.
    """
    if np.any(~(y > 0)):
        where = sub(" in series '{}'", name) if name else ""
        raise NonPositiveDataError(sub(
            "Log transform of {:d} non-positive value(s){}",
            int(np.sum(~(y > 0))), where))
    return np.log(y)

def linearCoefficient(g, y):
    """
    Returns the least-squares coefficient I{A} minimizing the sum of
    squares of M{y - A*g}.
    """
    gg = np.dot(g, g)
    if not np.isfinite(gg) or gg == 0:
        return np.nan
    return np.dot(g, y) / gg

def plinear(shape, y, p0, **kw):
    """
    Refines the nonlinear parameters I{p0} of a model M{A*shape(p)}
    whose linear coefficient I{A} is profiled out, using
    C{scipy.optimize.least_squares}. Any keywords are passed on to
    the solver.

    Returns a 2-tuple with the refined parameters and I{A}. If the
    refinement goes nowhere useful, the parameters are just I{p0}.
    """
    def residuals(p):
        with np.errstate(all='ignore'):
            g = shape(p)
            r = linearCoefficient(g, y)*g - y
        return np.where(np.isfinite(r), r, 1e100)

    p0 = np.asarray(p0, dtype=float)
    p = p0
    try:
        result = optimize.least_squares(residuals, p0, **kw)
    except ValueError:
        pass
    else:
        if np.all(np.isfinite(result.x)) and result.cost <= \
           0.5*np.sum(np.square(residuals(p0))):
            p = result.x
    return p, linearCoefficient(shape(p), y)


def exponential(x, y, name=None):
    """
    Returns starting values for the exponential curve from an OLS
    regression of M{log(y)} on I{x}.
    """
    x, y = arrays(x, y)
    result = stats.linregress(x, logPositive(y, name))
    return np.array([np.exp(result.intercept), result.slope])


def logistic(x, y, name=None):
    """
    Returns starting values (Asym, xmid, scal) for the logistic
    curve.

    The observations are rescaled into the open interval (0, 1) with
    a 5% margin and I{x} is regressed on their logit to get the
    midpoint and scale. Those are then refined with the asymptote
    profiled out.
    """
    x, y = arrays(x, y)
    yMin, yMax = y.min(), y.max()
    dy = yMax - yMin
    if not dy > 0:
        raise ValueError("Can't fit a logistic curve to constant data")
    z = (y - yMin + 0.05*dy) / (1.1*dy)
    result = stats.linregress(np.log(z/(1.0-z)), x)
    xmid, scal = result.intercept, result.slope
    if not scal > 0:
        # No upward trend to speak of, so the logit line is no help
        xmid, scal = np.mean(x), 0.25*(x.max() - x.min())

    def shape(p):
        return 1.0 / (1.0 + np.exp(np.clip((p[0]-x)/p[1], -700, 700)))

    p, Asym = plinear(shape, y, [xmid, scal])
    return np.array([Asym, p[0], p[1]])


def gompertz(x, y, name=None, N=200):
    """
    Returns starting values (Asym, b2, b3) for the Gompertz curve.

    Since M{log(y) = log(Asym) - b2*b3^x}, a linear regression of
    M{log(y)} on M{b3^x} is done for each of I{N} grid values of
    I{b3} between 0.5 and nearly 1. The grid point with the smallest
    residual sum of squares wins, preferring ones giving a positive
    I{b2}. Then I{b2} and I{b3} are refined with the asymptote
    profiled out.
    """
    x, y = arrays(x, y)
    logY = logPositive(y, name)
    best = None
    with np.errstate(over='ignore'):
        for b3 in 1.0 - np.logspace(-4, np.log10(0.5), N):
            u = np.power(b3, x)
            if np.ptp(u) == 0:
                continue
            result = stats.linregress(u, logY)
            b2 = -result.slope
            SSE = np.sum(np.square(
                logY - result.intercept - result.slope*u))
            key = (b2 <= 0, SSE)
            if best is None or key < best[0]:
                best = key, [np.exp(result.intercept), b2, b3]
    if best is None:
        raise ValueError("Can't find any Gompertz starting point")
    Asym, b2, b3 = best[1]
    if not b2 > 1e-6:
        b2 = 1.0

    def shape(p):
        return np.exp(-p[0]*np.power(p[1], x))

    p, Asym = plinear(
        shape, y, [b2, b3], bounds=([1e-9, 1e-9], [np.inf, 1.0]))
    return np.array([Asym, p[0], p[1]])


def richards(curve, x, y, asymptote=None, name=None, maxiter=4000):
    """
    Returns starting values (Asym, rate, shape) for the supplied
    Richards I{curve}.

    The asymptote guess is the supplied I{asymptote}, ideally the
    fitted logistic one, or else comes from the logistic self-start.
    Then a Nelder-Mead search minimizes the sum of squared residuals,
    starting from (asymptote, 0.001, 1). Non-finite sums are treated
    as infinitely bad.
    """
    x, y = arrays(x, y)
    if asymptote is None or not np.isfinite(asymptote):
        asymptote = logistic(x, y, name=name)[0]

    def SSR(theta):
        with np.errstate(all='ignore'):
            value = np.sum(np.square(y - curve.f(x, *theta)))
        return value if np.isfinite(value) else np.inf

    theta0 = np.array([asymptote, 0.001, 1.0])
    result = optimize.minimize(
        SSR, theta0, method='Nelder-Mead',
        options={'maxiter': maxiter, 'maxfev': maxiter, 'adaptive': True})
    theta = result.x
    if not np.isfinite(SSR(theta)):
        if not np.isfinite(SSR(theta0)):
            raise ValueError("No finite Richards starting point found")
        theta = theta0
    return theta
