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
Nonlinear least-squares fitting of a growth curve to observations,
with L{Fitter} wrapping the Levenberg-Marquardt solver of
C{scipy.optimize.least_squares} and L{Fit} holding the result.
"""

import numpy as np
from scipy import optimize, stats

from .util import sub, msg, numText, Picklable
from .compare import criteria, rSquared


class ConvergenceError(Exception):
    """
    The nonlinear fit didn't converge to a usable estimate.
    """

class IterationLimitError(ConvergenceError):
    """
    The nonlinear fit reached its cap on function evaluations before
    meeting any convergence tolerance.
    """


class Fit(object):
    """
    I am the fitted model for one growth curve and one series of
    observations. Construct me with the I{curve}, the observations
    I{x} and I{y}, the estimate I{theta}, the unscaled covariance
    matrix I{C} (the inverse of M{J'J}), the number of function
    evaluations I{nfev}, and the solver's I{status} code.

    I am not meant to be changed after construction.

    @ivar n: The number of observations.
    @ivar k: The number of estimated parameters, including the error
        variance.
    @ivar df: The residual degrees of freedom, M{n - len(theta)}.
    @ivar RSS: The residual sum of squares.
    @ivar sigma2: The residual variance estimate M{RSS/df}.
    @ivar cov: The linearized covariance matrix of I{theta}.
    @ivar stderr: The standard errors of I{theta}.
    @ivar logLik: The Gaussian log-likelihood, with the error
        variance estimated as M{RSS/n}.
    """
    __slots__ = [
        'curve', 'x', 'y', 'theta', 'fitted', 'residuals',
        'n', 'k', 'df', 'RSS', 'sigma2', 'cov', 'stderr', 'logLik',
        'AIC', 'AICc', 'BIC', 'R2', 'nfev', 'status']

    def __init__(self, curve, x, y, theta, C, nfev=0, status=1):
        self.curve = curve
        self.x = x
        self.y = y
        self.theta = np.asarray(theta, dtype=float)
        self.nfev = nfev
        self.status = status
        self.fitted = curve(x, *self.theta)
        self.residuals = y - self.fitted
        self.n = len(y)
        self.df = int(self.n - len(self.theta))
        self.k = len(self.theta) + 1
        self.RSS = float(np.sum(np.square(self.residuals)))
        self.sigma2 = self.RSS / self.df
        self.cov = self.sigma2 * C
        self.stderr = np.sqrt(np.diag(self.cov))
        with np.errstate(divide='ignore'):
            self.logLik = -0.5*self.n*(
                np.log(2*np.pi*self.RSS/self.n) + 1)
        self.AIC, self.AICc, self.BIC = criteria(
            self.logLik, self.n, self.k)
        self.R2 = rSquared(y, self.fitted)

    def __repr__(self):
        return sub(
            "<{} fit: {}>", self.curve.name, ", ".join([
                sub("{}={}", name, numText(value))
                for name, value in zip(self.curve.names, self.theta)]))

    @property
    def params(self):
        """
        A dict of my parameter estimates keyed by name.
        """
        return dict(zip(self.curve.names, self.theta))

    def predict(self, x):
        """
        Returns my fitted curve evaluated at I{x}.
        """
        return self.curve(x, *self.theta)

    def increments(self, x):
        """
        Returns the daily increments predicted at I{x} by the first
        derivative of my fitted curve.
        """
        return self.curve.fprime(x, *self.theta)

    def limits(self):
        """
        Returns my fitted curve's value at M{x=0} and its limit as M{x}
        goes to infinity.
        """
        return self.curve.limits(*self.theta)

    def summary(self):
        """
        Returns a list with a tuple for each parameter: its name,
        estimate, standard error, t value, and two-sided p value from
        Student's t distribution with my residual degrees of freedom.
        """
        result = []
        for name, value, se in zip(
                self.curve.names, self.theta, self.stderr):
            with np.errstate(divide='ignore', invalid='ignore'):
                t = value / se
            p = 2*stats.t.sf(np.abs(t), self.df)
            result.append((name, value, se, t, p))
        return result

    def normality(self):
        """
        Returns the p value of D'Agostino and Pearson's test of the
        hypothesis that my residuals are normally distributed, or
        C{None} if there are fewer than 8 of them.
        """
        if self.n < 8:
            return
        return stats.normaltest(self.residuals)[1]

    def __str__(self):
        lines = [sub(
            "{} fit, y = {}, with {:d} observations, {:d} df:",
            self.curve.name, self.curve.text, self.n, self.df)]
        for name, value, se, t, p in self.summary():
            lines.append(sub(
                "  {:<8s} {:>12s} +/- {:<10s} t={:<10s} p={}",
                name, numText(value, 6), numText(se), numText(t),
                numText(p, 3)))
        lines.append(sub(
            "  logLik={}, R2={}, AICc={}",
            numText(self.logLik, 6), numText(self.R2, 6),
            numText(self.AICc, 6)))
        return "\n".join(lines)


class Fitter(Picklable):
    """
    I fit a growth I{curve} to observations with the
    Levenberg-Marquardt algorithm and the curve's analytic Jacobian.

    Construct me with a L{growth.Curve} instance and any of the
    keywords in my I{attributes} dict. A tolerance left as C{None}
    gets the curve family's own I{tolerance}, and a C{None} I{maxfev}
    gets the family's I{maxfev}.

    Call my instance with I{x}, I{y}, and, optionally, starting
    parameter values I{theta0} to get a L{Fit}. Without I{theta0}, the
    curve's starting-value estimator is used with any further
    keywords.

    @keyword maxfev: The cap on function evaluations.
    @keyword ftol: Tolerance on relative change in the cost.
    @keyword xtol: Tolerance on relative change in the parameters.
    @keyword gtol: Tolerance on the gradient.
    """
    attributes = {
        'maxfev': None,
        'ftol': None,
        'xtol': None,
        'gtol': None,
    }

    def __init__(self, curve, **kw):
        self.curve = curve
        for name, value in self.attributes.items():
            setattr(self, name, kw.pop(name, value))
        if kw:
            raise ValueError(sub("Unknown keyword(s): {}", ", ".join(kw)))
        for name in ('ftol', 'xtol', 'gtol'):
            if getattr(self, name) is None:
                setattr(self, name, curve.tolerance)
            elif not getattr(self, name) > 0:
                raise ValueError(sub("Tolerance {} must be positive", name))
        if self.maxfev is None:
            self.maxfev = curve.maxfev
        elif not self.maxfev >= 1:
            raise ValueError("Need at least one function evaluation")

    def __call__(self, x, y, theta0=None, **kw):
        x = np.asarray(x, dtype=float)
        y = np.asarray(y, dtype=float)
        if x.shape != y.shape or x.ndim != 1:
            raise ValueError("Need 1-D x and y of the same length")
        if len(x) <= len(self.curve):
            raise ValueError(sub(
                "Need more than {:d} observations for a {} fit",
                len(self.curve), self.curve.name))
        if theta0 is None:
            theta0 = self.curve.start(x, y, **kw)
        theta0 = np.asarray(theta0, dtype=float)

        def residuals(theta):
            return self.curve.f(x, *theta) - y

        def jacobian(theta):
            return self.curve.jacobian(x, *theta)

        try:
            with np.errstate(all='ignore'):
                result = optimize.least_squares(
                    residuals, theta0, jac=jacobian, method='lm',
                    x_scale='jac', ftol=self.ftol, xtol=self.xtol,
                    gtol=self.gtol, max_nfev=self.maxfev)
        except ValueError as e:
            # Non-finite residuals at the starting point, mostly
            raise ConvergenceError(sub(
                "{} fit couldn't start: {}", self.curve.name, e))
        return self.check(x, y, result)

    def check(self, x, y, result):
        """
        Returns a L{Fit} for the solver I{result} if it converged to a
        usable estimate, or raises the appropriate exception.
        """
        name = self.curve.name
        if result.status == 0:
            msg("{} fit: no convergence after {:d} evaluations",
                name, result.nfev)
            raise IterationLimitError(sub(
                "{} fit reached the cap of {:d} function evaluations",
                name, self.maxfev))
        if result.status < 0:
            raise ConvergenceError(sub(
                "{} fit failed: {}", name, result.message))
        theta = result.x
        if not np.all(np.isfinite(theta)) or \
           not np.all(np.isfinite(result.fun)):
            msg("{} fit: non-finite result", name)
            raise ConvergenceError(sub(
                "{} fit gave a non-finite estimate {}", name, theta))
        C = self.unscaledCovariance(result.jac)
        if C is None:
            msg("{} fit: singular gradient", name)
            raise ConvergenceError(sub(
                "{} fit has a singular gradient matrix at {}",
                name, theta))
        return Fit(self.curve, x, y, theta, C, result.nfev, result.status)

    @staticmethod
    def unscaledCovariance(J):
        """
        Returns the inverse of M{J'J} computed from the singular values
        of Jacobian I{J}, or C{None} if I{J} is singular to working
        precision.
        """
        if not np.all(np.isfinite(J)):
            return
        U, s, VT = np.linalg.svd(J, full_matrices=False)
        if not s[0] > 0 or s[-1] <= np.finfo(float).eps*max(J.shape)*s[0]:
            return
        V = VT.T / s
        return np.dot(V, V.T)


def fit(curve, x, y, theta0=None, **kw):
    """
    Convenience function that fits I{curve} to I{x} and I{y} with a
    L{Fitter} constructed with any of its keywords, passing any
    others on to the curve's starting-value estimator. Returns a
    L{Fit}.
    """
    fitterKW = {}
    for name in Fitter.attributes:
        if name in kw:
            fitterKW[name] = kw.pop(name)
    return Fitter(curve, **fitterKW)(x, y, theta0, **kw)
