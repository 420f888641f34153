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
The growth-curve library: exponential, logistic, Gompertz, and
Richards mean functions of day offset I{x}, each with its closed-form
gradient with respect to the parameters, its first derivative with
respect to I{x}, and its limiting values.

Use the instances in L{FAMILIES}, or look one up by name with
L{family}.
"""

import numpy as np

from . import start
from .util import sub


def expClipped(z):
    """
    Returns C{exp(z)} with I{z} clipped to a range that can't
    overflow.
    """
    return np.exp(np.clip(z, -700.0, 700.0))


class Curve(object):
    """
    I am the base class for a family of growth curves
    M{y = f(x, *theta)}.

    Call my instance with I{x} (scalar or array) followed by the
    parameter values to evaluate my mean function elementwise.

    @cvar name: The family's short name.
    @cvar names: The names of my parameters, in order.
    @cvar text: A text rendering of my mean function.
    @cvar tolerance: The solver tolerance used for fits of my family.
    @cvar maxfev: The default cap on solver function evaluations.
    """
    name = None
    names = ()
    text = None
    tolerance = 1e-10
    maxfev = 1000

    def __len__(self):
        return len(self.names)

    def __repr__(self):
        return sub("<{}: {}>", self.name, self.text)

    def __call__(self, x, *theta):
        return self.f(np.asarray(x, dtype=float), *theta)

    def _checkTheta(self, theta):
        if len(theta) != len(self):
            raise ValueError(sub(
                "{} curve takes {:d} parameters, not {:d}",
                self.name, len(self), len(theta)))

    def f(self, x, *theta):
        """
        Override this to return my mean function evaluated at I{x}.
        """
        raise NotImplementedError("Define f in your subclass")

    def partials(self, x, *theta):
        """
        Override this to return a sequence with the partial derivative
        of my mean function with respect to each parameter, evaluated
        at I{x}.
        """
        raise NotImplementedError("Define partials in your subclass")

    def jacobian(self, x, *theta):
        """
        Returns the gradient of my mean function with respect to
        I{theta} as an array with one row per value of I{x} and one
        column per parameter.
        """
        self._checkTheta(theta)
        x = np.atleast_1d(np.asarray(x, dtype=float))
        columns = [
            np.broadcast_to(column, x.shape)
            for column in self.partials(x, *theta)]
        return np.column_stack(columns)

    def fprime(self, x, *theta):
        """
        Override this to return the first derivative of my mean
        function with respect to I{x}, i.e., the predicted daily
        increment.
        """
        raise NotImplementedError("Define fprime in your subclass")

    def limits(self, *theta):
        """
        Override this to return a 2-tuple with the value of my mean
        function at M{x = 0} and its limit as M{x} goes to infinity.
        """
        raise NotImplementedError("Define limits in your subclass")

    def start(self, x, y, **kw):
        """
        Override this to return starting values of my parameters for
        fitting observations I{y} at I{x}.
        """
        raise NotImplementedError("Define start in your subclass")

    def peak(self, x0, x1, *theta, N=1000):
        """
        Returns the value of I{x} in the range I{x0} to I{x1} where my
        daily increments (my first derivative) peak, evaluated over a
        grid of I{N} points.
        """
        X = np.linspace(x0, x1, N)
        with np.errstate(all='ignore'):
            XD = self.fprime(X, *theta)
        if not np.any(np.isfinite(XD)):
            return np.nan
        return X[np.nanargmax(XD)]


class Exponential(Curve):
    """
    Unbounded exponential growth, M{y = a*exp(rate*x)}.
    """
    name = "exponential"
    names = ('a', 'rate')
    text = "a*exp(rate*x)"

    def f(self, x, a, rate):
        return a*expClipped(rate*x)

    def partials(self, x, a, rate):
        e = expClipped(rate*x)
        return [e, a*x*e]

    def fprime(self, x, a, rate):
        return a*rate*expClipped(rate*np.asarray(x, dtype=float))

    def limits(self, a, rate):
        if rate > 0:
            return a, np.inf*np.sign(a)
        if rate < 0:
            return a, 0.0
        return a, a

    def start(self, x, y, **kw):
        return start.exponential(x, y, **kw)


class Logistic(Curve):
    """
    The logistic curve, M{y = Asym/(1+exp((xmid-x)/scal))}, with the
    same parameterization as R's C{SSlogis}.
    """
    name = "logistic"
    names = ('Asym', 'xmid', 'scal')
    text = "Asym/(1+exp((xmid-x)/scal))"

    def f(self, x, Asym, xmid, scal):
        return Asym / (1.0 + expClipped((xmid-x)/scal))

    def partials(self, x, Asym, xmid, scal):
        e = expClipped((xmid-x)/scal)
        g = 1.0 / (1.0 + e)
        h = Asym*e*g*g / scal
        return [g, -h, h*(xmid-x)/scal]

    def fprime(self, x, Asym, xmid, scal):
        x = np.asarray(x, dtype=float)
        e = expClipped((xmid-x)/scal)
        g = 1.0 / (1.0 + e)
        return Asym*e*g*g / scal

    def limits(self, Asym, xmid, scal):
        atZero = Asym / (1.0 + np.exp(xmid/scal))
        return atZero, Asym if scal > 0 else 0.0

    def start(self, x, y, **kw):
        return start.logistic(x, y, **kw)


class Gompertz(Curve):
    """
    The Gompertz curve, M{y = Asym*exp(-b2*b3^x)}, with the same
    parameterization as R's C{SSgompertz}. It is only a growth curve
    for M{0 < b3 < 1}, but that is not enforced.
    """
    name = "gompertz"
    names = ('Asym', 'b2', 'b3')
    text = "Asym*exp(-b2*b3^x)"

    def f(self, x, Asym, b2, b3):
        return Asym*np.exp(-b2*np.power(b3, x))

    def partials(self, x, Asym, b2, b3):
        u = np.power(b3, x)
        g = np.exp(-b2*u)
        return [g, -Asym*u*g, -Asym*b2*x*np.power(b3, x-1)*g]

    def fprime(self, x, Asym, b2, b3):
        u = np.power(b3, np.asarray(x, dtype=float))
        return -Asym*b2*u*np.log(b3)*np.exp(-b2*u)

    def limits(self, Asym, b2, b3):
        atZero = Asym*np.exp(-b2)
        if 0 < b3 < 1:
            return atZero, Asym
        if b3 == 1:
            return atZero, atZero
        if b3 > 1 and b2 != 0:
            return atZero, 0.0 if b2 > 0 else np.inf*np.sign(Asym)
        return atZero, np.nan

    def start(self, x, y, **kw):
        return start.gompertz(x, y, **kw)


class Richards(Curve):
    """
    The Richards curve, M{y = Asym*(1-exp(-rate*x))^shape}. It has no
    self-starting form and its fits are slow to converge, so I use a
    looser solver tolerance than the other families.
    """
    name = "richards"
    names = ('Asym', 'rate', 'shape')
    text = "Asym*(1-exp(-rate*x))^shape"
    tolerance = 1e-6
    maxfev = 2000

    def f(self, x, Asym, rate, shape):
        return Asym*np.power(1.0 - np.exp(-rate*x), shape)

    def partials(self, x, Asym, rate, shape):
        e = np.exp(-rate*x)
        v = 1.0 - e
        vs = np.power(v, shape)
        return [vs, Asym*shape*np.power(v, shape-1)*x*e, Asym*vs*np.log(v)]

    def fprime(self, x, Asym, rate, shape):
        e = np.exp(-rate*np.asarray(x, dtype=float))
        return Asym*shape*rate*e*np.power(1.0 - e, shape-1)

    def limits(self, Asym, rate, shape):
        if rate > 0 and shape > 0:
            return 0.0, Asym
        return np.nan, np.nan

    def start(self, x, y, **kw):
        return start.richards(self, x, y, **kw)


FAMILIES = (Exponential(), Logistic(), Gompertz(), Richards())

def family(name):
    """
    Returns the curve instance in L{FAMILIES} with the specified
    I{name}, raising a C{KeyError} if there's no such family.
    """
    for curve in FAMILIES:
        if curve.name == name.lower():
            return curve
    raise KeyError(sub("No growth curve family '{}'", name))
