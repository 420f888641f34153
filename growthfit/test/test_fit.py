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
Unit tests for L{growthfit.fit}.
"""

import pickle

import numpy as np

from growthfit import growth, fit
from growthfit.test import testbase as tb


class TestFitter(tb.TestCase):
    def test_defaultsFromCurve(self):
        f = fit.Fitter(growth.family('richards'))
        self.assertEqual(f.ftol, 1e-6)
        self.assertEqual(f.maxfev, 2000)
        f = fit.Fitter(growth.family('logistic'), xtol=1e-8)
        self.assertEqual(f.xtol, 1e-8)
        self.assertEqual(f.gtol, 1e-10)

    def test_badKeywords(self):
        curve = growth.family('logistic')
        self.assertRaises(ValueError, fit.Fitter, curve, foo=1)
        self.assertRaises(ValueError, fit.Fitter, curve, ftol=0)
        self.assertRaises(ValueError, fit.Fitter, curve, maxfev=0)

    def test_picklable(self):
        f = fit.Fitter(growth.family('gompertz'), maxfev=123)
        f2 = pickle.loads(pickle.dumps(f))
        self.assertEqual(f2.maxfev, 123)
        self.assertEqual(f2.curve.name, 'gompertz')

    def test_tooFewObservations(self):
        f = fit.Fitter(growth.family('logistic'))
        self.assertRaises(ValueError, f, [1, 2, 3], [1, 2, 3])

    def test_mismatched(self):
        f = fit.Fitter(growth.family('exponential'))
        self.assertRaises(ValueError, f, [1, 2, 3, 4], [1, 2, 3])

    def test_unsingular(self):
        J = np.array([[1.0, 0.0], [0.0, 2.0], [0.0, 0.0]])
        C = fit.Fitter.unscaledCovariance(J)
        self.assertTrue(np.allclose(C, [[1.0, 0.0], [0.0, 0.25]]))

    def test_singular(self):
        J = np.array([[1.0, 2.0], [2.0, 4.0], [3.0, 6.0]])
        self.assertIsNone(fit.Fitter.unscaledCovariance(J))
        J[0,0] = np.nan
        self.assertIsNone(fit.Fitter.unscaledCovariance(J))


class TestRecovery(tb.TestCase):
    def test_exponentialDoubling(self):
        x = np.arange(1, 7, dtype=float)
        y = np.array([20, 40, 80, 160, 320, 640], dtype=float)
        r = fit.fit(growth.family('exponential'), x, y)
        self.assertAlmostEqual(r.theta[0], 10.0, 6)
        self.assertAlmostEqual(r.theta[1], np.log(2), 8)
        self.assertLess(r.RSS, 1e-6)
        self.assertAlmostEqual(r.R2, 1.0, 9)
        self.assertEqual(r.df, 4)
        self.assertEqual(r.k, 3)

    def test_logisticSCurve(self):
        x, y = tb.synthetic(growth.family('logistic'), (1000, 30, 5), 60)
        r = fit.fit(growth.family('logistic'), x, y)
        self.msg("{}", r)
        self.assertValuesClose(r.theta, [1000, 30, 5], 1e-6)
        self.assertAlmostEqual(r.R2, 1.0, 9)
        self.assertLess(r.RSS, 1e-6*np.sum(np.square(y)))

    def test_gompertz(self):
        x, y = tb.synthetic(growth.family('gompertz'), (1000, 5, 0.9), 60)
        r = fit.fit(growth.family('gompertz'), x, y)
        self.assertValuesClose(r.theta, [1000, 5, 0.9], 1e-6)
        self.assertLess(r.RSS, 1e-6*np.sum(np.square(y)))

    def test_richards(self):
        curve = growth.family('richards')
        x, y = tb.synthetic(curve, (1000, 0.08, 3.0), 60)
        lf = fit.fit(growth.family('logistic'), x, y)
        r = fit.fit(curve, x, y, asymptote=lf.theta[0])
        self.msg("{}", r)
        self.assertValuesClose(r.theta, [1000, 0.08, 3.0], 1e-3)
        self.assertLess(r.RSS, 1e-6*np.sum(np.square(y)))

    def test_noisyLogistic(self):
        curve = growth.family('logistic')
        x, y = tb.synthetic(curve, (1000, 30, 5), 60, 10.0, seed=2)
        r = fit.fit(curve, x, y)
        self.assertWithinOnePercent(r.theta[0], 1000)
        self.assertWithinFivePercent(r.theta[1], 30)
        for se in r.stderr:
            self.assertGreater(se, 0)
        self.assertAlmostEqual(r.RSS, np.sum(np.square(y - r.fitted)))
        self.assertAlmostEqual(r.sigma2, r.RSS/57)
        self.assertAlmostEqual(
            r.logLik, -30*(np.log(2*np.pi*r.RSS/60) + 1))
        self.assertWithinOnePercent(
            r.R2, np.corrcoef(y, r.fitted)[0,1]**2)

    def test_explicitStart(self):
        curve = growth.family('logistic')
        x, y = tb.synthetic(curve, (1000, 30, 5), 60)
        r = fit.Fitter(curve)(x, y, [900, 25, 4])
        self.assertValuesClose(r.theta, [1000, 30, 5], 1e-6)


class TestFailures(tb.TestCase):
    def setUp(self):
        self.curve = growth.family('logistic')
        self.x, self.y = tb.synthetic(self.curve, (1000, 30, 5), 60)

    def test_iterationLimit(self):
        f = fit.Fitter(self.curve, maxfev=3)
        self.assertRaises(
            fit.IterationLimitError, f, self.x, self.y, [10, 1, 50])

    def test_iterationLimitIsConvergence(self):
        self.assertTrue(
            issubclass(fit.IterationLimitError, fit.ConvergenceError))

    def test_nonFiniteStart(self):
        curve = growth.family('exponential')
        x = np.arange(1, 11, dtype=float)
        try:
            fit.Fitter(curve)(x, 2**x, [1.0, 1000.0])
        except fit.IterationLimitError:
            self.fail("Non-finite start isn't an iteration limit")
        except fit.ConvergenceError:
            pass
        else:
            self.fail("No exception raised")


class TestFit(tb.TestCase):
    def setUp(self):
        self.curve = growth.family('logistic')
        x, y = tb.synthetic(self.curve, (1000, 30, 5), 40, 5.0, seed=3)
        self.r = fit.fit(self.curve, x, y)

    def test_params(self):
        params = self.r.params
        self.assertEqual(sorted(params.keys()), ['Asym', 'scal', 'xmid'])
        self.assertEqual(params['xmid'], self.r.theta[1])

    def test_predict(self):
        X = self.r.predict([41, 42])
        self.assertEqual(len(X), 2)
        self.assertGreater(X[1], X[0])
        self.assertAlmostEqual(
            self.r.predict(10.0), self.curve(10.0, *self.r.theta))

    def test_increments(self):
        XD = self.r.increments(np.arange(1, 61))
        self.assertTrue(np.all(XD > 0))
        self.assertBetween(np.argmax(XD)+1, 28, 32)

    def test_limits(self):
        atZero, atInf = self.r.limits()
        self.assertEqual(atInf, self.r.theta[0])
        self.assertLess(atZero, 10)

    def test_summary(self):
        rows = self.r.summary()
        self.assertEqual([x[0] for x in rows], ['Asym', 'xmid', 'scal'])
        for name, value, se, t, p in rows:
            self.assertAlmostEqual(t, value/se)
            self.assertLess(p, 1e-6)

    def test_normality(self):
        p = self.r.normality()
        self.assertBetween(p, 0, 1)

    def test_str(self):
        text = str(self.r)
        self.assertPattern(r'logistic fit', text)
        self.checkOccurrences(r'\+/-', text, 3)

    def test_repr(self):
        self.assertPattern(r'<logistic fit: Asym=', repr(self.r))
