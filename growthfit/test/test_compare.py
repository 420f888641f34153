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
Unit tests for L{growthfit.compare}.
"""

import numpy as np

from growthfit import growth, fit, compare
from growthfit.test import testbase as tb


class TestCriteria(tb.TestCase):
    def test_values(self):
        AIC, AICc, BIC = compare.criteria(-100.0, 50, 4)
        self.assertAlmostEqual(AIC, 208.0)
        self.assertAlmostEqual(AICc, 208.0 + 40.0/45)
        self.assertAlmostEqual(BIC, 200.0 + 4*np.log(50))

    def test_extraParameterPenalized(self):
        for n in (10, 30, 100):
            c3 = compare.criteria(-50.0, n, 3)
            c4 = compare.criteria(-50.0, n, 4)
            self.assertAlmostEqual(c4[0] - c3[0], 2.0)
            self.assertAlmostEqual(c4[2] - c3[2], np.log(n))
            self.assertGreater(c4[1], c3[1])

    def test_AICcTooFewObservations(self):
        self.assertEqual(compare.criteria(-10.0, 5, 4)[1], np.inf)

    def test_rSquared(self):
        y = np.array([1.0, 2.0, 3.0, 4.0])
        self.assertAlmostEqual(compare.rSquared(y, 2*y+1), 1.0)
        self.assertTrue(np.isnan(compare.rSquared(y, np.ones(4))))

    def test_marker(self):
        self.assertEqual(
            [compare.marker(k) for k in range(4)],
            ["", "*", "**", "***"])


class TestComparison(tb.TestCase):
    def setUp(self):
        curve = growth.family('logistic')
        self.x, self.y = tb.synthetic(curve, (1000, 30, 5), 50, 8.0, seed=4)
        self.fits = []
        for curve in growth.FAMILIES:
            try:
                self.fits.append(fit.fit(curve, self.x, self.y))
            except (fit.ConvergenceError, ValueError) as e:
                self.msg("{} failed: {}", curve.name, e)
        self.byName = {f.curve.name: f for f in self.fits}

    def test_markerTotal(self):
        c = compare.Comparison(self.fits)
        self.assertEqual(len(c), len(self.fits))
        self.assertEqual(sum(c.counts().values()), 3)
        self.assertEqual(
            sum([len(row.marker) for row in c]), 3)

    def test_logisticFavored(self):
        c = compare.Comparison(self.fits)
        self.msg("\n{}", c)
        self.assertIn('logistic', c.selected('BIC'))
        self.assertEqual(c['logistic'].marker, "***")
        self.assertEqual(c.best().curve.name, 'logistic')
        self.assertGreater(
            c['logistic'].logLik, c['exponential'].logLik)

    def test_ties(self):
        f = self.byName['logistic']
        c = compare.Comparison([f, f])
        self.assertEqual([row.count for row in c], [3, 3])
        for row in c:
            self.assertEqual(row.marker, "***")

    def test_nearTieNotShared(self):
        f = self.byName['logistic']
        other = fit.Fit(f.curve, f.x, f.y, f.theta, f.cov/f.sigma2)
        other.AIC += 1E-3
        other.AICc += 1E-3
        other.BIC += 1E-3
        self.assertGreater(f.AIC, 100)
        c = compare.Comparison([other, f])
        self.assertEqual([row.count for row in c], [0, 3])
        self.assertEqual(sum([len(row.marker) for row in c]), 3)
        self.assertIs(c.best(), f)

    def test_differentData(self):
        curve = growth.family('logistic')
        other = fit.fit(curve, self.x, self.y + 1.0)
        self.assertRaises(
            ValueError, compare.Comparison, [self.byName['logistic'], other])

    def test_rows(self):
        c = compare.Comparison(self.fits)
        row = c['logistic']
        f = self.byName['logistic']
        self.assertEqual(row.df, 47)
        self.assertEqual(row.k, 4)
        self.assertEqual(row.AICc, f.AICc)
        self.assertEqual(row.R2, f.R2)
        self.assertIn('logistic', c)
        self.assertNotIn('weibull', c)
        self.assertRaises(KeyError, c.__getitem__, 'weibull')

    def test_str(self):
        text = str(compare.Comparison(self.fits))
        for f in self.fits:
            self.assertPattern(f.curve.name, text)
        self.checkOccurrences(r'\*\*\*', text, 1)

    def test_empty(self):
        c = compare.Comparison([])
        self.assertEqual(len(c), 0)
        self.assertIsNone(c.best())
        self.assertPattern(r'no fitted models', str(c))
