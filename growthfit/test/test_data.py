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
Unit tests for L{growthfit.data}.
"""

import bz2
from datetime import date, datetime

import numpy as np

from twisted.internet import defer

from growthfit import data
from growthfit.test import testbase as tb


CSV_TEXT = """\
data,stato,ricoverati_con_sintomi,terapia_intensiva,totale_ospedalizzati,isolamento_domiciliare,totale_positivi,dimessi_guariti,deceduti,totale_casi,tamponi
2020-02-24T18:00:00,ITA,101,26,127,94,221,1,7,229,4324
2020-02-25T18:00:00,ITA,114,35,150,162,311,1,10,322,8623
2020-02-26T18:00:00,ITA,128,36,164,221,385,3,12,400,9587
2020-02-27T18:00:00,ITA,248,56,304,284,588,45,17,650,12014
2020-02-28T18:00:00,ITA,345,64,409,412,821,46,21,888,
"""


class TestSeries(tb.TestCase):
    def setUp(self):
        self.dates = [date(2020, 3, k) for k in range(1, 6)]

    def test_basic(self):
        s = data.Series("deceased", self.dates, [0, 0, 1, 3, 7])
        self.assertEqual(len(s), 5)
        self.assertEqual(list(s.x), [1.0, 2.0, 3.0, 4.0, 5.0])
        self.assertEqual(s.y.dtype, np.float64)
        self.assertEqual(s.date(1), date(2020, 3, 1))
        self.assertEqual(s.date(19), date(2020, 3, 19))

    def test_datetimes(self):
        dates = [datetime(2020, 3, k, 18) for k in range(1, 4)]
        s = data.Series("x", dates, [1, 2, 3])
        self.assertEqual(s.dates[0], date(2020, 3, 1))

    def test_gap(self):
        dates = list(self.dates)
        dates[2] = date(2020, 3, 4)
        self.assertRaises(ValueError, data.Series, "x", dates, range(5))

    def test_notIncreasing(self):
        self.assertRaises(
            ValueError, data.Series, "x", list(reversed(self.dates)), range(5))

    def test_mismatched(self):
        self.assertRaises(ValueError, data.Series, "x", self.dates, range(4))

    def test_empty(self):
        self.assertRaises(ValueError, data.Series, "x", [], [])

    def test_leadingZerosKept(self):
        s = data.Series("deceased", self.dates, [0, 0, 1, 3, 7])
        self.assertEqual(len(s), 5)
        self.assertEqual(s.dates[0], self.dates[0])
        self.assertEqual(list(s.x), [1.0, 2.0, 3.0, 4.0, 5.0])
        self.assertEqual(s.date(3), self.dates[2])


class TestNationalData(tb.TestCase):
    def setUp(self):
        self.filePath = tb.fileInModuleDir("national.csv", isTemp=True)
        with open(self.filePath, 'w') as fh:
            fh.write(CSV_TEXT)

    def tearDown(self):
        tb.deleteIfExists(self.filePath)
        return super(TestNationalData, self).tearDown()

    def test_load(self):
        nd = data.NationalData(self.filePath).load()
        self.assertEqual(len(nd), 5)
        self.assertEqual(nd.dates[0], date(2020, 2, 24))
        s = nd.series('total infected')
        self.assertEqual(list(s.y), [229, 322, 400, 650, 888])
        self.assertEqual(s.name, 'total infected')

    def test_missingValue(self):
        nd = data.NationalData(self.filePath).load()
        X = nd.series('tests').y
        self.assertEqual(X[3], 12014)
        self.assertTrue(np.isnan(X[4]))

    def test_outcomes(self):
        nd = data.NationalData(self.filePath).load()
        seriesList = nd.outcomeSeries()
        self.assertEqual(
            [s.name for s in seriesList],
            ['total infected', 'deceased', 'recovered'])
        self.assertEqual(list(seriesList[1].y), [7, 10, 12, 17, 21])
        self.assertEqual(list(seriesList[2].y), [1, 1, 3, 45, 46])

    def test_daysAgo(self):
        nd = data.NationalData(self.filePath).load(daysAgo=2)
        self.assertEqual(len(nd), 3)
        self.assertEqual(len(nd.series('deceased')), 3)

    def test_bz2(self):
        filePath = tb.fileInModuleDir("national.csv.bz2", isTemp=True)
        with bz2.open(filePath, 'wt') as fh:
            fh.write(CSV_TEXT)
        nd = data.NationalData(filePath).load()
        tb.deleteIfExists(filePath)
        self.assertEqual(list(nd.series('intensive care').y), [26, 35, 36, 56, 64])

    def test_missingColumn(self):
        with open(self.filePath, 'w') as fh:
            fh.write("data,totale_casi\n2020-02-24T18:00:00,229\n")
        self.assertRaises(ValueError, data.NationalData(self.filePath).load)

    def test_unknownQuantity(self):
        nd = data.NationalData(self.filePath).load()
        self.assertRaises(KeyError, nd.series, 'happiness')

    @defer.inlineCallbacks
    def test_setup(self):
        nd = yield data.NationalData(self.filePath).setup()
        self.assertEqual(len(nd.series('recovered')), 5)
