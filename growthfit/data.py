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
Observation series and the reader for the national COVID-19 data of
the Italian Civil Protection Department (Dipartimento della
Protezione Civile), C{dpc-covid19-ita-andamento-nazionale.csv}.
"""

import re, bz2, csv
from datetime import date, datetime, timedelta

import numpy as np
from twisted.internet import defer

from .util import sub, msg


class Series(object):
    """
    A named series of daily cumulative counts.

    Construct me with a I{name}, a sequence of I{dates} (C{date} or
    C{datetime} objects), and a sequence of I{values} of the same
    length. The dates must be strictly increasing one day at a time,
    or a C{ValueError} is raised.

    My I{x} values are the 1-indexed day offsets from my first
    date.
    """
    def __init__(self, name, dates, values):
        self.name = name
        self.dates = [
            x.date() if isinstance(x, datetime) else x for x in dates]
        self.y = np.asarray(values, dtype=float)
        if self.y.ndim != 1 or len(self.dates) != len(self.y):
            raise ValueError(sub(
                "Series '{}' has {:d} dates but {} values",
                name, len(self.dates), self.y.shape))
        if not self.dates:
            raise ValueError(sub("Series '{}' is empty", name))
        oneDay = timedelta(days=1)
        for k in range(1, len(self.dates)):
            if self.dates[k] - self.dates[k-1] != oneDay:
                raise ValueError(sub(
                    "Series '{}' skips or repeats days between {} and {}",
                    name, self.dates[k-1], self.dates[k]))
        self.x = np.arange(1, len(self.y)+1, dtype=float)

    def __len__(self):
        return len(self.y)

    def __repr__(self):
        return sub(
            "<Series '{}': {:d} days from {}>",
            self.name, len(self), self.dates[0])

    def date(self, x):
        """
        Returns the date of day offset I{x}, which can be beyond my last
        date.
        """
        return self.dates[0] + timedelta(days=int(x)-1)


class NationalData(object):
    """
    I read the national-trend CSV file of Italian COVID-19 data,
    plain or bzip2 compressed, from the local I{filePath}.

    Run L{load} (or L{setup}, for a C{Deferred}) and then get a
    L{Series} for any of the quantities in my I{columns} dict by
    name with L{series}, or for all of my I{outcomes} with
    L{outcomeSeries}.

    @cvar columns: CSV column names keyed by the names of the
        quantities I make available.
    @cvar outcomes: Names of the cumulative outcomes that get curves
        fitted.
    """
    columns = {
        'total infected': 'totale_casi',
        'deceased': 'deceduti',
        'recovered': 'dimessi_guariti',
        'tests': 'tamponi',
        'hospitalized': 'totale_ospedalizzati',
        'intensive care': 'terapia_intensiva',
    }
    outcomes = ('total infected', 'deceased', 'recovered')
    dateColumn = 'data'
    reDate = re.compile(r'\s*([0-9]{4})-([0-9]{2})-([0-9]{2})')

    def __init__(self, filePath):
        self.filePath = filePath
        self.dates = []
        self.values = {}

    def __len__(self):
        return len(self.dates)

    def open(self):
        if self.filePath.endswith('.bz2'):
            return bz2.open(self.filePath, 'rt', newline='')
        return open(self.filePath, 'r', newline='')

    def parseDate(self, text):
        """
        Returns a C{date} from the ISO date-time I{text}, raising a
        C{ValueError} if it doesn't start with a date.
        """
        m = self.reDate.match(text)
        if not m:
            raise ValueError(sub("Couldn't parse '{}' as a date!", text))
        return date(*[int(m.group(k)) for k in (1, 2, 3)])

    @staticmethod
    def parseValue(text):
        """
        Returns a float for the numeric I{text}, or NaN if it's blank or
        not numeric.
        """
        try:
            return float(text)
        except (TypeError, ValueError):
            return np.nan

    def load(self, daysAgo=0):
        """
        Reads and parses my CSV file, limiting the latest data to the
        specified number of I{daysAgo}. Returns me.
        """
        msg("Reading {}...", self.filePath)
        dates = []
        lists = {name: [] for name in self.columns}
        with self.open() as fh:
            reader = csv.DictReader(fh)
            missing = [
                x for x in [self.dateColumn] + list(self.columns.values())
                if x not in (reader.fieldnames or [])]
            if missing:
                raise ValueError(sub(
                    "CSV file {} lacks column(s) {}",
                    self.filePath, ", ".join(missing)))
            for row in reader:
                dates.append(self.parseDate(row[self.dateColumn]))
                for name, column in self.columns.items():
                    lists[name].append(self.parseValue(row[column]))
        if daysAgo:
            dates = dates[:-daysAgo]
            lists = {name: X[:-daysAgo] for name, X in lists.items()}
        self.dates = dates
        self.values = {
            name: np.array(X, dtype=float) for name, X in lists.items()}
        msg("Read {:d} days of data", len(dates))
        return self

    def setup(self, daysAgo=0):
        """
        Returns a C{Deferred} that fires with me after L{load} is done.
        """
        return defer.maybeDeferred(self.load, daysAgo)

    def series(self, name):
        """
        Returns a L{Series} of the quantity I{name} in my I{columns}.
        """
        if name not in self.columns:
            raise KeyError(sub("No quantity '{}' in national data", name))
        if not self.dates:
            raise ValueError("No data loaded")
        return Series(name, self.dates, self.values[name])

    def outcomeSeries(self):
        """
        Returns a list of a L{Series} for each of my I{outcomes}.
        """
        return [self.series(name) for name in self.outcomes]
