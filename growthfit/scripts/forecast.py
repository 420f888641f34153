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
The I{gf-forecast} entry point: fits growth curves to the Italian
national COVID-19 outcomes in a local CSV file and prints comparison
tables and forecasts with bootstrap prediction intervals.
"""

import os.path, time

from twisted.internet import reactor, defer
from asynqueue import ThreadQueue, ProcessQueue

from growthfit.util import sub, msg, oops, Args
from growthfit.data import NationalData
from growthfit.pipeline import Pipeline


class Runner(object):
    """
    I run everything for the I{gf-forecast} script.

    Construct me with an instance of L{Args} that has parsed
    command-line options, then have the Twisted reactor call my
    instance when it starts.
    """
    def __init__(self, args):
        """
        C{Runner(args)}
        """
        self.args = args
        if args.t:
            self.N_cores = 1
            self.q = ThreadQueue(returnFailure=True)
        elif args.N:
            self.N_cores = args.N
            self.q = ProcessQueue(self.N_cores, returnFailure=True)
        else:
            self.N_cores = 1
            self.q = None
        self.fh = open(args.L, 'w') if args.L else True
        msg(self.fh)

    def pipelineOptions(self):
        """
        Returns a dict of L{Pipeline} keywords from my command-line
        options.
        """
        args = self.args
        kw = {
            'daysAhead': args.d,
            'B': args.B,
            'alpha': args.a,
            'N_maxParallel': 2*self.N_cores,
        }
        if args.l:
            kw['blockLength'] = args.l
        if args.s >= 0:
            kw['seed'] = args.s
        return kw

    @defer.inlineCallbacks
    def shutdown(self):
        """
        Shuts down my task queue, if any. Repeated calls have no effect.
        """
        if self.q is not None:
            msg("Shutting down...")
            yield self.q.shutdown()
            self.q = None

    def plot(self, result):
        from growthfit.plot import ForecastPlotter
        base, ext = os.path.splitext(self.args.p)
        filePath = sub("{}-{}{}", base, result.name.replace(' ', '_'), ext)
        ForecastPlotter(filePath)(result)
        msg("Plotted '{}' to {}", result.name, filePath)

    @defer.inlineCallbacks
    def __call__(self):
        args = self.args
        if not len(args):
            raise RuntimeError("You must specify the national CSV file")
        startTime = time.time()
        data = yield NationalData(args[0]).setup(args.x)
        pipeline = Pipeline(q=self.q, **self.pipelineOptions())
        results = yield pipeline(data.outcomeSeries())
        for name, result in results.items():
            msg(0, str(result), 0)
            for family, prediction in result.predictions.items():
                msg("{} forecast, {} model:\n{}", name, family, prediction, 0)
            if args.p:
                self.plot(result)
        msg(0, "Elapsed time: {:.2f} seconds", time.time()-startTime, 0)
        yield self.shutdown()

    def run(self):
        d = self().addErrback(oops)
        d.addBoth(lambda _: reactor.stop())
        return d


def main():
    """
    Called when this module is run as a script.
    """
    if args.h:
        return
    r = Runner(args)
    reactor.callWhenRunning(r.run)
    reactor.run()
    msg(None)


args = Args(
    """
    Growth-curve fits and forecasts for Italian COVID-19 outcomes.

    Fits exponential, logistic, Gompertz, and Richards curves to the
    cumulative total infected, deceased, and recovered in the national
    CSV file (dpc-covid19-ita-andamento-nazionale.csv, optionally
    bzip2 compressed) of the Italian Civil Protection Department. For
    each outcome, prints a table comparing the fits and the forecasts
    of each model, with moving-block-bootstrap prediction intervals.
    """
)
args('-B', '--replicates', 500, "Number of bootstrap replicates")
args('-l', '--block-length', 0,
     "Bootstrap block length (0 for the cube root of the series length)")
args('-a', '--alpha', 0.05, "Intervals cover 1-alpha of the forecasts")
args('-d', '--days-ahead', 14, "Number of days to forecast")
args('-x', '--days-ago', 0,
     "Limit latest data to N days ago rather than up to today")
args('-s', '--seed', -1, "Bootstrap random seed (-1 for none)")
args('-t', '--threads', "Do bootstrap refits in a worker thread")
args('-N', '--N-cores', 0,
     "Do bootstrap refits in this many worker processes (0 for none)")
args('-L', '--logfile', "",
     "Write results to this logfile instead of STDOUT")
args('-p', '--plot', "",
     "Plot each outcome to an image file based on this path")
args("<national CSV file>")


if __name__ == '__main__':
    main()
