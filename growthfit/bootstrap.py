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
Prediction intervals for future values of a fitted growth curve from
a moving block bootstrap of its residuals.

Contiguous blocks of residuals are resampled so that serial
dependence within a block survives. Each bootstrap replicate refits
the curve to the fitted values plus a resampled residual stream and
forecasts with the refitted curve plus the continuation of that
stream. The refits are independent and may be dispatched to an
C{asynqueue} task queue.
"""

import numpy as np
from twisted.internet import defer
from twisted.python import failure
from asynqueue.util import DeferredTracker

from .util import sub, msg, Picklable
from .fit import Fitter, ConvergenceError


class BlockLengthError(ValueError):
    """
    The series is too short for the bootstrap's block length.
    """

class BootstrapError(Exception):
    """
    Too few bootstrap refits succeeded to trust the intervals.
    """


class Refitter(Picklable):
    """
    I refit one bootstrap replicate. Construct me with the fitted
    model's I{curve}, its observation offsets I{x}, and its estimate
    I{theta}, which is where every refit starts.

    Call my instance with a bootstrap series I{yStar} to get the
    refitted parameters, or C{None} if the refit failed. I am
    picklable for dispatch to a C{ProcessQueue}.
    """
    def __init__(self, curve, x, theta):
        self.fitter = Fitter(curve)
        self.x = x
        self.theta = theta

    def __call__(self, yStar):
        try:
            return self.fitter(self.x, yStar, self.theta).theta
        except ConvergenceError:
            return
        except (ValueError, np.linalg.LinAlgError) as e:
            msg("Bootstrap refit raised {}", e)
            return


class Intervals(object):
    """
    Bootstrap prediction intervals at future offsets I{x}, with the
    I{lower} and I{upper} bounds of the M{1-alpha} quantile band, the
    matrix of successful replicate I{forecasts} (one row per
    replicate), and the numbers of successful and failed refits.
    """
    __slots__ = [
        'x', 'lower', 'upper', 'forecasts', 'alpha',
        'blockLength', 'N_ok', 'N_failed']

    def __init__(self, x, forecasts, alpha, blockLength, N_failed):
        self.x = x
        self.forecasts = forecasts
        self.alpha = alpha
        self.blockLength = blockLength
        self.N_ok = forecasts.shape[0]
        self.N_failed = N_failed
        self.lower, self.upper = np.percentile(
            forecasts, [50*alpha, 100-50*alpha], axis=0)

    def __len__(self):
        return len(self.x)

    def __iter__(self):
        for row in zip(self.x, self.lower, self.upper):
            yield row


class BlockBootstrap(object):
    """
    I compute moving-block-bootstrap prediction intervals for future
    values of a L{fit.Fit}.

    Construct me with any of the keywords in my I{attributes} dict
    and, optionally, an C{asynqueue} task queue I{q} to dispatch the
    refits to. Then call my instance with a fitted model and an array
    of future offsets to get a C{Deferred} that fires with an
    L{Intervals} object.

    @keyword B: The number of bootstrap replicates.
    @keyword blockLength: The number of contiguous residuals in each
        resampled block, or C{None} for M{ceil(n^(1/3))}.
    @keyword alpha: The intervals cover M{1-alpha} of the replicate
        forecasts.
    @keyword seed: Seed for drawing the block starting positions, or
        C{None} for a fresh random seed.
    @keyword center: Set C{True} to center the residuals on zero
        before resampling them.
    @keyword minSuccess: The minimum fraction of replicates whose
        refits must succeed.
    @keyword N_maxParallel: The maximum number of refits to have
        pending in the task queue at once.
    """
    attributes = {
        'B': 500,
        'blockLength': None,
        'alpha': 0.05,
        'seed': None,
        'center': True,
        'minSuccess': 0.5,
        'N_maxParallel': 8,
    }

    def __init__(self, q=None, **kw):
        self.q = q
        for name, value in self.attributes.items():
            setattr(self, name, kw.pop(name, value))
        if kw:
            raise ValueError(sub("Unknown keyword(s): {}", ", ".join(kw)))
        if not int(self.B) == self.B or self.B < 1:
            raise ValueError(sub("Invalid number of replicates {}", self.B))
        if self.blockLength is not None and \
           (not int(self.blockLength) == self.blockLength or
            self.blockLength < 1):
            raise BlockLengthError(sub(
                "Invalid block length {}", self.blockLength))
        if not 0 < self.alpha < 1:
            raise ValueError(sub("Alpha {} not between 0 and 1", self.alpha))
        if not 0 < self.minSuccess <= 1:
            raise ValueError(sub(
                "Minimum success fraction {} not in (0, 1]",
                self.minSuccess))
        if self.N_maxParallel < 1:
            raise ValueError("Need to allow at least one parallel refit")

    def getBlockLength(self, n):
        """
        Returns the block length to use for a series of I{n}
        observations, raising L{BlockLengthError} if the series is
        shorter than that.
        """
        if self.blockLength is None:
            ell = int(np.ceil(np.cbrt(n)))
        else: ell = int(self.blockLength)
        if n < ell:
            raise BlockLengthError(sub(
                "Series of {:d} observations is shorter than the "+\
                "block length {:d}", n, ell))
        return ell

    def indices(self, n, N, ell, rs):
        """
        Returns an array of I{N} indices into I{n} residuals, made of
        blocks of I{ell} contiguous indices that start at positions
        drawn uniformly with replacement using C{RandomState} I{rs}.
        """
        N_blocks = -(-N // ell)
        starts = rs.randint(0, n-ell+1, N_blocks)
        return (starts[:,np.newaxis] + np.arange(ell)).ravel()[:N]

    def streams(self, R, h):
        """
        Returns a 2-D array with one row for each of my I{B} replicates
        of residuals resampled in blocks from I{R}, each extending
        I{h} values beyond the length of I{R}.

        All block starting positions are drawn up front from my
        I{seed}, so the streams don't depend on how the refits get
        scheduled.
        """
        n = len(R)
        ell = self.getBlockLength(n)
        rs = np.random.RandomState(self.seed)
        return np.vstack([
            R[self.indices(n, n+h, ell, rs)] for kb in range(self.B)])

    def dispatch(self, refitter, yStar):
        """
        Returns a C{Deferred} that fires with the result of calling
        I{refitter} with I{yStar}, in my task queue if I have one.
        """
        if self.q is None:
            return defer.maybeDeferred(refitter, yStar)
        return self.q.call(refitter, yStar)

    @defer.inlineCallbacks
    def __call__(self, fit, xf):
        """
        Computes prediction intervals for the fitted model I{fit} at
        future offsets I{xf}, returning a C{Deferred} that fires with
        an L{Intervals} object.

        Raises a C{ValueError} for any offset within the observed
        range, L{BlockLengthError} if the series is too short for the
        block length, or L{BootstrapError} if too few refits succeed.
        """
        def done(theta, kb):
            if isinstance(theta, failure.Failure):
                msg("Bootstrap refit {:d} raised {}", kb, theta.getErrorMessage())
                theta = None
            thetas[kb] = theta

        xf = np.atleast_1d(np.asarray(xf, dtype=float))
        if np.any(xf <= fit.x[-1]):
            raise ValueError(
                "Bootstrap intervals are only for future offsets")
        n, h = fit.n, len(xf)
        R = fit.residuals - fit.residuals.mean() \
            if self.center else fit.residuals
        RS = self.streams(R, h)
        refitter = Refitter(fit.curve, fit.x, fit.theta)
        thetas = [None]*self.B
        if self.q is None:
            for kb in range(self.B):
                thetas[kb] = refitter(fit.fitted + RS[kb,:n])
        else:
            dt = DeferredTracker(interval=0.05)
            for kb in range(self.B):
                d = self.dispatch(refitter, fit.fitted + RS[kb,:n])
                d.addBoth(done, kb)
                dt.put(d)
                yield dt.deferUntilFewer(self.N_maxParallel)
            yield dt.deferToAll()
        forecasts = [
            fit.curve(xf, *theta) + RS[kb,n:]
            for kb, theta in enumerate(thetas) if theta is not None]
        N_failed = self.B - len(forecasts)
        msg("{} bootstrap: {:d} of {:d} refits succeeded",
            fit.curve.name, len(forecasts), self.B)
        if not forecasts or len(forecasts) < self.minSuccess*self.B:
            raise BootstrapError(sub(
                "Only {:d} of {:d} {} bootstrap refits succeeded",
                len(forecasts), self.B, fit.curve.name))
        forecasts = np.vstack(forecasts)
        if not np.all(np.isfinite(forecasts)):
            forecasts = forecasts[np.all(np.isfinite(forecasts), axis=1)]
            N_failed = self.B - forecasts.shape[0]
            if forecasts.shape[0] < self.minSuccess*self.B:
                raise BootstrapError(sub(
                    "Too many non-finite {} bootstrap forecasts",
                    fit.curve.name))
        ell = self.getBlockLength(n)
        return Intervals(xf, forecasts, self.alpha, ell, N_failed)
