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
Utility stuff used by most modules of L{growthfit}: the module-level
L{msg} messenger, string formatting with L{sub}, the L{oops} errback,
and the L{Picklable} base class for objects that get shipped to worker
processes. Also exports the convenience class L{Args} from L{args}.
"""

import sys, re

from twisted.python import failure

# Exportable import
from .args import Args


def sub(proto, *args):
    """
    Format string prototype I{proto} with I{args}, raising a
    C{ValueError} that shows both if they don't go together.
    """
    try:
        return proto.format(*args)
    except (IndexError, KeyError, ValueError, AttributeError):
        raise ValueError(
            "Proto '{}' couldn't apply args {}".format(proto, args))

def oops(failureObj):
    """
    A handy universal errback for the top level of a script.

    Prints the failure's traceback (or whatever else I got) to STDOUT
    so you can figure out what went wrong.
    """
    if isinstance(failureObj, failure.Failure):
        info = failureObj.getTraceback()
    else: info = str(failureObj)
    print(sub("Failure:\n{}\n{}\n", '-'*40, info))


def numText(x, places=4):
    """
    Returns a compact text rendering of float I{x} with I{places}
    significant digits, or "nan"/"inf" as appropriate.
    """
    return sub("{:.{}g}", x, places)


class Picklable(object):
    """
    Base class for things that can be pickled, e.g., for dispatch to
    an C{asynqueue.ProcessQueue} worker.

    Only public instance attributes (or the ones named in
    C{__slots__}) are included in my state.
    """
    def __getstate__(self):
        dirClass = dir(self.__class__)
        if '__slots__' in dirClass:
            return {
                name: getattr(self, name)
                for name in self.__slots__ if hasattr(self, name)}
        state = {}
        for name in dir(self):
            if name.startswith('_') or name in dirClass:
                continue
            state[name] = getattr(self, name)
        return state

    def __setstate__(self, state):
        for name in state:
            setattr(self, name, state[name])


class Messenger(object):
    """
    My module-level C{msg} instance writes messages to STDOUT or
    another writable object, or nowhere at all.

    Most of my public API is in L{__call__}. L{writeLine},
    L{writeChar}, and L{lineWritten} can be useful on their own.
    """
    N_dashes = 100

    def __init__(self):
        self.fh = None
        self.newlineNeeded = False
        self._lineWasWritten = False

    def __bool__(self):
        return self.fh is not None

    def _dashes(self, breakBefore=False, breakAfter=False):
        return "".join([
            "\n" if breakBefore else "",
            "-" * self.N_dashes,
            "\n" if breakAfter else ""])

    def _write(self, text, newlineAfter):
        if self.fh is None:
            return
        try:
            self.fh.write(text)
            self.fh.flush()
        except (OSError, ValueError):
            # Closed or broken file handle, so stop logging
            self._fhSet(None)
            return
        self.newlineNeeded = newlineAfter

    def writeLine(self, line):
        """
        Writes the supplied I{line} of text to my current writable
        object I{fh}, with a trailing newline.

        If there's been a call to L{writeChar} since the last line was
        written, a newline goes out before I{line}. Nothing is written
        if I{fh} is C{None}.
        """
        if self.fh is None:
            return
        self._lineWasWritten = True
        prefix = "\n" if self.newlineNeeded else ""
        self._write(prefix + line + "\n", False)

    def writeChar(self, x):
        """
        Writes the single character I{x} to my current writable object
        I{fh}, with no newline, and notes that a newline is needed
        before the next line gets written.
        """
        self._write(x, True)

    def _fhSet(self, arg):
        if hasattr(arg, 'write'):
            fh = arg
        elif arg is True:
            fh = sys.stdout
        else: fh = None
        fhPrev = self.fh
        if fh is not fhPrev:
            if fhPrev is not None and fhPrev is not sys.stdout:
                fhPrev.close()
            self.fh = fh
        return fhPrev

    def lineWritten(self):
        """
        Returns C{True} if a line was written since the last time this
        was called.
        """
        yes = self._lineWasWritten
        self._lineWasWritten = False
        return yes

    def __call__(self, *args):
        """
        Call at the module level with C{msg}.

        Call with C{True} as the first or only argument to log to
        STDOUT, or with an open file handle to log to that. Call with
        C{False} or C{None} to stop logging. With a single such
        argument, returns the previous file handle.

        Otherwise, call with a string formatting prototype and its
        formatting arguments to log a line of text.

        Precede the prototype with C{0} or C{-1} to insert a blank line
        before the text, or follow it with C{0} or C{-1} to append a
        blank line. A single hyphen ("-") before or after the text adds
        a row of hyphens as a separator.

        Call with no arguments just to get the present file handle.
        """
        args = list(args)
        fh = self.fh
        if args:
            first = args[0]
            if hasattr(first, 'write') or first is None \
               or isinstance(first, bool):
                fh = self._fhSet(args.pop(0))
        if not args:
            return fh
        if len(args) == 1:
            arg = args[0]
            if not arg:
                self.writeChar('\n')
            elif arg == '-':
                self.writeLine(self._dashes(True))
            elif len(arg) == 1:
                self.writeChar(arg)
            else: self.writeLine(arg)
            return self.fh
        prefix = ""; suffix = ""
        for repeat in range(2):
            if isinstance(args[0], int):
                prefix += ' ' * args[0] if args[0] > 0 else '\n'
            elif args[0] == '-':
                prefix += self._dashes(True, True)
            else: break
            args.pop(0)
        N_braces = len(re.findall(r'\{[^\{]*\}', args[0]))
        while len(args) > N_braces + 1:
            if args[-1] == '-':
                suffix += self._dashes(True)
            elif args[-1] in (-1, 0):
                suffix += "\n"
            else: break
            args.pop()
        self.writeLine(prefix + sub(*args) + suffix)
        return fh
msg = Messenger()
