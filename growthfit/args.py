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
#
# Unlike all other code this project, which is licensed as above, the
# code of this module args.py has been dedicated by the author into
# the public domain, still on an "AS IS" BASIS, WITHOUT WARRANTIES OR
# CONDITIONS OF ANY KIND.

"""
A compact wrapper that makes argparse even easier. The
L{scripts.forecast} script shows how it is used.
"""

import re, argparse, textwrap


class Args(object):
    """
    Convenience class for compact and sensible commandline argument
    parsing.

    Construct me with a text description of your application. The
    first paragraph becomes the description and any others the
    epilog. Then call me once for each option, with a single-letter
    short option ("-x"), a long option ("--ex-why"), a default value
    unless the option is just a flag, and help text. Access the option
    value as my attribute named after the short letter.

    Call me with just a text description to accept positional
    arguments, which you then access as my sequence items.

    Call me with a callable to run it, unless help was requested, when
    its module is being run as a script. Call L{parse} with a list of
    argument strings to parse those instead of C{sys.argv}, which is
    handy for testing.
    """
    def __init__(self, text):
        self.args = None
        paras = [
            textwrap.fill(" ".join(x.split()))
            for x in re.split(r'\n\s*\n', text.strip()) if x.strip()]
        kw = {'formatter_class': argparse.RawDescriptionHelpFormatter}
        if paras: kw['description'] = paras.pop(0)
        if paras: kw['epilog'] = "\n\n".join(paras)
        self.parser = argparse.ArgumentParser(**kw)

    def __bool__(self):
        return len(self) > 0

    def __iter__(self):
        for x in self._positionals():
            yield x

    def __len__(self):
        return len(self._positionals())

    def __getitem__(self, k):
        return self._positionals()[k]

    def __getattr__(self, name):
        if name.startswith('__') or name in ('args', 'parser'):
            raise AttributeError(name)
        if self.args is None:
            self.parse()
        return getattr(self.args, name, None)

    def _positionals(self):
        if self.args is None:
            self.parse()
        return getattr(self.args, '_args_', None) or []

    def parse(self, argv=None):
        """
        Parses the list of argument strings I{argv}, or the command
        line if it's C{None}, and returns me for convenience.
        """
        self.args = self.parser.parse_args(argv)
        return self

    def withDefault(self, text, default):
        """
        Appends the I{default} value to help I{text} unless the text
        already mentions it.
        """
        if "default" not in text.lower():
            text += " [{}]".format(default)
        return text

    def __call__(self, *args):
        if len(args) == 4:
            shortArg, longArg, default, helpText = args
            self.parser.add_argument(
                shortArg, longArg, dest=shortArg[1:], default=default,
                action='store', type=type(default),
                help=self.withDefault(helpText, default))
            return
        if len(args) == 3:
            shortArg, longArg, helpText = args
            self.parser.add_argument(
                shortArg, longArg, dest=shortArg[1:],
                action='store_true', help=helpText)
            return
        if len(args) == 1:
            arg = args[0]
            if callable(arg):
                if arg.__module__ == '__main__' and not self.h:
                    return arg()
                return
            self.parser.add_argument(
                '_args_', default=None, nargs='*', help=arg)
            return
        raise ValueError(
            "Call with 1, 3, or 4 args, not {:d}".format(len(args)))
