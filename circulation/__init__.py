#!/usr/bin/env python

"""
    Circulation, the lending core of a library: inventory, loans,
    fines and reservation queues.

    :copyright: (c) 2015 by AUTHORS
    :license: see LICENSE for more details
"""

__version__ = '0.1.0'
