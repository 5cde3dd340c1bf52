#!/usr/bin/env python

"""
    Core module for Circulation: inventory, loans, fines, reservations
    
    :copyright: (c) 2015 by AUTHORS
    :license: see LICENSE for more details
"""

import logging
from circulation.configs import LOG_LEVEL

logging.getLogger("circulation").setLevel(LOG_LEVEL.upper())
