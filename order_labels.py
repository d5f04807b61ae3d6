#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Aggregate order detail exports and print 5x4 cm prescription labels.
"""

import sys

import order_label_converter.cli


if __name__ == "__main__":
	sys.exit(order_label_converter.cli.main())
