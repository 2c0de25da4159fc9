#!/usr/bin/env python
# -*- coding: utf-8 -*-

"""
Legacy installation entry point for arimafit.

All package metadata, dependencies and the numba/statsmodels stack are declared
in pyproject.toml; this shim only serves tools that still invoke setup.py.
"""

import setuptools

if __name__ == "__main__":
    setuptools.setup()
