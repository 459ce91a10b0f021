# Released under MIT License.
# Copyright (c) 2025 Ladislav Bartos and Robert Vacha Lab

"""
Core infrastructure for zipper.

This module collects the foundational pieces shared by the archiver and the
command-line front end: configuration, error types and structured logging.
"""
