#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Core functionality shared by the tutorials.

This module contains configuration management, logging setup and the
input/output helpers for datasets and rendered images.
"""
