#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Static documentation site: project configuration, document front matter and
section listings.
"""
