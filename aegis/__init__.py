#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Aegis Tracker v1.0
Трекер миссий, фокуса и учебы с системой достижений

Версия: 1.0.0
Дата: 2026-10-19
"""

__version__ = "1.0.0"
