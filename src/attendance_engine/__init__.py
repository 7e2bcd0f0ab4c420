"""Attendance time-engine package.

This package is organized by feature modules (sessions, attendance, breaks,
payroll, audit, ...) with a thin Flask CLI layer on top of SOLID
service/repository layers.
"""
