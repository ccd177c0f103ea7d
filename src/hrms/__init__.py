"""HRMS backend package.

Organized by feature modules (attendance, leaves, payroll, ...) with a thin
Flask controller layer on top of service/repository layers.
"""
