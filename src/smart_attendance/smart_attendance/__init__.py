"""Smart Attendance core package.

Organized by feature modules (events, attendance, penalties, sync, ...) with
thin Flask controllers on top of service/repository layers.
"""
