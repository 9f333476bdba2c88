"""Classroom Attendance package.

Organized by feature modules (roster, assignments, sessions, attendance,
reports) with a thin Flask controller layer over service/repository layers.
"""
