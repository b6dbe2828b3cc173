"""Catechism Tracker package.

Feature modules (attendance, evaluations, absences, reconciliation, ...) keep
the service/repository split; a thin Flask controller layer sits on top and
Google Sheets is treated as a mirror of the MySQL record store.
"""
