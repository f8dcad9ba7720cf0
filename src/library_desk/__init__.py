"""Library Desk package.

Study-library backend organised by feature modules (shifts, admissions,
bookings, attendance, absence, payments, ...) with a thin Flask controller
layer over service/repository layers.
"""
