"""Hostal panel backend: reservations, rooms, housekeeping and reports for a small hostel."""
