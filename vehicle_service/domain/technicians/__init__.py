"""Technicians domain - workshop staff, working hours and availability"""
