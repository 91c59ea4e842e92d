"""Appointments domain - booking, slot availability and the status lifecycle"""
