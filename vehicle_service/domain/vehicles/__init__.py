"""Vehicles domain - customer vehicle registration and images"""
