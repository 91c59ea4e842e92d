"""Vehicle service appointment booking API"""
