"""External services - object storage"""
