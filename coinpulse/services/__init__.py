"""
Market data services: fetching, caching, polling and chart transforms.
"""
