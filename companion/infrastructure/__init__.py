"""Infrastructure - settings and database helpers"""
